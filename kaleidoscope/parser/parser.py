"""
Kaleidoscope recursive descent parser.

Expressions are parsed with precedence climbing: one primary expression,
then a loop over trailing binary operators. Whenever the operator after the
right operand binds tighter than the current one, the right operand absorbs
it first, so 1+2*3 is 1+(2*3) and 1*2+3 is (1*2)+3. Equal precedence
associates to the left.

The parser holds the token list and a cursor, nothing else. There is no error
recovery: the first syntax error is raised and the partial program is thrown
away.

Every later stage walks the tree recursively, so max_depth caps the height
of every node the parser builds, operator chains included: 1+1+...+1 with
129 terms is 129 levels deep. Parentheses add no tree level but do add parser
recursion, so their nesting is capped by the same number. Hostile input gets
a ParseError here instead of a RecursionError downstream.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Union

from ..lexer.tokens import Token, TokenType, BinaryOperator, Precedence
from ..lexer.errors import LexerError
from ..recursion import recursion_headroom
from .ast_nodes import (
    Expression, NumberLiteral, VariableRef, BinaryOp, Call, Conditional, ForLoop,
    Prototype, Definition, Program, SourceSpan
)
from .errors import (
    ParseError, UnexpectedTokenError, ExpectedTokenError,
    DuplicateParameterError, NestingTooDeepError
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 128

# Interpreter frames one nesting level can cost while parsing
FRAMES_PER_LEVEL = 6


class Parser:
    """
    Kaleidoscope parser.

    Consumes a token list positionally and fills a Program.
    """

    def __init__(self, tokens: Sequence[Token], max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize parser with a list of tokens.

        Args:
            tokens: Tokens from the lexer (no EOF token needed)
            max_depth: Maximum expression nesting depth
        """
        self.tokens = list(tokens)
        self.max_depth = max_depth
        self.current = 0
        self.depth = 0
        self.group_depth = 0
        self._heights: Dict[int, int] = {}

        last_location = self.tokens[-1].location if self.tokens else None
        self._eof = Token(TokenType.EOF, "", None, last_location)

        # Prefix parsing functions (tokens that can start a primary expression)
        self.prefix_parsers: Dict[TokenType, Callable[[], Expression]] = {
            TokenType.NUMBER: self._parse_number,
            TokenType.IDENTIFIER: self._parse_identifier,
            TokenType.LEFT_PAREN: self._parse_grouping,
            TokenType.IF: self._parse_conditional,
            TokenType.FOR: self._parse_for_loop,
        }

    def parse(self) -> Program:
        """
        Parse the whole token list into a Program.

        Returns:
            The sealed Program

        Raises:
            ParseError: On the first syntax error
        """
        self.current = 0
        self.depth = 0
        self.group_depth = 0
        self._heights = {}
        program = Program()

        # Constructs and parentheses nest independently, each up to max_depth
        with recursion_headroom(2 * self.max_depth * FRAMES_PER_LEVEL):
            self._parse_declarations(program)
        self._heights = {}

        logger.debug("Parsed %d externs, %d definitions, %d top-level expressions",
                     len(program.externs), len(program.definitions),
                     len(program.top_level_expressions))
        return program.seal()

    def _parse_declarations(self, program: Program):
        while not self._is_at_end():
            if self._check(TokenType.EXTERN):
                program.add_extern(self.parse_extern())
            elif self._check(TokenType.DEF):
                program.add_definition(self.parse_definition())
            elif self._match(TokenType.SEMICOLON):
                # Empty statement
                continue
            else:
                expression = self.parse_expression()
                self._consume(TokenType.SEMICOLON, "after top-level expression")
                program.add_expression(expression)
                logger.debug("Parsed top-level expression %r", expression)

    # Declarations

    def parse_extern(self) -> Prototype:
        """extern ::= 'extern' prototype ';'"""
        self._consume(TokenType.EXTERN)
        prototype = self.parse_prototype()
        self._consume(TokenType.SEMICOLON, "after extern declaration")
        logger.debug("Parsed extern %s/%d", prototype.name, prototype.arity)
        return prototype

    def parse_definition(self) -> Definition:
        """definition ::= 'def' prototype expression ';'"""
        self._consume(TokenType.DEF)
        prototype = self.parse_prototype()
        body = self.parse_expression()
        self._consume(TokenType.SEMICOLON, "after function definition")
        logger.debug("Parsed definition %s/%d", prototype.name, prototype.arity)
        return Definition(prototype, body)

    def parse_prototype(self) -> Prototype:
        """prototype ::= identifier '(' identifier* ')'"""
        name_token = self._consume(TokenType.IDENTIFIER, "as function name")
        self._consume(TokenType.LEFT_PAREN, "after function name")

        params: List[str] = []
        while self._check(TokenType.IDENTIFIER):
            param_token = self._advance()
            if param_token.value in params:
                raise DuplicateParameterError(name_token.value, param_token.value, param_token)
            params.append(param_token.value)
            # Parameters are space separated; a comma between them is tolerated
            self._match(TokenType.COMMA)

        self._consume(TokenType.RIGHT_PAREN, "to close parameter list")
        return Prototype(name_token.value, params, self._span_from(name_token))

    # Expressions

    def parse_expression(self) -> Expression:
        """expression ::= primary (operator primary)*"""
        if self.depth >= self.max_depth:
            raise NestingTooDeepError(self.max_depth, self._peek())

        self.depth += 1
        try:
            return self._parse_operator_chain()
        finally:
            self.depth -= 1

    def _parse_operator_chain(self) -> Expression:
        left = self._parse_primary()
        return self._parse_binary_rhs(Precedence.NONE + 1, left)

    def _parse_primary(self) -> Expression:
        prefix_parser = self.prefix_parsers.get(self._peek().type)
        if prefix_parser is None:
            raise UnexpectedTokenError(self._peek())
        return prefix_parser()

    def _parse_binary_rhs(self, min_precedence: int, left: Expression) -> Expression:
        """
        Fold the operator chain following `left`.

        Only operators binding at least as tightly as min_precedence are
        consumed; anything weaker is left for the caller.
        """
        while True:
            precedence = self._current_precedence()
            if precedence < min_precedence:
                return left

            operator_token = self._advance()
            right = self._parse_primary()

            if precedence < self._current_precedence():
                right = self._parse_binary_rhs(precedence + 1, right)

            span = self._join_spans(left, right)
            left = self._track(BinaryOp(operator_token.value, left, right, span), operator_token)

    def _current_precedence(self) -> int:
        token = self._peek()
        if token.type != TokenType.OPERATOR:
            return Precedence.NONE
        return token.value.precedence

    # Primary expressions

    def _parse_number(self) -> NumberLiteral:
        token = self._advance()
        return NumberLiteral(token.value, self._span_from(token))

    def _parse_identifier(self) -> Expression:
        """identifier | identifier '(' (expression (',' expression)*)? ')'"""
        name_token = self._advance()
        if not self._match(TokenType.LEFT_PAREN):
            return VariableRef(name_token.value, self._span_from(name_token))

        args: List[Expression] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                args.append(self.parse_expression())
                if self._check(TokenType.RIGHT_PAREN):
                    break
                if not self._match(TokenType.COMMA):
                    raise ExpectedTokenError("',' or ')'", self._peek(), "in argument list")

        self._consume(TokenType.RIGHT_PAREN, "after arguments")
        return self._track(Call(name_token.value, args, self._span_from(name_token)), name_token)

    def _parse_grouping(self) -> Expression:
        open_token = self._advance()
        if self.group_depth >= self.max_depth:
            raise NestingTooDeepError(self.max_depth, open_token)

        self.group_depth += 1
        try:
            expression = self._parse_operator_chain()
        finally:
            self.group_depth -= 1
        self._consume(TokenType.RIGHT_PAREN, "after parenthesized expression")
        return expression

    def _parse_conditional(self) -> Conditional:
        """'if' expression 'then' expression 'else' expression"""
        start_token = self._advance()
        condition = self.parse_expression()
        self._consume(TokenType.THEN, "after 'if' condition")
        then_branch = self.parse_expression()
        self._consume(TokenType.ELSE, "after 'then' branch")
        else_branch = self.parse_expression()
        return self._track(
            Conditional(condition, then_branch, else_branch, self._span_from(start_token)),
            start_token
        )

    def _parse_for_loop(self) -> ForLoop:
        """'for' identifier '=' expression ',' expression (',' expression)? 'in' expression"""
        start_token = self._advance()
        variable = self._consume(TokenType.IDENTIFIER, "after 'for'").value

        if not (self._check(TokenType.OPERATOR) and self._peek().value == BinaryOperator.EQUALS):
            raise ExpectedTokenError("'='", self._peek(), "after loop variable")
        self._advance()

        start = self.parse_expression()
        self._consume(TokenType.COMMA, "after loop start value")
        end = self.parse_expression()

        step = None
        if self._match(TokenType.COMMA):
            step = self.parse_expression()

        self._consume(TokenType.IN, "before loop body")
        body = self.parse_expression()
        return self._track(ForLoop(variable, start, end, step, body, self._span_from(start_token)), start_token)

    # Utility methods

    def _track(self, node: Expression, token: Token) -> Expression:
        """Record the height of a new interior node; leaves count as 1."""
        height = 1 + max((self._heights.get(id(child), 1) for child in node.children()), default=0)
        if height > self.max_depth:
            raise NestingTooDeepError(self.max_depth, token)
        self._heights[id(node)] = height
        return node

    def _match(self, token_type: TokenType) -> bool:
        """Check if current token matches type and consume if so."""
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches type without consuming."""
        return self._peek().type == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        if not self._is_at_end():
            self.current += 1
        return self._previous()

    def _is_at_end(self) -> bool:
        return self.current >= len(self.tokens)

    def _peek(self) -> Token:
        """Return current token without consuming."""
        if self.current < len(self.tokens):
            return self.tokens[self.current]
        return self._eof

    def _previous(self) -> Token:
        if self.current > 0:
            return self.tokens[self.current - 1]
        return self._peek()

    def _consume(self, token_type: TokenType, context: Optional[str] = None) -> Token:
        """Consume token of expected type or raise error."""
        if self._check(token_type):
            return self._advance()
        raise ExpectedTokenError(token_type, self._peek(), context)

    def _span_from(self, start_token: Token) -> Optional[SourceSpan]:
        end_location = self._previous().location
        if start_token.location is None or end_location is None:
            return None
        return SourceSpan(start_token.location, end_location)

    @staticmethod
    def _join_spans(left: Expression, right: Expression) -> Optional[SourceSpan]:
        if left.span is None or right.span is None:
            return None
        return SourceSpan(left.span.start, right.span.end)


@dataclass
class ParseResult:
    """Outcome of try_parse: either a program or the error that stopped the parse."""
    program: Optional[Program]
    error: Optional[Union[LexerError, ParseError]] = None

    def has_errors(self) -> bool:
        return self.error is not None

    def unwrap(self) -> Program:
        """Return the program, or raise the error that prevented it."""
        if self.error is not None:
            raise self.error
        return self.program


def parse_tokens(tokens: Sequence[Token], max_depth: int = DEFAULT_MAX_DEPTH) -> Program:
    """Parse an already tokenized program."""
    return Parser(tokens, max_depth=max_depth).parse()


def parse_string(source: str, filename: str = "<string>", max_depth: int = DEFAULT_MAX_DEPTH) -> Program:
    """
    Convenience function to parse a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting
        max_depth: Maximum expression nesting depth

    Returns:
        Program

    Raises:
        LexerError: If tokenizing fails
        ParseError: If parsing fails
    """
    from ..lexer import tokenize_string

    tokens = tokenize_string(source, filename)
    return parse_tokens(tokens, max_depth=max_depth)


def parse_file(filepath: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Program:
    """
    Convenience function to parse a source file.

    Raises:
        LexerError: If tokenizing fails
        ParseError: If parsing fails
        IOError: If file cannot be read
    """
    from ..lexer import tokenize_file

    tokens = tokenize_file(filepath)
    return parse_tokens(tokens, max_depth=max_depth)


def try_parse(source: str, filename: str = "<string>", max_depth: int = DEFAULT_MAX_DEPTH) -> ParseResult:
    """Parse a source string, returning the error as a value instead of raising it."""
    try:
        return ParseResult(parse_string(source, filename, max_depth=max_depth))
    except (LexerError, ParseError) as e:
        logger.debug("Parse of %s failed: %s", filename, e.diagnostic.message)
        return ParseResult(None, e)
