"""
Error handling for the Kaleidoscope parser.

Every syntax error carries the offending token and, where there is one, the
token the grammar required at that point. The parser never recovers: the
first error ends the parse.

"""

from typing import Optional, List, Union

from ..lexer.tokens import Token, TokenType, SourceLocation, TOKEN_SPELLINGS
from ..lexer.errors import Diagnostic


class ParseError(Exception):
    """
    Exception raised when the parser encounters a syntax error.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
        token: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )
        self.token = token

    @property
    def location(self) -> Optional[SourceLocation]:
        return self.diagnostic.location

    def __str__(self) -> str:
        return str(self.diagnostic)


class UnexpectedTokenError(ParseError):
    """A token that no grammar production accepts at this position."""

    def __init__(self, token: Token, context: str = "expression"):
        super().__init__(
            message=f"Unexpected {token.describe()} in {context}",
            location=token.location,
            token=token,
            code="P001",
            help_text=f"A {context} cannot start with {token.describe()}.",
            suggestions=suggest_for_unexpected(token)
        )
        self.context = context


class ExpectedTokenError(ParseError):
    """A required token is missing or a different token is in its place."""

    def __init__(self, expected: Union[TokenType, str], found: Token, context: Optional[str] = None):
        expected_str = describe_expected(expected)
        message = f"Expected {expected_str}, found {found.describe()}"
        if context:
            message += f" {context}"
        super().__init__(
            message=message,
            location=found.location,
            token=found,
            code="P002",
            help_text=f"The parser expected to see {expected_str} at this position, but found {found.describe()} instead.",
            suggestions=suggest_missing_token(expected)
        )
        self.expected = expected
        self.found = found


class DuplicateParameterError(ParseError):
    """A prototype names the same parameter twice."""

    def __init__(self, function_name: str, parameter: str, token: Token):
        super().__init__(
            message=f"Duplicate parameter '{parameter}' in prototype of '{function_name}'",
            location=token.location,
            token=token,
            code="P004",
            help_text="Each parameter of a function must have a distinct name.",
            suggestions=[f"Rename one of the '{parameter}' parameters"]
        )
        self.function_name = function_name
        self.parameter = parameter


class NestingTooDeepError(ParseError):
    """Expressions are nested deeper than the parser allows."""

    def __init__(self, max_depth: int, token: Token):
        super().__init__(
            message=f"Expression nesting exceeds the maximum depth of {max_depth}",
            location=token.location,
            token=token,
            code="P006",
            help_text="The parser is recursive; deeply nested expressions are rejected before they exhaust the stack.",
            suggestions=["Split the expression into helper functions", "Raise Parser(max_depth=...)"]
        )
        self.max_depth = max_depth


def describe_expected(expected: Union[TokenType, str]) -> str:
    if isinstance(expected, TokenType):
        return TOKEN_SPELLINGS[expected]
    return expected


def suggest_missing_token(expected: Union[TokenType, str]) -> List[str]:
    """Suggest what token might be missing."""
    token_suggestions = {
        TokenType.SEMICOLON: ["Add a semicolon ';' to end the statement"],
        TokenType.RIGHT_PAREN: ["Add a closing parenthesis ')'"],
        TokenType.LEFT_PAREN: ["Add an opening parenthesis '(' after the function name"],
        TokenType.THEN: ["An 'if' needs a 'then' branch"],
        TokenType.ELSE: ["An 'if' needs an 'else' branch; both branches are required"],
        TokenType.IN: ["Add 'in' before the loop body"],
        TokenType.COMMA: ["Separate call arguments with ','"],
        TokenType.IDENTIFIER: ["Function and parameter names must be identifiers"],
    }
    return token_suggestions.get(expected, [])


def suggest_for_unexpected(token: Token) -> List[str]:
    if token.type == TokenType.EOF:
        return ["The input ended in the middle of an expression"]
    if token.type == TokenType.OPERATOR:
        return ["Binary operators need a left operand; there are no unary operators"]
    if token.type in (TokenType.THEN, TokenType.ELSE, TokenType.IN):
        return ["Check for a missing operand before this keyword"]
    return []


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Expected token not found",
    "P004": "Duplicate parameter",
    "P006": "Expression nesting too deep",
}
