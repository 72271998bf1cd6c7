"""
Token definitions for the Kaleidoscope lexer.

This module defines the closed set of token types the language knows about:
- Keywords (def, extern, if/then/else, for/in)
- Binary operators and their precedence table
- Number literals and identifiers
- Punctuation

"""

from enum import Enum, IntEnum, auto
from dataclasses import dataclass, field
from typing import Any, Optional


class TokenType(Enum):
    """
    Enumeration of all token types in Kaleidoscope.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    EOF = auto()                    # End of input (never emitted by the lexer)

    # ========================================================================
    # Literals and identifiers
    # ========================================================================
    NUMBER = auto()                 # 42, 3.14, 1e10
    IDENTIFIER = auto()             # foo, x_1

    # ========================================================================
    # Keywords
    # ========================================================================
    DEF = auto()                    # def
    EXTERN = auto()                 # extern
    IF = auto()                     # if
    THEN = auto()                   # then
    ELSE = auto()                   # else
    FOR = auto()                    # for
    IN = auto()                     # in

    # ========================================================================
    # Operators
    # ========================================================================
    OPERATOR = auto()               # + - * / % = <

    # ========================================================================
    # Punctuation
    # ========================================================================
    LEFT_PAREN = auto()             # (
    RIGHT_PAREN = auto()            # )
    COMMA = auto()                  # ,
    SEMICOLON = auto()              # ;


class BinaryOperator(Enum):
    """Binary operators, keyed by their source character."""
    PLUS = "+"
    MINUS = "-"
    TIMES = "*"
    DIVIDE = "/"
    MODULO = "%"
    EQUALS = "="
    LESS_THAN = "<"

    def __str__(self) -> str:
        return self.value

    @property
    def precedence(self) -> "Precedence":
        return PRECEDENCES[self]


class Precedence(IntEnum):
    """Operator precedence levels (higher binds tighter)."""
    NONE = -1
    COMPARISON = 10     # =, <
    TERM = 20           # +, -
    FACTOR = 40         # *, /, %


PRECEDENCES = {
    BinaryOperator.EQUALS: Precedence.COMPARISON,
    BinaryOperator.LESS_THAN: Precedence.COMPARISON,
    BinaryOperator.PLUS: Precedence.TERM,
    BinaryOperator.MINUS: Precedence.TERM,
    BinaryOperator.TIMES: Precedence.FACTOR,
    BinaryOperator.DIVIDE: Precedence.FACTOR,
    BinaryOperator.MODULO: Precedence.FACTOR,
}


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token.

    Two tokens are equal when their type and value agree; the raw spelling
    and where they came from in the source do not matter.
    """
    type: TokenType
    lexeme: str = field(compare=False)  # Raw text from source
    value: Any                      # float for NUMBER, str for IDENTIFIER, BinaryOperator for OPERATOR
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __str__(self) -> str:
        if self.value is not None and self.value != self.lexeme:
            return f"{self.type.name}({self.lexeme!r} -> {self.value!r})"
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")

    def describe(self) -> str:
        """Human readable form used in diagnostics."""
        if self.type == TokenType.EOF:
            return "end of input"
        return f"'{self.lexeme}'"

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a keyword."""
        return self.type in KEYWORD_TYPES

    @property
    def is_operator(self) -> bool:
        return self.type == TokenType.OPERATOR

    @property
    def is_identifier(self) -> bool:
        return self.type == TokenType.IDENTIFIER


# Lookup tables used by the lexer for keyword and punctuation recognition

KEYWORDS = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
    "if": TokenType.IF,
    "then": TokenType.THEN,
    "else": TokenType.ELSE,
    "for": TokenType.FOR,
    "in": TokenType.IN,
}

KEYWORD_TYPES = frozenset(KEYWORDS.values())

PUNCTUATION = {
    ",": TokenType.COMMA,
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    ";": TokenType.SEMICOLON,
}

OPERATORS = {op.value: op for op in BinaryOperator}

# Spelling of each token type, for "expected X" messages
TOKEN_SPELLINGS = {
    TokenType.EOF: "end of input",
    TokenType.NUMBER: "number",
    TokenType.IDENTIFIER: "identifier",
    TokenType.OPERATOR: "operator",
    **{token_type: f"'{text}'" for text, token_type in KEYWORDS.items()},
    **{token_type: f"'{text}'" for text, token_type in PUNCTUATION.items()},
}


def make_token(token_type: TokenType, value: Any = None, lexeme: Optional[str] = None) -> Token:
    """
    Build a token without a source location.

    Handy for tests and for tools that synthesize token streams.
    """
    if lexeme is None:
        if token_type == TokenType.NUMBER:
            lexeme = repr(float(value))
        elif token_type in (TokenType.IDENTIFIER, TokenType.OPERATOR):
            lexeme = str(value)
        else:
            lexeme = TOKEN_SPELLINGS[token_type].strip("'")
    return Token(token_type, lexeme, value)
