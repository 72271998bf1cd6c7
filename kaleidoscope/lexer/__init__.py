"""
Kaleidoscope Lexer Package

Implements the lexical analyzer (tokenizer) for the Kaleidoscope language.

Key Features:
- Lazy, restartable token stream (next_token / iteration)
- Keyword classification after maximal-munch word reading
- Decimal number literals as 64-bit floats
- '#' line comments
- Source location tracking for diagnostics

"""

from .tokens import (
    Token, TokenType, BinaryOperator, Precedence, SourceLocation,
    PRECEDENCES, KEYWORDS, make_token
)
from .lexer import Lexer, tokenize_string, tokenize_file
from .errors import (
    Diagnostic, LexerError, InvalidNumericLiteralError, InvalidCharacterError
)

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "BinaryOperator",
    "Precedence",
    "PRECEDENCES",
    "KEYWORDS",
    "SourceLocation",
    "make_token",
    "tokenize_string",
    "tokenize_file",
    "Diagnostic",
    "LexerError",
    "InvalidNumericLiteralError",
    "InvalidCharacterError",
]
