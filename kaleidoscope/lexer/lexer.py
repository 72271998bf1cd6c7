"""
Kaleidoscope Lexer - turns source text into tokens.

The lexer is a small hand-written state machine over characters. Every token
is produced on demand by next_token(); tokenize() and iteration just drive it
to the end of the input. No end-of-input token is emitted, the sequence
simply stops.

Words are read as a maximal run of [A-Za-z0-9_.] and classified afterwards:
a run that starts with a digit must be a decimal number, anything else is a
keyword or an identifier. So "def" is a keyword while "defx" is an
identifier, and "1.2.3" is a lexical error rather than two tokens.
"""

import math
import re
from typing import Iterator, List, Optional

from .tokens import (
    Token, TokenType, SourceLocation, KEYWORDS, OPERATORS, PUNCTUATION
)
from .errors import InvalidCharacterError, InvalidNumericLiteralError


NUMBER_PATTERN = re.compile(r'\d+(?:\.\d*)?(?:[eE]\d+)?')

COMMENT_CHAR = '#'


def is_word_start(char: str) -> bool:
    """Letters, digits and underscore (ASCII only) start a word."""
    return (char.isascii() and char.isalnum()) or char == '_'


def is_word_continue(char: str) -> bool:
    return is_word_start(char) or char == '.'


class Lexer:
    """
    Kaleidoscope lexical analyzer.

    Converts source code text into a stream of tokens. The first lexical
    error aborts lexing.
    """

    def __init__(self, source: str, filename: str = "<unknown>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
        """
        self.source = source
        self.filename = filename
        self.reset()

    def reset(self):
        """Rewind to the start of the input."""
        self.pos = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens lazily, starting over from the beginning of the input."""
        self.reset()
        while True:
            token = self.next_token()
            if token is None:
                return
            yield token

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source code.

        Returns:
            List of tokens (no EOF token)

        Raises:
            LexerError: On the first invalid character or number
        """
        return list(self)

    def next_token(self) -> Optional[Token]:
        """Get the next token from the source, or None at end of input."""
        self._skip_whitespace_and_comments()

        if self._at_end():
            return None

        location = self._location()
        current_char = self.source[self.pos]

        if is_word_start(current_char):
            return self._tokenize_word(location)

        if current_char in PUNCTUATION:
            self._advance()
            return Token(PUNCTUATION[current_char], current_char, None, location)

        if current_char in OPERATORS:
            self._advance()
            return Token(TokenType.OPERATOR, current_char, OPERATORS[current_char], location)

        raise InvalidCharacterError(current_char, location)

    def _tokenize_word(self, location: SourceLocation) -> Token:
        """Tokenize a number, keyword or identifier."""
        start_pos = self.pos
        while not self._at_end() and is_word_continue(self.source[self.pos]):
            self._advance()

        lexeme = self.source[start_pos:self.pos]

        if lexeme[0].isdigit():
            if not NUMBER_PATTERN.fullmatch(lexeme):
                raise InvalidNumericLiteralError(lexeme, location)
            value = float(lexeme)
            if not math.isfinite(value):
                raise InvalidNumericLiteralError(lexeme, location, overflow=True)
            return Token(TokenType.NUMBER, lexeme, value, location)

        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        value = lexeme if token_type == TokenType.IDENTIFIER else None
        return Token(token_type, lexeme, value, location)

    def _skip_whitespace_and_comments(self):
        """Skip whitespace and '#' line comments."""
        while not self._at_end():
            char = self.source[self.pos]
            if char.isspace():
                self._advance()
            elif char == COMMENT_CHAR:
                while not self._at_end() and self.source[self.pos] != '\n':
                    self._advance()
            else:
                break

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _advance(self):
        """Advance position by one character, updating line/column."""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Raises:
        LexerError: If lexing fails
    """
    return Lexer(source, filename).tokenize()


def tokenize_file(filepath: str) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        LexerError: If lexing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize_string(source, filepath)
