"""
Error handling for the Kaleidoscope lexer.

Provides error reporting with source location information and
IDE-friendly diagnostics.

"""

from typing import Optional, List
from dataclasses import dataclass
from .tokens import SourceLocation


@dataclass
class Diagnostic:
    """Base class for diagnostics (errors, warnings, info)."""
    message: str
    location: Optional[SourceLocation]
    severity: str  # "error", "warning", "info", "hint"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        result = f"{severity_prefix}: {self.message}\n"
        if self.location is not None:
            result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result


class LexerError(Exception):
    """
    Exception raised when the lexer encounters a fatal error.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
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

    @property
    def location(self) -> Optional[SourceLocation]:
        return self.diagnostic.location

    def __str__(self) -> str:
        return str(self.diagnostic)


class InvalidNumericLiteralError(LexerError):
    """A run that starts with a digit is not a valid decimal number."""

    def __init__(self, text: str, location: Optional[SourceLocation] = None, overflow: bool = False):
        if overflow:
            help_text = "The value is too large for a 64-bit float."
            suggestions = ["Use a smaller literal (the largest is about 1.8e308)"]
        else:
            help_text = "Number literals are decimal: digits, an optional fraction and an optional exponent."
            suggestions = _numeric_suggestions(text)
        super().__init__(
            message=f"Invalid numeric literal: '{text}'",
            location=location,
            code="L003",
            help_text=help_text,
            suggestions=suggestions
        )
        self.text = text
        self.overflow = overflow


class InvalidCharacterError(LexerError):
    """A character that cannot start any token."""

    def __init__(self, char: str, location: Optional[SourceLocation] = None):
        if char.isprintable():
            help_text = f"The character '{char}' is not valid in Kaleidoscope source code."
        else:
            help_text = f"Non-printable character (Unicode: U+{ord(char):04X}) is not allowed."
        super().__init__(
            message=f"Invalid character: '{char}'",
            location=location,
            code="L001",
            help_text=help_text
        )
        self.char = char


def _numeric_suggestions(text: str) -> List[str]:
    if text.count(".") > 1:
        return ["Use at most one decimal point in a number"]
    if any(c.isalpha() and c not in "eE" for c in text):
        return ["Identifiers cannot start with a digit"]
    return ["Check the numeric format"]


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Invalid character",
    "L003": "Invalid numeric literal",
}
