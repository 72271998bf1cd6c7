"""
Errors raised while evaluating a Kaleidoscope program.

Name and arity problems reuse the analyzer's resolution errors; the classes
here cover what only shows up at run time.

"""

from typing import Optional

from ..lexer.tokens import SourceLocation
from ..lexer.errors import Diagnostic


class EvaluationError(Exception):
    """
    Exception raised when evaluation cannot continue.
    """

    def __init__(self, message: str, location: Optional[SourceLocation] = None,
                 code: Optional[str] = None, help_text: Optional[str] = None):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


class UnboundExternError(EvaluationError):
    """An extern with no builtin implementation behind it."""

    def __init__(self, name: str, reason: Optional[str] = None):
        super().__init__(
            message=f"Extern '{name}' has no implementation" + (f": {reason}" if reason else ""),
            code="R010",
            help_text="Externs are bound to builtins by name; pass builtins={...} to Evaluator to provide one."
        )
        self.name = name


class CallDepthExceededError(EvaluationError):
    """Function calls nested deeper than the evaluator allows."""

    def __init__(self, name: str, max_depth: int):
        super().__init__(
            message=f"Call depth exceeded {max_depth} while calling '{name}'",
            code="R011",
            help_text="Check for unbounded recursion, or raise Evaluator(max_call_depth=...)."
        )
        self.name = name
        self.max_depth = max_depth


class InvalidArgumentError(EvaluationError):
    """A builtin received a value it has no meaning for."""

    def __init__(self, name: str, value: float):
        super().__init__(
            message=f"Invalid argument to '{name}': {value}",
            code="R012",
            help_text=f"'{name}' needs a finite number."
        )
        self.name = name
        self.value = value
