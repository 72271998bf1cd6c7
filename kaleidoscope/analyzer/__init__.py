"""
Kaleidoscope Analyzer Package

Checks a parsed Program the way a code generator would before emitting it:
- Call sites against the signature table (unknown functions, arity)
- Variable references against parameters and loop variables
- Conflicting redeclarations (warnings only)

"""

from .resolver import CallResolver, ResolutionResult, resolve_program
from .errors import (
    ResolutionError, ResolutionWarning, UnknownFunctionError,
    ArityMismatchError, UnknownVariableError,
)

__all__ = [
    # Main resolver
    "CallResolver", "ResolutionResult", "resolve_program",

    # Error handling
    "ResolutionError", "ResolutionWarning", "UnknownFunctionError",
    "ArityMismatchError", "UnknownVariableError",
]
