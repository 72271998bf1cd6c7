"""
Resolution error handling for Kaleidoscope.

These errors belong to whoever consumes a parsed Program: the parser never
raises them. A call to an unknown function or with the wrong number of
arguments is perfectly good syntax.

"""

from typing import Optional, List

from ..lexer.tokens import SourceLocation
from ..lexer.errors import Diagnostic
from ..parser.ast_nodes import Expression


class ResolutionError(Exception):
    """
    Exception raised when a name in the program cannot be resolved.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
        node: Optional[Expression] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
        function: Optional[str] = None
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
        self.node = node
        self.function = function  # Enclosing definition, None for top-level code

    @property
    def location(self) -> Optional[SourceLocation]:
        return self.diagnostic.location

    def __str__(self) -> str:
        result = str(self.diagnostic)
        if self.function:
            result += f"  in definition of '{self.function}'\n"
        return result


class UnknownFunctionError(ResolutionError):
    """A call names a function with no extern or definition."""

    def __init__(self, name: str, location: Optional[SourceLocation] = None,
                 node: Optional[Expression] = None, similar_names: Optional[List[str]] = None,
                 function: Optional[str] = None):
        suggestions = [f"Did you mean '{similar}'?" for similar in (similar_names or [])[:3]]
        suggestions.extend([
            f"Declare it with 'extern {name}(...);'",
            f"Define it with 'def {name}(...) ...;'",
        ])
        super().__init__(
            message=f"Unknown function: '{name}'",
            location=location,
            node=node,
            code="R001",
            help_text=f"No extern or definition named '{name}' exists in the program.",
            suggestions=suggestions,
            function=function
        )
        self.name = name


class ArityMismatchError(ResolutionError):
    """A call passes a different number of arguments than the prototype declares."""

    def __init__(self, name: str, expected: int, got: int,
                 location: Optional[SourceLocation] = None, node: Optional[Expression] = None,
                 function: Optional[str] = None):
        super().__init__(
            message=f"Function '{name}' expects {expected} arguments, got {got}",
            location=location,
            node=node,
            code="R002",
            help_text="The function call has the wrong number of arguments.",
            suggestions=[f"Provide exactly {expected} arguments", "Check the function signature"],
            function=function
        )
        self.name = name
        self.expected = expected
        self.got = got


class UnknownVariableError(ResolutionError):
    """A variable reference that is neither a parameter nor a loop variable in scope."""

    def __init__(self, name: str, location: Optional[SourceLocation] = None,
                 node: Optional[Expression] = None, function: Optional[str] = None):
        if function is None:
            help_text = "Top-level expressions have no variables in scope."
        else:
            help_text = f"'{name}' is not a parameter of '{function}' or an enclosing loop variable."
        super().__init__(
            message=f"Unknown variable: '{name}'",
            location=location,
            node=node,
            code="R003",
            help_text=help_text,
            suggestions=["Check for typos in the variable name"],
            function=function
        )
        self.name = name


class ResolutionWarning:
    """
    A suspicious declaration that does not stop compilation.
    """

    def __init__(self, message: str, location: Optional[SourceLocation] = None,
                 code: Optional[str] = None, help_text: Optional[str] = None):
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="warning",
            code=code,
            help_text=help_text
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


def create_redefinition_warning(name: str, kind: str, location: Optional[SourceLocation]) -> ResolutionWarning:
    return ResolutionWarning(
        message=f"Redefinition of '{name}'",
        location=location,
        code="R101",
        help_text=f"This {kind} replaces an earlier definition with the same name; calls use the latest one."
    )


def create_signature_conflict_warning(name: str, previous: int, current: int,
                                      location: Optional[SourceLocation]) -> ResolutionWarning:
    return ResolutionWarning(
        message=f"'{name}' redeclared with {current} parameters (previously {previous})",
        location=location,
        code="R102",
        help_text="Call sites are checked against the latest declaration."
    )


RESOLUTION_ERROR_CODES = {
    "R001": "Unknown function",
    "R002": "Arity mismatch",
    "R003": "Unknown variable",
    "R010": "Unbound extern",
    "R101": "Redefinition",
    "R102": "Conflicting redeclaration",
}
