"""
Kaleidoscope Evaluator Package

A tree-walking reference backend: it executes a parsed Program with the
numeric semantics any real code generator is expected to follow.

"""

from .interpreter import (
    Evaluator, evaluate_program, apply_operator, is_true, DEFAULT_MAX_CALL_DEPTH, FRAMES_PER_CALL,
)
from .builtins import MATH_BUILTINS, BUILTIN_ARITIES
from .errors import EvaluationError, UnboundExternError, CallDepthExceededError, InvalidArgumentError

__all__ = [
    "Evaluator", "evaluate_program", "apply_operator", "is_true", "DEFAULT_MAX_CALL_DEPTH", "FRAMES_PER_CALL",
    "MATH_BUILTINS", "BUILTIN_ARITIES",
    "EvaluationError", "UnboundExternError", "CallDepthExceededError", "InvalidArgumentError",
]
