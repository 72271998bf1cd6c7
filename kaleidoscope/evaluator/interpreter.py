"""
Tree-walking evaluator for Kaleidoscope programs.

Reference semantics for the contract every backend has to meet:
- Every value is an IEEE-754 double (numpy float64, so 1/0 is inf and
  0/0 is nan rather than an exception, and % is C fmod)
- A condition holds when it compares ordered-not-equal to 0.0, so nan is false
- '=' and '<' yield 1.0 or 0.0
- for loops run the body at least once, evaluate the end condition with the
  current value of the loop variable, then add the step (default 1.0); the
  loop itself evaluates to 0.0

Externs are bound by name to builtins. A call goes to whichever declaration
of the name came last, as in the signature table: a definition after an
extern replaces it, and so does an extern after a definition.

User calls recurse in Python, so evaluation runs with the recursion limit
raised by FRAMES_PER_CALL for every allowed call level. Running out anyway
(a very deep body on every level) is reported as CallDepthExceededError.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Callable, Dict, List, Mapping, Optional, Sequence, TextIO

import numpy as np

from ..lexer.tokens import BinaryOperator
from ..parser.ast_nodes import (
    ASTVisitor, Expression, NumberLiteral, VariableRef, BinaryOp, Call,
    Conditional, ForLoop, Definition, Program
)
from ..recursion import recursion_headroom
from ..analyzer.errors import UnknownFunctionError, ArityMismatchError, UnknownVariableError
from .builtins import MATH_BUILTINS, BUILTIN_ARITIES
from .errors import UnboundExternError, CallDepthExceededError, InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CALL_DEPTH = 1000

# Interpreter frames one call level of a typical function body costs
FRAMES_PER_CALL = 16

ZERO = np.float64(0.0)
ONE = np.float64(1.0)


def is_true(value: np.float64) -> bool:
    """Ordered not-equal to zero."""
    return bool(not np.isnan(value) and value != 0.0)


def apply_operator(operator: BinaryOperator, left: np.float64, right: np.float64) -> np.float64:
    with np.errstate(all='ignore'):
        if operator == BinaryOperator.PLUS:
            return left + right
        if operator == BinaryOperator.MINUS:
            return left - right
        if operator == BinaryOperator.TIMES:
            return left * right
        if operator == BinaryOperator.DIVIDE:
            return left / right
        if operator == BinaryOperator.MODULO:
            return np.fmod(left, right)
        if operator == BinaryOperator.EQUALS:
            return ONE if left == right else ZERO
        if operator == BinaryOperator.LESS_THAN:
            return ONE if left < right else ZERO
    raise ValueError(f"Unknown binary operator: {operator!r}")


class Evaluator(ASTVisitor):
    """
    Evaluates expressions of a parsed program.

    Args:
        program: The program whose definitions and externs are callable
        builtins: Extra or replacement extern implementations, by name
        output: Stream for printd/putchard and printed results
        print_results: Write each top-level result during run()
        max_call_depth: Maximum nesting of user function calls
    """

    def __init__(self, program: Program,
                 builtins: Optional[Mapping[str, Callable[..., float]]] = None,
                 output: Optional[TextIO] = None,
                 print_results: bool = False,
                 max_call_depth: int = DEFAULT_MAX_CALL_DEPTH):
        self.program = program
        self.output = output if output is not None else sys.stdout
        self.print_results = print_results
        self.max_call_depth = max_call_depth

        # Later definitions replace earlier ones, as in the signature table
        self.functions: Dict[str, Definition] = {d.name: d for d in program.definitions}

        self.builtins: Dict[str, Callable[..., float]] = dict(MATH_BUILTINS)
        self.builtins["printd"] = self._printd
        self.builtins["putchard"] = self._putchard
        self._custom_builtins = set(builtins or {})
        if builtins:
            self.builtins.update(builtins)

        self._scopes: List[Dict[str, np.float64]] = []
        self._call_depth = 0
        self._last_call: Optional[str] = None
        self._guard_depth = 0

    def run(self) -> List[float]:
        """Evaluate every top-level expression in order and return the results."""
        results = []
        with self._recursion_guard():
            for expression in self.program.top_level_expressions:
                value = self._evaluate(expression, None)
                if self.print_results:
                    self.output.write(f"{value:f}\n")
                results.append(value)
        logger.debug("Evaluated %d top-level expressions", len(results))
        return results

    def evaluate(self, expression: Expression, variables: Optional[Mapping[str, float]] = None) -> float:
        """Evaluate one expression with the given variables in scope."""
        with self._recursion_guard():
            return self._evaluate(expression, variables)

    def call(self, name: str, args: Sequence[float]) -> float:
        """Call a defined function or bound extern by name."""
        with self._recursion_guard():
            return float(self._call(name, [np.float64(arg) for arg in args], None))

    @contextmanager
    def _recursion_guard(self):
        if self._guard_depth:
            # A builtin calling back into the evaluator is already covered
            yield
            return
        self._guard_depth += 1
        self._last_call = None
        try:
            with recursion_headroom(self.max_call_depth * FRAMES_PER_CALL):
                yield
        except RecursionError as e:
            raise CallDepthExceededError(self._last_call or "<top level>", self.max_call_depth) from e
        finally:
            self._guard_depth -= 1

    def _evaluate(self, expression: Expression, variables: Optional[Mapping[str, float]]) -> float:
        saved_scopes = self._scopes
        self._scopes = [{name: np.float64(value) for name, value in (variables or {}).items()}]
        try:
            return float(self.visit(expression))
        finally:
            self._scopes = saved_scopes

    def _call(self, name: str, args: List[np.float64], node: Optional[Call]) -> np.float64:
        location = node.span.start if node is not None and node.span else None

        prototype = self.program.prototype(name)
        if prototype is None:
            raise UnknownFunctionError(name, location, node)
        if prototype.arity != len(args):
            raise ArityMismatchError(name, prototype.arity, len(args), location, node)

        definition = self.functions.get(name)
        if definition is None or definition.prototype is not prototype:
            return self._call_builtin(name, prototype.arity, args)

        if self._call_depth >= self.max_call_depth:
            raise CallDepthExceededError(name, self.max_call_depth)

        saved_scopes = self._scopes
        self._scopes = [dict(zip(prototype.params, args))]
        self._call_depth += 1
        self._last_call = name
        try:
            return self.visit(definition.body)
        finally:
            self._call_depth -= 1
            self._scopes = saved_scopes

    def _call_builtin(self, name: str, arity: int, args: List[np.float64]) -> np.float64:
        builtin = self.builtins.get(name)
        if builtin is None:
            raise UnboundExternError(name)
        expected = BUILTIN_ARITIES.get(name)
        if name not in self._custom_builtins and expected is not None and expected != arity:
            raise UnboundExternError(name, f"declared with {arity} parameters, builtin takes {expected}")
        with np.errstate(all='ignore'):
            return np.float64(builtin(*args))

    def _printd(self, value: np.float64) -> np.float64:
        self.output.write(f"{float(value):f}\n")
        return ZERO

    def _putchard(self, value: np.float64) -> np.float64:
        """Write one byte, truncated to an unsigned char like C putchar."""
        if not np.isfinite(value):
            raise InvalidArgumentError("putchard", float(value))
        self.output.write(chr(int(value) % 256))
        return ZERO

    # Visitor methods

    def visit_number_literal(self, node: NumberLiteral) -> np.float64:
        return np.float64(node.value)

    def visit_variable_ref(self, node: VariableRef) -> np.float64:
        for scope in reversed(self._scopes):
            if node.name in scope:
                return scope[node.name]
        location = node.span.start if node.span else None
        raise UnknownVariableError(node.name, location, node)

    def visit_binary_op(self, node: BinaryOp) -> np.float64:
        left = self.visit(node.left)
        right = self.visit(node.right)
        return apply_operator(node.operator, left, right)

    def visit_call(self, node: Call) -> np.float64:
        args = [self.visit(arg) for arg in node.arguments]
        return self._call(node.name, args, node)

    def visit_conditional(self, node: Conditional) -> np.float64:
        if is_true(self.visit(node.condition)):
            return self.visit(node.then_branch)
        return self.visit(node.else_branch)

    def visit_for_loop(self, node: ForLoop) -> np.float64:
        frame = {node.variable: self.visit(node.start)}
        self._scopes.append(frame)
        try:
            while True:
                self.visit(node.body)
                step = self.visit(node.step) if node.step is not None else ONE
                end_condition = self.visit(node.end)
                frame[node.variable] = apply_operator(BinaryOperator.PLUS, frame[node.variable], step)
                if not is_true(end_condition):
                    break
        finally:
            self._scopes.pop()
        return ZERO


def evaluate_program(program: Program, output: Optional[TextIO] = None,
                     print_results: bool = False) -> List[float]:
    """Convenience function: evaluate all top-level expressions of a program."""
    return Evaluator(program, output=output, print_results=print_results).run()
