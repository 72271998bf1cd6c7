"""
Call and variable resolution for parsed Kaleidoscope programs.

This is the check every code generator has to make before it can emit a
call: does the callee exist, and does the call pass as many arguments as the
prototype declares? The resolver does it once, up front, and collects every
problem instead of stopping at the first.

Scopes are simple: a definition body sees its parameters, a loop body sees
its loop variable on top of whatever encloses it, and top-level expressions
see nothing.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..parser.ast_nodes import (
    ASTVisitor, Expression, NumberLiteral, VariableRef, BinaryOp, Call,
    Conditional, ForLoop, Prototype, Program
)
from .errors import (
    ResolutionError, ResolutionWarning, UnknownFunctionError, ArityMismatchError,
    UnknownVariableError, create_redefinition_warning, create_signature_conflict_warning
)

logger = logging.getLogger(__name__)


@dataclass
class ResolutionResult:
    """Results of resolving a program."""
    program: Program
    errors: List[ResolutionError] = field(default_factory=list)
    warnings: List[ResolutionWarning] = field(default_factory=list)

    def has_errors(self) -> bool:
        """Check if resolution found any errors."""
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def raise_first(self):
        """Raise the first error, if any."""
        if self.errors:
            raise self.errors[0]


class CallResolver(ASTVisitor):
    """
    Checks call sites against the program's signature table and variable
    references against their scope.
    """

    def __init__(self, program: Program):
        self.program = program
        self.errors: List[ResolutionError] = []
        self.warnings: List[ResolutionWarning] = []
        self._scopes: List[List[str]] = []
        self._function: Optional[str] = None

    def resolve(self) -> ResolutionResult:
        """
        Resolve every definition body and top-level expression.

        Returns:
            ResolutionResult with all errors and warnings found
        """
        self.errors = []
        self.warnings = []
        self._check_declarations()

        for definition in self.program.definitions:
            self._resolve_in_scope(definition.body, list(definition.prototype.params),
                                   definition.prototype.name)

        for expression in self.program.top_level_expressions:
            self._resolve_in_scope(expression, [], None)

        logger.debug("Resolution finished with %d errors, %d warnings",
                     len(self.errors), len(self.warnings))
        return ResolutionResult(self.program, list(self.errors), list(self.warnings))

    def resolve_call(self, call: Call) -> Prototype:
        """
        Resolve a single call to the prototype it targets.

        Raises:
            UnknownFunctionError: No such function
            ArityMismatchError: Wrong number of arguments
        """
        location = call.span.start if call.span else None
        prototype = self.program.prototype(call.name)
        if prototype is None:
            raise UnknownFunctionError(
                call.name, location, call,
                similar_names=similar_names(call.name, list(self.program.signatures)),
                function=self._function
            )
        if prototype.arity != len(call.arguments):
            raise ArityMismatchError(call.name, prototype.arity, len(call.arguments),
                                     location, call, function=self._function)
        return prototype

    def _resolve_in_scope(self, expression: Expression, names: List[str], function: Optional[str]):
        self._scopes = [names]
        self._function = function
        self.visit(expression)
        self._function = None

    def _check_declarations(self):
        """Warn about names declared more than once with different meanings."""
        seen_definitions: Dict[str, Prototype] = {}
        for definition in self.program.definitions:
            prototype = definition.prototype
            location = prototype.span.start if prototype.span else None
            if prototype.name in seen_definitions:
                self.warnings.append(create_redefinition_warning(prototype.name, "definition", location))
            seen_definitions[prototype.name] = prototype

        declared: Dict[str, Prototype] = {}
        for prototype in list(self.program.externs) + [d.prototype for d in self.program.definitions]:
            previous = declared.get(prototype.name)
            if previous is not None and previous.arity != prototype.arity:
                location = prototype.span.start if prototype.span else None
                self.warnings.append(create_signature_conflict_warning(
                    prototype.name, previous.arity, prototype.arity, location))
            declared[prototype.name] = prototype

    # Visitor methods

    def visit_number_literal(self, node: NumberLiteral):
        pass

    def visit_variable_ref(self, node: VariableRef):
        if not any(node.name in scope for scope in self._scopes):
            location = node.span.start if node.span else None
            self.errors.append(UnknownVariableError(node.name, location, node, function=self._function))

    def visit_binary_op(self, node: BinaryOp):
        self.visit(node.left)
        self.visit(node.right)

    def visit_call(self, node: Call):
        try:
            self.resolve_call(node)
        except ResolutionError as e:
            self.errors.append(e)
        for arg in node.arguments:
            self.visit(arg)

    def visit_conditional(self, node: Conditional):
        self.visit(node.condition)
        self.visit(node.then_branch)
        self.visit(node.else_branch)

    def visit_for_loop(self, node: ForLoop):
        self.visit(node.start)
        self._scopes.append([node.variable])
        try:
            self.visit(node.end)
            if node.step is not None:
                self.visit(node.step)
            self.visit(node.body)
        finally:
            self._scopes.pop()


def resolve_program(program: Program) -> ResolutionResult:
    """Convenience function: resolve a program and return the result."""
    return CallResolver(program).resolve()


def similar_names(name: str, candidates: List[str], max_distance: int = 2) -> List[str]:
    """Names within a small edit distance of `name`, closest first."""
    scored = [(edit_distance(name, candidate), candidate) for candidate in candidates]
    return [candidate for distance, candidate in sorted(scored) if distance <= max_distance]


def edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein distance between two strings."""
    if len(s1) < len(s2):
        return edit_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]
