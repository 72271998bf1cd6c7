"""
Abstract Syntax Tree node definitions for Kaleidoscope.

Expressions form a closed set of variants (number, variable, binary
operation, call, conditional, for loop). Nodes are frozen dataclasses: they
compare by value, never change after construction and own their children
outright, so the tree is always a tree.

Source spans ride along for diagnostics but are left out of equality, so two
parses of the same text compare equal wherever the text came from.

Program is the parser's output sink. It collects externs, definitions and
top-level expressions in order and keeps a name -> prototype table that the
later stages use to check call sites. A later declaration of a name replaces
the earlier one in that table.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..lexer.tokens import BinaryOperator, SourceLocation


@dataclass(frozen=True)
class SourceSpan:
    """Represents a span of source code (start and end locations)."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename == self.end.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start}-{self.end}"


class ASTVisitor(ABC):
    """Abstract visitor interface for traversing expressions."""

    def visit(self, node: 'Expression') -> Any:
        """Visit any expression node."""
        return node.accept(self)

    @abstractmethod
    def visit_number_literal(self, node: 'NumberLiteral') -> Any:
        pass

    @abstractmethod
    def visit_variable_ref(self, node: 'VariableRef') -> Any:
        pass

    @abstractmethod
    def visit_binary_op(self, node: 'BinaryOp') -> Any:
        pass

    @abstractmethod
    def visit_call(self, node: 'Call') -> Any:
        pass

    @abstractmethod
    def visit_conditional(self, node: 'Conditional') -> Any:
        pass

    @abstractmethod
    def visit_for_loop(self, node: 'ForLoop') -> Any:
        pass


class ASTNode(ABC):
    """Base class for all expression nodes."""

    @abstractmethod
    def accept(self, visitor: ASTVisitor) -> Any:
        """Accept a visitor (visitor pattern)."""
        pass

    @abstractmethod
    def children(self) -> List['Expression']:
        """Get all child nodes, in source order."""
        pass


class Expression(ASTNode):
    """Base class for expressions."""
    pass


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True)
class NumberLiteral(Expression):
    """Numeric literal; the language has a single float type."""
    value: float
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_number_literal(self)

    def children(self) -> List['Expression']:
        return []


@dataclass(frozen=True)
class VariableRef(Expression):
    """Reference to a function parameter or loop variable."""
    name: str
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_variable_ref(self)

    def children(self) -> List['Expression']:
        return []


@dataclass(frozen=True)
class BinaryOp(Expression):
    """Binary operation."""
    operator: BinaryOperator
    left: Expression
    right: Expression
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_binary_op(self)

    def children(self) -> List['Expression']:
        return [self.left, self.right]


@dataclass(frozen=True)
class Call(Expression):
    """Call of a named function."""
    name: str
    arguments: Tuple[Expression, ...] = ()
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "arguments", tuple(self.arguments))

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_call(self)

    def children(self) -> List['Expression']:
        return list(self.arguments)


@dataclass(frozen=True)
class Conditional(Expression):
    """if/then/else expression. The condition holds when it is non-zero."""
    condition: Expression
    then_branch: Expression
    else_branch: Expression
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_conditional(self)

    def children(self) -> List['Expression']:
        return [self.condition, self.then_branch, self.else_branch]


@dataclass(frozen=True)
class ForLoop(Expression):
    """
    for variable = start, end[, step] in body

    The variable is only visible inside end, step and body.
    """
    variable: str
    start: Expression
    end: Expression
    step: Optional[Expression]
    body: Expression
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_for_loop(self)

    def children(self) -> List['Expression']:
        children = [self.start, self.end]
        if self.step is not None:
            children.append(self.step)
        children.append(self.body)
        return children


def walk(node: Expression) -> Iterator[Expression]:
    """Yield node and all of its descendants, depth first, in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


# ============================================================================
# Declarations
# ============================================================================

@dataclass(frozen=True)
class Prototype:
    """A function's name and parameter names, without a body."""
    name: str
    params: Tuple[str, ...] = ()
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "params", tuple(self.params))

    @property
    def arity(self) -> int:
        return len(self.params)


@dataclass(frozen=True)
class Definition:
    """A prototype paired with its body expression."""
    prototype: Prototype
    body: Expression

    @property
    def name(self) -> str:
        return self.prototype.name


class ProgramSealedError(RuntimeError):
    """Raised when a sealed Program is modified."""


class Program:
    """
    Aggregate result of one parse pass.

    Holds externs, definitions and top-level expressions in source order,
    plus the signature table keyed by function name.
    """

    def __init__(self):
        self._externs: List[Prototype] = []
        self._definitions: List[Definition] = []
        self._expressions: List[Expression] = []
        self._signatures: Dict[str, Prototype] = {}
        self._sealed = False

    # Mutators (used by the parser only)

    def add_extern(self, prototype: Prototype):
        self._check_open()
        self._externs.append(prototype)
        self._signatures[prototype.name] = prototype

    def add_definition(self, definition: Definition):
        self._check_open()
        self._definitions.append(definition)
        self._signatures[definition.prototype.name] = definition.prototype

    def add_expression(self, expression: Expression):
        self._check_open()
        self._expressions.append(expression)

    def seal(self) -> 'Program':
        """Freeze the program; the parser calls this once parsing succeeds."""
        self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    def _check_open(self):
        if self._sealed:
            raise ProgramSealedError("Program is sealed; it cannot be modified after parsing")

    # Queries

    @property
    def externs(self) -> Tuple[Prototype, ...]:
        return tuple(self._externs)

    @property
    def definitions(self) -> Tuple[Definition, ...]:
        return tuple(self._definitions)

    @property
    def top_level_expressions(self) -> Tuple[Expression, ...]:
        return tuple(self._expressions)

    @property
    def signatures(self) -> Mapping[str, Prototype]:
        return MappingProxyType(self._signatures)

    def prototype(self, name: str) -> Optional[Prototype]:
        """Resolve a function name to its current prototype."""
        return self._signatures.get(name)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Program):
            return NotImplemented
        return (self._externs == other._externs and
                self._definitions == other._definitions and
                self._expressions == other._expressions)

    __hash__ = None

    def __repr__(self) -> str:
        return (f"Program(externs={self._externs!r}, definitions={self._definitions!r}, "
                f"top_level_expressions={self._expressions!r})")


def build_program(externs: Sequence[Prototype] = (),
                  definitions: Sequence[Definition] = (),
                  expressions: Sequence[Expression] = ()) -> Program:
    """Assemble a sealed Program by hand (externs, then definitions, then expressions)."""
    program = Program()
    for prototype in externs:
        program.add_extern(prototype)
    for definition in definitions:
        program.add_definition(definition)
    for expression in expressions:
        program.add_expression(expression)
    return program.seal()
