"""
Canonical source rendering for Kaleidoscope ASTs.

The printed form is meant to be parsed again, not to look like the input:
every binary operation is parenthesized, conditionals and loops are wrapped
in parentheses so they can sit inside an operator chain, and numbers are
written positionally because the lexer has no signed exponents.
"""

from typing import List

import numpy as np

from .ast_nodes import (
    ASTVisitor, Expression, NumberLiteral, VariableRef, BinaryOp, Call,
    Conditional, ForLoop, Prototype, Definition, Program
)


def format_number(value: float) -> str:
    """Shortest positional spelling that reads back as the same float."""
    text = repr(float(value))
    if 'e' in text or 'E' in text:
        text = np.format_float_positional(value, trim='0')
    return text


class SourcePrinter(ASTVisitor):
    """Renders expressions back to source text."""

    def visit_number_literal(self, node: NumberLiteral) -> str:
        return format_number(node.value)

    def visit_variable_ref(self, node: VariableRef) -> str:
        return node.name

    def visit_binary_op(self, node: BinaryOp) -> str:
        return f"({self.visit(node.left)} {node.operator} {self.visit(node.right)})"

    def visit_call(self, node: Call) -> str:
        args = ", ".join(self.visit(arg) for arg in node.arguments)
        return f"{node.name}({args})"

    def visit_conditional(self, node: Conditional) -> str:
        return (f"(if {self.visit(node.condition)} "
                f"then {self.visit(node.then_branch)} "
                f"else {self.visit(node.else_branch)})")

    def visit_for_loop(self, node: ForLoop) -> str:
        header = f"for {node.variable} = {self.visit(node.start)}, {self.visit(node.end)}"
        if node.step is not None:
            header += f", {self.visit(node.step)}"
        return f"({header} in {self.visit(node.body)})"


def format_expression(expression: Expression) -> str:
    return SourcePrinter().visit(expression)


def format_prototype(prototype: Prototype) -> str:
    return f"{prototype.name}({' '.join(prototype.params)})"


def format_extern(prototype: Prototype) -> str:
    return f"extern {format_prototype(prototype)};"


def format_definition(definition: Definition) -> str:
    return f"def {format_prototype(definition.prototype)} {format_expression(definition.body)};"


def format_program(program: Program) -> str:
    """
    Render a whole program: externs, then definitions, then top-level
    expressions, one statement per line.
    """
    lines: List[str] = []
    lines.extend(format_extern(prototype) for prototype in program.externs)
    lines.extend(format_definition(definition) for definition in program.definitions)
    lines.extend(f"{format_expression(expr)};" for expr in program.top_level_expressions)
    return "\n".join(lines) + ("\n" if lines else "")
