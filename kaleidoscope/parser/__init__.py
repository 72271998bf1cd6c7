"""
Kaleidoscope Parser Package

Implements a precedence-climbing recursive descent parser for Kaleidoscope.
Produces an immutable AST and a Program aggregating externs, definitions,
top-level expressions and the function signature table.

Key Features:
- Precedence climbing for binary operators
- Value-equal, frozen AST nodes with source spans
- Eager errors, no resynchronization
- Canonical source printing that parses back to an equal AST

"""

from .ast_nodes import (
    SourceSpan, ASTVisitor, ASTNode, Expression,
    NumberLiteral, VariableRef, BinaryOp, Call, Conditional, ForLoop, walk,
    Prototype, Definition, Program, ProgramSealedError, build_program,
)
from .parser import (
    Parser, ParseResult, DEFAULT_MAX_DEPTH,
    parse_tokens, parse_string, parse_file, try_parse,
)
from .errors import (
    ParseError, UnexpectedTokenError, ExpectedTokenError,
    DuplicateParameterError, NestingTooDeepError,
)
from .printer import (
    SourcePrinter, format_number, format_expression, format_prototype,
    format_extern, format_definition, format_program,
)

__all__ = [
    # Core parser
    "Parser", "ParseResult", "DEFAULT_MAX_DEPTH",
    "parse_tokens", "parse_string", "parse_file", "try_parse",

    # AST nodes
    "SourceSpan", "ASTVisitor", "ASTNode", "Expression",
    "NumberLiteral", "VariableRef", "BinaryOp", "Call", "Conditional", "ForLoop", "walk",
    "Prototype", "Definition", "Program", "ProgramSealedError", "build_program",

    # Printing
    "SourcePrinter", "format_number", "format_expression", "format_prototype",
    "format_extern", "format_definition", "format_program",

    # Error handling
    "ParseError", "UnexpectedTokenError", "ExpectedTokenError",
    "DuplicateParameterError", "NestingTooDeepError",
]
