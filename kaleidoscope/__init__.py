"""
Kaleidoscope Front End Package

A small, embeddable front end for the Kaleidoscope expression language:
source text in, validated Program (AST plus signature table) out.

Architecture:
    kaleidoscope/
    ├── lexer/           # Tokenization
    ├── parser/          # Precedence-climbing parser, AST, Program, printer
    ├── analyzer/        # Call and variable resolution
    ├── evaluator/       # Reference tree-walking backend
    └── cli.py           # Command line driver

License: MIT
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .lexer import Lexer, tokenize_string
from .parser import Parser, Program, parse_string, parse_file, try_parse, format_program
from .analyzer import CallResolver, resolve_program
from .evaluator import Evaluator

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "Program",
    "CallResolver",
    "Evaluator",

    # Convenience functions
    "tokenize_string",
    "parse_string",
    "parse_file",
    "try_parse",
    "format_program",
    "resolve_program",

    # Version info
    "__version__",
    "__license__",
]
