"""
Command line driver for Kaleidoscope.

Reads one source file, parses and resolves it, and evaluates every top-level
expression, printing each result. Diagnostics go to stderr and make the exit
status 1.
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .lexer import LexerError
from .parser import ParseError, DEFAULT_MAX_DEPTH, parse_file, format_program
from .analyzer import ResolutionError, resolve_program
from .evaluator import Evaluator, EvaluationError

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kaleidoscope",
        description="Parse, check and evaluate a Kaleidoscope program",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    kaleidoscope fib.ks                    # Evaluate and print top-level results
    kaleidoscope fib.ks --emit source      # Print the canonical form first
    kaleidoscope fib.ks --no-run           # Only parse and check
        """
    )
    parser.add_argument("file", help="Source file to compile")
    parser.add_argument("--emit", choices=["source", "none"], default="none",
                        help="Print the parsed program in canonical form")
    parser.add_argument("--no-run", action="store_true",
                        help="Do not evaluate top-level expressions")
    parser.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH,
                        help="Maximum expression nesting depth (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s"
    )

    try:
        program = parse_file(args.file, max_depth=args.max_depth)
    except (LexerError, ParseError) as e:
        print(e, file=sys.stderr, end="")
        return 1
    except OSError as e:
        print(f"error: cannot read {args.file}: {e}", file=sys.stderr)
        return 1

    logger.info("Parsed %s: %d externs, %d definitions, %d top-level expressions",
                args.file, len(program.externs), len(program.definitions),
                len(program.top_level_expressions))

    result = resolve_program(program)
    for warning in result.warnings:
        print(warning, file=sys.stderr, end="")
    if result.has_errors():
        for error in result.errors:
            print(error, file=sys.stderr, end="")
        return 1

    if args.emit == "source":
        sys.stdout.write(format_program(program))

    if not args.no_run:
        try:
            Evaluator(program, output=sys.stdout, print_results=True).run()
        except (ResolutionError, EvaluationError) as e:
            print(e, file=sys.stderr, end="")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
