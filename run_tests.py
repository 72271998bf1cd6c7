#!/usr/bin/env python3
"""
Main test runner for the Kaleidoscope front end.

Runs a smoke test of the whole pipeline, then the unit test suite in tests/.
"""

import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)


def run_pipeline_check() -> bool:
    """Lex, parse, resolve and evaluate a small program end to end."""

    print("🚀 Kaleidoscope Front End Test Suite")
    print("=" * 60)

    try:
        from kaleidoscope.lexer import Lexer
        from kaleidoscope.parser import Parser, format_program
        from kaleidoscope.analyzer import CallResolver
        from kaleidoscope.evaluator import Evaluator

        print("✅ All modules imported successfully")
        print()
    except ImportError as e:
        print(f"❌ Failed to import modules: {e}")
        return False

    print("Testing full pipeline...")
    code = """
    extern sqrt(x);

    # Compute the x'th fibonacci number.
    def fib(x)
      if x < 3 then 1 else fib(x-1) + fib(x-2);

    def hypot(a b) sqrt(a*a + b*b);

    fib(10);
    hypot(3, 4);
    """

    print("  🔧 Lexing...")
    tokens = Lexer(code, "<pipeline>").tokenize()
    print(f"     Generated {len(tokens)} tokens")

    print("  🔧 Parsing...")
    program = Parser(tokens).parse()
    print(f"     {len(program.externs)} externs, {len(program.definitions)} definitions, "
          f"{len(program.top_level_expressions)} top-level expressions")

    print("  🔧 Resolving...")
    result = CallResolver(program).resolve()
    if result.has_errors():
        print(f"     ❌ Resolution errors: {len(result.errors)}")
        for error in result.errors:
            print(f"        {error.diagnostic.message}")
        return False
    print("     ✅ No resolution errors")

    print("  🔧 Evaluating...")
    values = Evaluator(program).run()
    if values != [55.0, 5.0]:
        print(f"     ❌ Unexpected results: {values}")
        return False
    print(f"     ✅ Results: {values}")

    print()
    print("Canonical source:")
    print("-" * 40)
    print(format_program(program), end="")
    print("-" * 40)
    print()
    return True


def run_unit_tests() -> bool:
    """Discover and run everything under tests/."""
    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"))
    result = unittest.TextTestRunner(verbosity=1).run(suite)
    return result.wasSuccessful()


def run_all_tests() -> bool:
    if not run_pipeline_check():
        return False
    success = run_unit_tests()
    print()
    print("🎉 All tests PASSED!" if success else "❌ Some tests FAILED")
    return success


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
