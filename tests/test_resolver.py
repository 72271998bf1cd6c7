"""
Test suite for call and variable resolution.

Arity and unknown-name checks belong to the consumer of a parsed program,
so every program here parses cleanly first.
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleidoscope.parser import parse_string, Call
from kaleidoscope.analyzer import (
    CallResolver, resolve_program,
    ResolutionError, UnknownFunctionError, ArityMismatchError, UnknownVariableError,
)
from kaleidoscope.analyzer.resolver import edit_distance, similar_names


class TestCallResolver(unittest.TestCase):
    """Test cases for the resolver."""

    def _resolve(self, source: str):
        return resolve_program(parse_string(source))

    def test_extern_call_resolves(self):
        result = self._resolve("extern foo(a); foo(1);")
        self.assertFalse(result.has_errors(), f"Unexpected errors: {result.errors}")

    def test_arity_mismatch_is_a_resolution_error(self):
        program = parse_string("extern foo(a); foo(1, 2);")
        result = resolve_program(program)
        self.assertEqual(len(result.errors), 1)
        error = result.errors[0]
        self.assertIsInstance(error, ArityMismatchError)
        self.assertEqual((error.name, error.expected, error.got), ("foo", 1, 2))
        self.assertEqual(error.diagnostic.code, "R002")

    def test_resolve_call_raises(self):
        program = parse_string("extern foo(a); foo(1, 2);")
        with self.assertRaises(ArityMismatchError):
            CallResolver(program).resolve_call(program.top_level_expressions[0])

    def test_resolve_call_returns_prototype(self):
        program = parse_string("def sq(x) x * x; sq(3);")
        prototype = CallResolver(program).resolve_call(program.top_level_expressions[0])
        self.assertEqual(prototype.name, "sq")

    def test_unknown_function(self):
        result = self._resolve("def value() 1; valeu();")
        self.assertEqual(len(result.errors), 1)
        error = result.errors[0]
        self.assertIsInstance(error, UnknownFunctionError)
        self.assertEqual(error.name, "valeu")
        self.assertIn("Did you mean 'value'?", error.diagnostic.suggestions)

    def test_recursive_definition_resolves(self):
        result = self._resolve("""
        def fib(x)
          if x < 3 then 1 else fib(x-1) + fib(x-2);
        fib(10);
        """)
        self.assertFalse(result.has_errors())

    def test_call_before_definition_resolves(self):
        result = self._resolve("def a(x) b(x); def b(x) x;")
        self.assertFalse(result.has_errors())

    def test_calls_use_latest_signature(self):
        result = self._resolve("extern foo(a); def foo(a b) a; foo(1);")
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].expected, 2)

    def test_nested_call_arguments_are_checked(self):
        result = self._resolve("extern f(x); f(f(1, 2));")
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].got, 2)

    def test_errors_are_collected(self):
        result = self._resolve("missing(); other(1);")
        self.assertEqual([e.name for e in result.errors], ["missing", "other"])
        with self.assertRaises(UnknownFunctionError):
            result.raise_first()

    def test_error_location(self):
        result = self._resolve("extern f(x);\n  f();")
        location = result.errors[0].location
        self.assertEqual((location.line, location.column), (2, 3))


class TestVariableResolution(unittest.TestCase):
    """Test cases for variable scopes."""

    def _errors(self, source: str):
        return resolve_program(parse_string(source)).errors

    def test_parameters_are_in_scope(self):
        self.assertEqual(self._errors("def f(a b) a * b;"), [])

    def test_unknown_variable_in_definition(self):
        errors = self._errors("def f(a) a + b;")
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], UnknownVariableError)
        self.assertEqual(errors[0].name, "b")
        self.assertEqual(errors[0].function, "f")
        self.assertIn("in definition of 'f'", str(errors[0]))

    def test_top_level_has_no_variables(self):
        errors = self._errors("x;")
        self.assertIsInstance(errors[0], UnknownVariableError)
        self.assertIsNone(errors[0].function)

    def test_loop_variable_scope(self):
        self.assertEqual(self._errors("extern printd(x); for i = 1, i < 5, i in printd(i);"), [])

    def test_loop_variable_not_visible_in_start(self):
        errors = self._errors("for i = i, 1 in 0;")
        self.assertEqual([e.name for e in errors], ["i"])

    def test_loop_variable_not_visible_after_loop(self):
        errors = self._errors("def f(n) (for i = 0, i < n in 0) + i;")
        self.assertEqual([e.name for e in errors], ["i"])

    def test_all_errors_are_resolution_errors(self):
        for error in self._errors("def f(a) g(b);"):
            self.assertIsInstance(error, ResolutionError)

    def test_long_operator_chain(self):
        errors = self._errors("def f(x) " + " + ".join(["x"] * 120) + "; f(1) + " + " + ".join(["1"] * 100) + ";")
        self.assertEqual(errors, [])

    def test_long_chain_errors_are_found(self):
        errors = self._errors("def f(x) " + " + ".join(["x"] * 119) + " + y;")
        self.assertEqual([e.name for e in errors], ["y"])


class TestDeclarationWarnings(unittest.TestCase):
    """Test cases for redeclaration warnings."""

    def test_redefinition_warning(self):
        result = resolve_program(parse_string("def f(x) x; def f(x) x + 1;"))
        self.assertFalse(result.has_errors())
        self.assertTrue(result.has_warnings())
        self.assertEqual([w.diagnostic.code for w in result.warnings], ["R101"])

    def test_conflicting_arity_warning(self):
        result = resolve_program(parse_string("extern f(x); def f(x y) x;"))
        self.assertEqual([w.diagnostic.code for w in result.warnings], ["R102"])
        self.assertIn("WARNING", str(result.warnings[0]))

    def test_matching_extern_and_definition(self):
        result = resolve_program(parse_string("extern f(x); def f(x) x;"))
        self.assertFalse(result.has_warnings())


class TestSimilarNames(unittest.TestCase):
    """Test cases for typo suggestions."""

    def test_edit_distance(self):
        self.assertEqual(edit_distance("kitten", "sitting"), 3)
        self.assertEqual(edit_distance("", "abc"), 3)
        self.assertEqual(edit_distance("same", "same"), 0)

    def test_similar_names_closest_first(self):
        self.assertEqual(similar_names("fob", ["foo", "bar", "fob2"]), ["fob2", "foo"])
        self.assertEqual(similar_names("xyz", ["completely", "different"]), [])


if __name__ == '__main__':
    unittest.main()
