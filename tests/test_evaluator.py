"""
Test suite for the reference evaluator.

Tests cover:
- Arithmetic and comparison semantics (IEEE doubles)
- Conditionals, loops and recursion
- Extern binding to builtins
- Runtime errors
"""

import io
import math
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleidoscope.parser import parse_string, VariableRef
from kaleidoscope.analyzer import UnknownFunctionError, ArityMismatchError
from kaleidoscope.evaluator import (
    Evaluator, evaluate_program, UnboundExternError, CallDepthExceededError,
    InvalidArgumentError, DEFAULT_MAX_CALL_DEPTH,
)


class TestEvaluator(unittest.TestCase):
    """Test cases for expression evaluation."""

    def _run(self, source: str, **kwargs):
        self.output = io.StringIO()
        return Evaluator(parse_string(source), output=self.output, **kwargs).run()

    def test_arithmetic(self):
        self.assertEqual(self._run("1 + 2 * 3; (1 + 2) * 3; 7 - 2 - 1; 9 / 2;"), [7.0, 9.0, 4.0, 4.5])

    def test_modulo(self):
        self.assertEqual(self._run("10 % 3; 7.5 % 2;"), [1.0, 1.5])

    def test_comparisons(self):
        self.assertEqual(self._run("1 < 2; 2 < 1; 3 = 3; 3 = 4;"), [1.0, 0.0, 1.0, 0.0])

    def test_division_by_zero(self):
        results = self._run("1 / 0; 0 / 0;")
        self.assertEqual(results[0], math.inf)
        self.assertTrue(math.isnan(results[1]))

    def test_conditional(self):
        self.assertEqual(self._run("if 1 then 2 else 3; if 0 then 2 else 3;"), [2.0, 3.0])

    def test_nan_condition_is_false(self):
        self.assertEqual(self._run("if 0 / 0 then 1 else 2;"), [2.0])

    def test_recursion(self):
        results = self._run("""
        # Compute the x'th fibonacci number.
        def fib(x)
          if x < 3 then
            1
          else
            fib(x-1)+fib(x-2);

        fib(10);
        """)
        self.assertEqual(results, [55.0])

    def test_for_loop_runs_body_before_testing(self):
        results = self._run("extern printd(x); for i = 1, i < 3 in printd(i);")
        self.assertEqual(results, [0.0])
        self.assertEqual(self.output.getvalue(), "1.000000\n2.000000\n3.000000\n")

    def test_for_loop_with_step(self):
        self._run("extern printd(x); for i = 0, i < 6, 2 in printd(i);")
        self.assertEqual(self.output.getvalue(), "0.000000\n2.000000\n4.000000\n6.000000\n")

    def test_putchard(self):
        self._run("extern putchard(c); putchard(72); putchard(105);")
        self.assertEqual(self.output.getvalue(), "Hi")

    def test_putchard_truncates_to_a_byte(self):
        self._run("extern putchard(c); putchard(328); putchard(0 - 1); putchard(72.9);")
        self.assertEqual(self.output.getvalue(), "H\xffH")

    def test_print_results(self):
        self._run("1 + 1; 2 * 3;", print_results=True)
        self.assertEqual(self.output.getvalue(), "2.000000\n6.000000\n")

    def test_math_builtins(self):
        results = self._run("extern sqrt(x); extern pow(x y); sqrt(16); pow(2, 10);")
        self.assertEqual(results, [4.0, 1024.0])

    def test_builtin_ieee_semantics(self):
        results = self._run("extern sqrt(x); extern log(x); sqrt(0 - 1); log(0);")
        self.assertTrue(math.isnan(results[0]))
        self.assertEqual(results[1], -math.inf)

    def test_custom_builtin(self):
        results = self._run("extern twice(x); twice(4);", builtins={"twice": lambda x: 2 * x})
        self.assertEqual(results, [8.0])

    def test_definition_shadows_extern(self):
        self.assertEqual(self._run("extern sin(x); def sin(x) 42; sin(0);"), [42.0])

    def test_latest_definition_is_used(self):
        self.assertEqual(self._run("def f() 1; def f() 2; f();"), [2.0])

    def test_latest_extern_replaces_definition(self):
        results = self._run("def sin(x) 42; extern sin(x); sin(0);")
        self.assertEqual(results, [0.0])

    def test_long_operator_chain(self):
        self.assertEqual(self._run(" + ".join(["1"] * 120) + ";"), [120.0])

    def test_deep_recursion(self):
        results = self._run("def sum(n) if n < 1 then 0 else n + sum(n - 1); sum(500);")
        self.assertEqual(results, [125250.0])

    def test_recursion_limit_is_restored(self):
        limit = sys.getrecursionlimit()
        self._run("def sum(n) if n < 1 then 0 else n + sum(n - 1); sum(300);")
        self.assertEqual(sys.getrecursionlimit(), limit)

    def test_evaluate_with_variables(self):
        evaluator = Evaluator(parse_string(""))
        self.assertEqual(evaluator.evaluate(VariableRef("x"), {"x": 2}), 2.0)

    def test_call_by_name(self):
        program = parse_string("def add(a b) a + b;")
        self.assertEqual(Evaluator(program).call("add", [1, 2]), 3.0)

    def test_evaluate_program(self):
        output = io.StringIO()
        self.assertEqual(evaluate_program(parse_string("40 + 2;"), output=output, print_results=True), [42.0])
        self.assertEqual(output.getvalue(), "42.000000\n")


class TestEvaluatorErrors(unittest.TestCase):
    """Test cases for runtime errors."""

    def _run(self, source: str, **kwargs):
        return Evaluator(parse_string(source), output=io.StringIO(), **kwargs).run()

    def test_unbound_extern(self):
        with self.assertRaises(UnboundExternError) as ctx:
            self._run("extern nothing(x); nothing(1);")
        self.assertEqual(ctx.exception.name, "nothing")

    def test_extern_with_wrong_builtin_arity(self):
        with self.assertRaises(UnboundExternError):
            self._run("extern sin(a b); sin(1, 2);")

    def test_unknown_function(self):
        with self.assertRaises(UnknownFunctionError):
            self._run("missing(1);")

    def test_arity_mismatch(self):
        with self.assertRaises(ArityMismatchError):
            self._run("def f(x) x; f(1, 2);")

    def test_arity_follows_latest_extern(self):
        with self.assertRaises(ArityMismatchError):
            self._run("def f(x) x; extern f(a b); f(1);")

    def test_latest_extern_without_builtin(self):
        with self.assertRaises(UnboundExternError):
            self._run("def f(x) x; extern f(x); f(1);")

    def test_putchard_rejects_non_finite(self):
        for argument in ("0 / 0", "1 / 0"):
            with self.subTest(argument=argument):
                with self.assertRaises(InvalidArgumentError) as ctx:
                    self._run(f"extern putchard(c); putchard({argument});")
                self.assertEqual(ctx.exception.diagnostic.code, "R012")

    def test_unbounded_recursion(self):
        with self.assertRaises(CallDepthExceededError) as ctx:
            self._run("def forever(x) forever(x + 1); forever(0);")
        self.assertEqual(ctx.exception.max_depth, DEFAULT_MAX_CALL_DEPTH)
        self.assertEqual(ctx.exception.name, "forever")

    def test_custom_call_depth(self):
        source = "def down(n) if n < 1 then 0 else down(n - 1); down(10);"
        with self.assertRaises(CallDepthExceededError):
            self._run(source, max_call_depth=5)
        self.assertEqual(self._run(source, max_call_depth=20), [0.0])


if __name__ == '__main__':
    unittest.main()
