"""Tests for expression evaluation, derivatives and the equation tool."""

import math

import pytest

from solver import expression
from solver.errors import EvaluationError, ParseError


# ── evaluate / evaluate_single_var ──────────────────────────────────────

class TestEvaluate:
    def test_implicit_multiplication_and_caret(self):
        assert expression.evaluate("2x^2 + 3x", {"x": 2}) == 14.0

    def test_multiple_bindings(self):
        assert expression.evaluate("x*y - 1", {"x": 3, "y": 4}) == 11.0

    def test_constants(self):
        assert expression.evaluate("pi", {}) == pytest.approx(math.pi)

    def test_single_var(self):
        assert expression.evaluate_single_var("sin(t)", "t", 0.0) == 0.0
        assert expression.evaluate_single_var("x^3", "x", -2) == -8.0

    def test_unused_binding_is_ignored(self):
        assert expression.evaluate("5", {"x": 1}) == 5.0

    def test_missing_variable(self):
        with pytest.raises(EvaluationError, match="Missing value"):
            expression.evaluate("x + y", {"x": 1})

    @pytest.mark.parametrize("expr,x", [("1/x", 0), ("sqrt(x)", -1), ("log(x)", 0)])
    def test_undefined_operations_raise(self, expr, x):
        with pytest.raises(EvaluationError):
            expression.evaluate_single_var(expr, "x", x)

    def test_constant_division_by_zero(self):
        with pytest.raises(EvaluationError):
            expression.evaluate("1/0", {})

    def test_non_finite_binding(self):
        with pytest.raises(EvaluationError):
            expression.evaluate("x", {"x": float("nan")})

    @pytest.mark.parametrize("bad", ["", "   ", "2x +", "(x + 1", "2 $ 3"])
    def test_parse_errors(self, bad):
        with pytest.raises(ParseError):
            expression.evaluate(bad, {"x": 1})

    def test_invalid_variable_name(self):
        with pytest.raises(ParseError, match="Invalid variable name"):
            expression.evaluate_single_var("x", "2x", 1)

    def test_deterministic(self):
        first = expression.evaluate("x^2 - 3x + 1", {"x": 1.5})
        second = expression.evaluate("x^2 - 3x + 1", {"x": 1.5})
        assert first == second


def test_compile_expression_reports_point() -> None:
    f = expression.compile_expression("1/x", ["x"])
    assert f(2.0) == 0.5
    with pytest.raises(EvaluationError, match="x = 0"):
        f(0.0)


# ── derivative / simplify ───────────────────────────────────────────────

def test_derivative_polynomial() -> None:
    assert expression.derivative("x^2 + 3x", "x") == "2*x + 3"


def test_derivative_trig_and_absent_variable() -> None:
    assert expression.derivative("sin(x)", "x") == "cos(x)"
    assert expression.derivative("5", "x") == "0"


def test_derivative_output_parses_again() -> None:
    d = expression.derivative("x^3", "x")
    assert d == "3*x^2"
    assert expression.evaluate_single_var(d, "x", 2) == 12.0


def test_simplify() -> None:
    assert expression.simplify("x + x") == "2*x"
    assert expression.simplify("(x^2 - 1)/(x - 1)") == "x + 1"


def test_derivative_result_steps() -> None:
    res = expression.derivative_result("x^2", "x")
    assert res.expression == "2*x"
    assert res.steps[0] == "Taking the derivative of x^2 with respect to x"
    assert res.steps[1] == "Result: 2x"


# ── solve_equation ──────────────────────────────────────────────────────

class TestSolveEquation:
    def test_simple_linear(self):
        res = expression.solve_equation("x + 5 = 10")
        assert res.value == 5.0
        assert res.answer == "x = 5"
        assert res.steps[0] == "Starting with equation: x + 5 = 10"
        assert res.steps[-1] == "Solving for x: x = 5"

    def test_variable_on_both_sides(self):
        res = expression.solve_equation("5x - 2 = 3x + 8")
        assert res.value == pytest.approx(5.0)

    def test_other_variable_name(self):
        res = expression.solve_equation("2t + 3 = 7", "t")
        assert res.answer == "t = 2"

    def test_expression_without_equals_is_evaluated(self):
        res = expression.solve_equation("3 + 4")
        assert res.value == 7.0
        assert res.answer == "Result: 7"

    def test_nonlinear_rejected(self):
        with pytest.raises(EvaluationError, match="not linear"):
            expression.solve_equation("x^2 = 4")

    def test_identity_and_contradiction(self):
        with pytest.raises(EvaluationError, match="identity"):
            expression.solve_equation("x + 1 = x + 1")
        with pytest.raises(EvaluationError, match="no solution"):
            expression.solve_equation("x + 1 = x + 2")

    def test_unknown_symbol(self):
        with pytest.raises(EvaluationError, match="Unknown variable"):
            expression.solve_equation("x + y = 1")

    def test_multiple_equals(self):
        with pytest.raises(ParseError, match="exactly one '='"):
            expression.solve_equation("x = 1 = 2")

    def test_empty_side(self):
        with pytest.raises(ParseError, match="Both sides"):
            expression.solve_equation("x + 1 =")


# ── size limits on constants ────────────────────────────────────────────

class TestConstantLimits:
    @pytest.mark.parametrize("text", [
        "9^9^9^9",
        "2^(10^9)",
        "factorial(10^9)",
        "gamma(1000)",
        "10^400",
        "x^100000",
    ])
    def test_oversized_constants_are_rejected(self, text):
        with pytest.raises(ParseError, match="too large"):
            expression.parse(text, ["x"])

    def test_oversized_constant_rejected_by_every_entry_point(self):
        with pytest.raises(ParseError):
            expression.evaluate("9^9^9^9", {})
        with pytest.raises(ParseError):
            expression.derivative("x^(9^9^9)", "x")
        with pytest.raises(ParseError):
            expression.solve_equation("x = factorial(10^9)")

    @pytest.mark.parametrize("text,expected", [
        ("2^1000 / 2^999", 2.0),
        ("factorial(5)", 120.0),
        ("1^(10^9)", 1.0),
        ("2^10 + 1", 1025.0),
    ])
    def test_bounded_constants_still_evaluate(self, text, expected):
        assert expression.evaluate(text, {}) == expected

    def test_undefined_constant_is_an_evaluation_error(self):
        with pytest.raises(EvaluationError):
            expression.evaluate("1/0 + 2^3", {})
