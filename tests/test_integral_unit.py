"""Tests for definite integrals: allow-listed closed forms and the trapezoid rule."""

import math

import pytest

from solver import integral
from solver.errors import EvaluationError, InvalidBoundsError, ParseError


class TestClosedForm:
    def test_x_squared(self):
        res = integral.integrate("x^2", "x", 0, 1)
        assert res.method == "closed_form"
        assert res.value == pytest.approx(1 / 3)
        assert res.antiderivative == "x^3/3"
        assert res.steps[0] == "Integrating x^2 with respect to x from 0 to 1"
        assert "The antiderivative is x^3/3" in res.steps
        assert "x^3/3|_{0}^{1} = (1)^3/3 - (0)^3/3" in res.steps

    def test_agrees_with_trapezoid(self):
        exact = integral.integrate("x^2", "x", 0, 1).value
        approx = integral.trapezoid("x^2", "x", 0, 1)
        assert abs(exact - approx) < 1e-4

    def test_reversed_bounds_negate(self):
        assert integral.integrate("x^2", "x", 1, 0).value == pytest.approx(-1 / 3)

    def test_other_variable(self):
        res = integral.integrate("t^2", "t", 0, 3)
        assert res.method == "closed_form"
        assert res.value == pytest.approx(9.0)

    def test_sin_over_half_turn(self):
        res = integral.integrate("sin(x)", "x", 0, "pi")
        assert res.value == pytest.approx(2.0)

    def test_constant_one(self):
        assert integral.integrate("1", "x", -2, 5).value == pytest.approx(7.0)

    def test_match_is_exact_including_whitespace(self):
        res = integral.integrate("  x^2", "x", 0, 1)
        assert res.method == "trapezoid"
        assert res.expression == "x^2"
        assert res.value == pytest.approx(1 / 3, abs=1e-5)

    @pytest.mark.parametrize("expr,upper", [("x^3", 1e120), ("x^2", 1e200), ("x", 1e300)])
    def test_overflowing_bounds_raise_evaluation_error(self, expr, upper):
        with pytest.raises(EvaluationError):
            integral.integrate(expr, "x", 0, upper)

    def test_substitution_keeps_function_names(self):
        res = integral.integrate("cos(s)", "s", 0, 1)
        assert res.antiderivative == "sin(s)"
        assert "sin(s)|_{0}^{1} = sin((1)) - sin((0))" in res.steps

    def test_exact_match_only(self):
        assert integral.closed_form("x^2", "t") is None
        assert integral.closed_form("x ^ 2", "x") is None
        assert integral.closed_form("2*x^2", "x") is None


class TestTrapezoid:
    def test_linear_integrand_is_exact(self):
        res = integral.integrate("2*x", "x", 0, 1)
        assert res.method == "trapezoid"
        assert res.antiderivative is None
        assert res.value == pytest.approx(1.0, abs=1e-9)
        assert res.steps[-2] == "Using numerical integration (trapezoidal rule) with 1000 intervals"
        assert res.answer.startswith("∫[0, 1] 2*x dx ≈")

    def test_polynomial(self):
        res = integral.integrate("x^2 + 1", "x", 0, 1)
        assert res.value == pytest.approx(4 / 3, abs=1e-5)

    def test_explicit_intervals(self):
        assert integral.trapezoid("x", "x", 0, 2, n=1) == pytest.approx(2.0)

    def test_zero_width(self):
        assert integral.trapezoid("exp(x)", "x", 1, 1) == 0.0

    def test_invalid_interval_count(self):
        with pytest.raises(ValueError):
            integral.trapezoid("x", "x", 0, 1, n=0)

    @pytest.mark.parametrize("expr,lo,hi", [("1/x", 0, 1), ("sqrt(x)", -1, 0), ("log(x)", 0, 1)])
    def test_undefined_point_aborts(self, expr, lo, hi):
        with pytest.raises(EvaluationError):
            integral.integrate(expr, "x", lo, hi)

    def test_free_variable(self):
        with pytest.raises(EvaluationError):
            integral.integrate("x + y", "x", 0, 1)


class TestBounds:
    @pytest.mark.parametrize("raw,expected", [
        (2, 2.0), (-1.5, -1.5), ("2.5", 2.5), (" 3 ", 3.0), ("pi/2", math.pi / 2),
    ])
    def test_parse_bound(self, raw, expected):
        assert integral.parse_bound(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["", "abc", None, True, "inf", float("nan"), "x + 1"])
    def test_invalid_bounds(self, raw):
        with pytest.raises(InvalidBoundsError):
            integral.parse_bound(raw)

    def test_integrate_rejects_bad_bound(self):
        with pytest.raises(InvalidBoundsError):
            integral.integrate("x", "x", "zero", 1)


def test_empty_expression() -> None:
    with pytest.raises(ParseError):
        integral.integrate("   ", "x", 0, 1)


def test_invalid_variable() -> None:
    with pytest.raises(ParseError):
        integral.integrate("x", "1x", 0, 1)


def test_trapezoid_overflow_is_reported() -> None:
    with pytest.raises(EvaluationError):
        integral.integrate("2*x^2", "x", 0, 1e154)


@pytest.mark.parametrize("expr", ["x^2", "x^2 + 1"])
def test_integrate_is_repeatable(expr) -> None:
    first = integral.integrate(expr, "x", "0", "2")
    second = integral.integrate(expr, "x", "0", "2")
    assert first.to_dict() == second.to_dict()
