"""Definite integrals: closed-form shortcuts and the composite trapezoidal rule."""

from __future__ import annotations

import math
import re
from typing import Callable

from solver import config
from solver.errors import EvaluationError, InvalidBoundsError, MathDashError, ParseError
from solver.expression import compile_expression, evaluate
from solver.formatting import fmt_num
from solver.logging_config import get_logger
from solver.types import IntegralResult

logger = get_logger("integral")

# Canonical integrand (``{v}`` = integration variable) → antiderivative.
# Matching is exact string equality after substituting the variable name;
# add entries here rather than generalizing the match.
CLOSED_FORMS: dict[str, tuple[str, Callable[[float], float]]] = {
    "{v}^2": ("{v}^3/3", lambda t: t ** 3 / 3),
    "{v}": ("{v}^2/2", lambda t: t ** 2 / 2),
    "1": ("{v}", lambda t: t),
    "{v}^3": ("{v}^4/4", lambda t: t ** 4 / 4),
    "sin({v})": ("-cos({v})", lambda t: -math.cos(t)),
    "cos({v})": ("sin({v})", lambda t: math.sin(t)),
}


def parse_bound(raw) -> float:
    """Turn a form value (number or text such as ``"2.5"`` or ``"pi/2"``) into a float."""
    if isinstance(raw, bool):
        raise InvalidBoundsError(f"Invalid bound: {raw!r}. Please enter numeric values.")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw if raw is not None else "").strip()
        if not text:
            raise InvalidBoundsError("Invalid bounds. Please enter numeric values.")
        try:
            value = float(text)
        except ValueError:
            try:
                value = evaluate(text, {})
            except MathDashError as e:
                raise InvalidBoundsError(
                    f"Invalid bound '{text}'. Please enter numeric values."
                ) from e
    if not math.isfinite(value):
        raise InvalidBoundsError(f"Bounds must be finite numbers, got {raw!r}.")
    return value


def _check_variable(var_name: str) -> None:
    if not var_name or not var_name.isidentifier():
        raise ParseError(f"Invalid variable name: '{var_name}'.")


def _substitute(text: str, var_name: str, value: str) -> str:
    return re.sub(r"\b" + re.escape(var_name) + r"\b", f"({value})", text)


def closed_form(text: str, var_name: str):
    """Return ``(antiderivative_text, F)`` if *text* is on the allow-list, else None."""
    for template, (anti, fn) in CLOSED_FORMS.items():
        if text == template.format(v=var_name):
            return anti.format(v=var_name), fn
    return None


def trapezoid(text: str, var_name: str, lower, upper, n: int | None = None) -> float:
    """Composite trapezoidal rule with *n* uniform subintervals.

    ``h/2 · [f(a) + f(b) + 2·Σ f(a + i·h)]`` for ``i = 1 … n-1``.  The first
    point that cannot be evaluated aborts the sum with EvaluationError.
    """
    _check_variable(var_name)
    a = parse_bound(lower)
    b = parse_bound(upper)
    n = config.TRAPEZOID_INTERVALS if n is None else n
    if n < 1:
        raise ValueError("n must be a positive number of intervals")

    f = compile_expression(text, [var_name])
    h = (b - a) / n
    total = f(a) + f(b)
    for i in range(1, n):
        total += 2 * f(a + i * h)
    result = h / 2 * total
    if not math.isfinite(result):
        raise EvaluationError(f"The trapezoidal sum for '{text.strip()}' is not a finite number.")
    return result


def integrate(text: str, var_name: str, lower, upper) -> IntegralResult:
    """Definite integral of *text* over ``[lower, upper]`` with its step trace.

    The allow-list is matched against *text* exactly as given, surrounding
    whitespace included; anything else goes to the trapezoidal rule.
    Reversed bounds are allowed and negate the result.
    """
    _check_variable(var_name)
    if text is None or not text.strip():
        raise ParseError("Please enter an expression.")
    expr = text.strip()
    a = parse_bound(lower)
    b = parse_bound(upper)
    lo, hi = fmt_num(a), fmt_num(b)

    steps = [f"Integrating {expr} with respect to {var_name} from {lo} to {hi}"]

    shortcut = closed_form(text, var_name)
    if shortcut is not None:
        anti, F = shortcut
        try:
            upper_value = F(b)
            lower_value = F(a)
        except (OverflowError, ValueError) as e:
            raise EvaluationError(
                f"Cannot evaluate {anti} at the bounds {lo} and {hi}: {e}"
            ) from e
        value = upper_value - lower_value
        if not math.isfinite(value):
            raise EvaluationError(
                f"The integral of {expr} from {lo} to {hi} is not a finite number."
            )
        steps.append(f"Step 1: Find the antiderivative of {expr}")
        steps.append(f"The antiderivative is {anti}")
        steps.append("Step 2: Evaluate the antiderivative at the upper and lower bounds")
        steps.append(
            f"{anti}|_{{{lo}}}^{{{hi}}} = "
            f"{_substitute(anti, var_name, hi)} - {_substitute(anti, var_name, lo)}"
        )
        steps.append(f"= {upper_value:.6f} - {lower_value:.6f} = {value:.6f}")
        logger.debug("closed form for %r over [%s, %s] = %r", expr, lo, hi, value)
        return IntegralResult(
            expression=expr, variable=var_name, lower=a, upper=b, value=value,
            method="closed_form", antiderivative=anti, steps=steps,
        )

    n = config.TRAPEZOID_INTERVALS
    value = trapezoid(expr, var_name, a, b, n)
    steps.append(f"Using numerical integration (trapezoidal rule) with {n} intervals")
    steps.append(f"The approximate value of the integral is {value:.6f}")
    logger.debug("trapezoid for %r over [%s, %s] = %r", expr, lo, hi, value)
    return IntegralResult(
        expression=expr, variable=var_name, lower=a, upper=b, value=value,
        method="trapezoid", steps=steps,
    )
