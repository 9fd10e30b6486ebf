"""Linear equation parsing and the 2x2 Cramer's-rule solver.

Equations are read one per line in the form ``a·x + b·y = c``.  Two
coefficient-extraction strategies are available:

- ``"tokenize"`` (default) scans each side into sign / number / name tokens,
  so terms may appear on either side, in any order, and repeat.
- ``"legacy"`` is the first-match pattern scan used by earlier dashboards.
  It only reads the coefficient immediately preceding the first occurrence of
  each variable name and the number right before the end of the right-hand
  side, so it breaks on reordered terms or when one variable name occurs
  inside another term.
"""

from __future__ import annotations

import math
import re

from solver import config
from solver.errors import EvaluationError, MalformedEquationError, UnsupportedSystemSizeError
from solver.formatting import fmt_num
from solver.logging_config import get_logger
from solver.types import (
    InfiniteSolutions, LinearEquationCoefficients, NoSolution, SystemResult, Unique,
)

logger = get_logger("linear")

STRATEGIES = ("tokenize", "legacy")

_TOKEN = re.compile(
    r"\s*(?:(?P<number>\d+\.?\d*|\.\d+)|(?P<name>[A-Za-z_][A-Za-z0-9_]*)|(?P<op>[-+*/]))"
)


# ── Tokenizing parser ───────────────────────────────────────────────────

def _tokenize(side: str, line: str) -> list[tuple[str, str]]:
    s = side.strip()
    tokens = []
    pos = 0
    while pos < len(s):
        m = _TOKEN.match(s, pos)
        if m is None:
            bad = s[pos:].strip()[:1]
            raise MalformedEquationError(f"Unexpected character '{bad}' in '{line}'.")
        kind = m.lastgroup
        tokens.append((kind, m.group(kind)))
        pos = m.end()
    return tokens


def _read_divisor(tokens, i, line) -> tuple[float, int]:
    """Consume an optional ``/ number`` at *i*; return (divisor, next index)."""
    if i + 1 < len(tokens) and tokens[i] == ("op", "/") and tokens[i + 1][0] == "number":
        den = float(tokens[i + 1][1])
        if den == 0:
            raise MalformedEquationError(f"Division by zero in '{line}'.")
        return den, i + 2
    return 1.0, i


def _terms(side: str, var_names: tuple[str, str], line: str) -> list[tuple[str | None, float]]:
    """Split one side into ``(variable or None, signed coefficient)`` terms."""
    tokens = _tokenize(side, line)
    if not tokens:
        raise MalformedEquationError(f"Both sides of '{line}' must have terms.")

    terms = []
    i = 0
    n = len(tokens)
    while i < n:
        sign = 1.0
        if tokens[i][0] == "op" and tokens[i][1] in "+-":
            sign = -1.0 if tokens[i][1] == "-" else 1.0
            i += 1
        elif terms:
            raise MalformedEquationError(f"Expected '+' or '-' between terms in '{line}'.")

        coeff = None
        need_name = False
        if i < n and tokens[i][0] == "number":
            coeff = float(tokens[i][1])
            den, i = _read_divisor(tokens, i + 1, line)
            coeff /= den
            if i < n and tokens[i] == ("op", "*"):
                need_name = True
                i += 1

        name = None
        if i < n and tokens[i][0] == "name":
            name = tokens[i][1]
            if name not in var_names:
                raise MalformedEquationError(
                    f"Unknown symbol '{name}' in '{line}'; expected "
                    f"{var_names[0]} and {var_names[1]}."
                )
            den, i = _read_divisor(tokens, i + 1, line)
            coeff = (1.0 if coeff is None else coeff) / den
        elif coeff is None or need_name:
            raise MalformedEquationError(f"Cannot extract coefficients from '{line}'.")

        terms.append((name, sign * coeff))
    return terms


def _parse_tokenized(lhs: str, rhs: str, var_names, line) -> LinearEquationCoefficients:
    totals = {var_names[0]: 0.0, var_names[1]: 0.0, None: 0.0}
    for name, value in _terms(lhs, var_names, line):
        totals[name] += value
    for name, value in _terms(rhs, var_names, line):
        totals[name] -= value
    # a·x + b·y + k = 0  →  a·x + b·y = -k
    return LinearEquationCoefficients(
        a=totals[var_names[0]],
        b=totals[var_names[1]],
        c=0.0 - totals[None],
    )


# ── Legacy pattern scan ─────────────────────────────────────────────────

def _legacy_number(raw: str, line: str) -> float:
    token = re.sub(r"\s+", "", raw)
    try:
        return float(token)
    except ValueError:
        raise MalformedEquationError(f"Cannot extract coefficients from '{line}'.") from None


def _legacy_coefficient(standard: str, var_name: str, line: str) -> float:
    match = re.search(r"([+-]?\s*\d*\.?\d*)\s*" + re.escape(var_name), standard)
    if match is None:
        return 0.0
    raw = match.group(1).strip()
    if raw in ("", "+"):
        return 1.0
    if raw == "-":
        return -1.0
    return _legacy_number(raw, line)


def _parse_legacy(lhs: str, rhs: str, var_names, line) -> LinearEquationCoefficients:
    # "lhs = rhs" → "lhs-(rhs)"
    standard = f"{lhs}-({rhs})"
    const = re.search(r"([+-]?\s*\d*\.?\d*)\)$", standard)
    c = _legacy_number(const.group(1), line) if const else 0.0
    return LinearEquationCoefficients(
        a=_legacy_coefficient(standard, var_names[0], line),
        b=_legacy_coefficient(standard, var_names[1], line),
        c=c,
    )


# ── Public API ──────────────────────────────────────────────────────────

def _check_var_names(var_names) -> tuple[str, str]:
    names = tuple(var_names)
    if len(names) != 2 or names[0] == names[1] or not all(
        isinstance(n, str) and n.isidentifier() for n in names
    ):
        raise MalformedEquationError(
            f"Expected two distinct variable names, got {list(names)!r}."
        )
    return names


def parse_linear_equation(
    line: str,
    var_names: tuple[str, str] = ("x", "y"),
    strategy: str = "tokenize",
) -> LinearEquationCoefficients:
    """Extract ``(a, b, c)`` from one ``a·x + b·y = c`` line.

    Raises MalformedEquationError when there is no single '=' or the
    coefficients cannot be read.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy {strategy!r}; expected one of {STRATEGIES}")
    names = _check_var_names(var_names)
    text = (line or "").strip()
    if "=" not in text:
        raise MalformedEquationError(f"Equation must contain '=': '{text}'.")
    parts = text.split("=")
    if len(parts) != 2:
        raise MalformedEquationError(f"Equation must contain exactly one '=': '{text}'.")
    lhs, rhs = parts[0].strip(), parts[1].strip()

    if strategy == "legacy":
        coeffs = _parse_legacy(lhs, rhs, names, text)
    else:
        coeffs = _parse_tokenized(lhs, rhs, names, text)
    logger.debug("parsed %r (%s) -> %s", text, strategy, coeffs)
    return coeffs


def _check_finite(*values: float) -> None:
    if not all(math.isfinite(v) for v in values):
        raise EvaluationError(
            "Coefficients are too large: the determinant products are not finite numbers."
        )


def solve_2x2(
    eq1: LinearEquationCoefficients,
    eq2: LinearEquationCoefficients,
    var_names: tuple[str, str] = ("x", "y"),
) -> SystemResult:
    """Solve a two-equation system with Cramer's rule."""
    xn, yn = var_names
    a1, b1, c1 = eq1.a, eq1.b, eq1.c
    a2, b2, c2 = eq2.a, eq2.b, eq2.c
    eps = config.DETERMINANT_EPSILON
    f = fmt_num
    _check_finite(a1, b1, c1, a2, b2, c2)

    steps = [
        "Writing in matrix form:",
        f"[{f(a1)} {f(b1)}] [{xn}] = [{f(c1)}]",
        f"[{f(a2)} {f(b2)}] [{yn}]   [{f(c2)}]",
    ]

    determinant = a1 * b2 - a2 * b1
    _check_finite(determinant)

    if abs(determinant) < eps:
        cross_x = a1 * c2 - a2 * c1
        cross_y = b1 * c2 - b2 * c1
        _check_finite(cross_x, cross_y)
        if abs(cross_x) < eps and abs(cross_y) < eps:
            solution = InfiniteSolutions()
            steps.append("The determinant is zero and the system is consistent.")
            steps.append("Therefore, the system has infinitely many solutions.")
        else:
            solution = NoSolution()
            steps.append("The determinant is zero but the system is inconsistent.")
            steps.append("Therefore, the system has no solution.")
        logger.debug("singular system (det=%r): %s", determinant, solution.kind)
        return SystemResult(equations=(eq1, eq2), solution=solution, steps=steps,
                            var_names=(xn, yn))

    steps.append("Using Cramer's rule to solve the system:")
    steps.append(f"Determinant = {f(a1)} × {f(b2)} - {f(a2)} × {f(b1)} = {f(determinant)}")

    det_x = c1 * b2 - c2 * b1
    det_y = a1 * c2 - a2 * c1
    steps.append(f"Determinant for {xn} = {f(c1)} × {f(b2)} - {f(c2)} × {f(b1)} = {f(det_x)}")
    steps.append(f"Determinant for {yn} = {f(a1)} × {f(c2)} - {f(a2)} × {f(c1)} = {f(det_y)}")

    _check_finite(det_x, det_y)
    x = det_x / determinant
    y = det_y / determinant
    _check_finite(x, y)
    steps.append(f"{xn} = {f(det_x)} / {f(determinant)} = {f(x)}")
    steps.append(f"{yn} = {f(det_y)} / {f(determinant)} = {f(y)}")

    return SystemResult(equations=(eq1, eq2), solution=Unique(x=x, y=y), steps=steps,
                        var_names=(xn, yn))


def split_equations(text: str) -> list[str]:
    """One equation per non-blank line."""
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def solve_system(
    text: str,
    var_names: tuple[str, str] = ("x", "y"),
    strategy: str = "tokenize",
) -> SystemResult:
    """Parse a raw multi-line system and solve it.

    Only two equations in two unknowns are supported; any other count
    raises UnsupportedSystemSizeError.
    """
    names = _check_var_names(var_names)
    lines = split_equations(text)
    if len(lines) != 2:
        raise UnsupportedSystemSizeError(len(lines))

    eq1 = parse_linear_equation(lines[0], names, strategy)
    eq2 = parse_linear_equation(lines[1], names, strategy)
    result = solve_2x2(eq1, eq2, names)
    result.steps[:0] = ["Starting with the system of equations:", *lines]
    return result
