"""Expression evaluation, differentiation and simplification using SymPy.

User text is parsed with ``parse_expr`` and the implicit-multiplication /
caret transformations, so ``2x^2 + 3x`` and ``sin(x)`` both work.  Numeric
evaluation goes through ``lambdify`` on the ``math`` module; every failure
(syntax, missing variable, division by zero, domain error, complex result)
surfaces as a typed error instead of a silent NaN.
"""

from __future__ import annotations

import math
from tokenize import TokenError
from typing import Callable, Iterable, Mapping

import sympy
from sympy import Symbol, SympifyError, lambdify
from sympy.core.parameters import evaluate as global_evaluate
from sympy.parsing.sympy_parser import (
    parse_expr, standard_transformations, implicit_multiplication_application,
    convert_xor,
)

from solver import config
from solver.errors import EvaluationError, ParseError
from solver.formatting import expr_to_text, fmt_num, pretty
from solver.logging_config import get_logger
from solver.types import EquationResult

logger = get_logger("expression")

TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
)

_ALLOWED_CHARS = set(
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "0123456789"
    " \t+-*/^()._"
)

_EVAL_ERRORS = (ZeroDivisionError, ValueError, OverflowError, TypeError, NameError)


def _validate_characters(text: str) -> None:
    """Reject input containing characters outside the allowed set."""
    bad = {ch for ch in text if ch not in _ALLOWED_CHARS}
    if bad:
        raise ParseError(
            f"Invalid character(s): {' '.join(sorted(bad))}. "
            f"Only letters, numbers, and math symbols (+ - * / ^ ( ) .) are allowed."
        )


def _check_var_name(var_name: str) -> None:
    if not var_name or not var_name.isidentifier():
        raise ParseError(f"Invalid variable name: '{var_name}'.")


_FACTORIAL_LIKE = (sympy.factorial, sympy.factorial2, sympy.subfactorial, sympy.gamma)

_PARSE_ERRORS = (SyntaxError, TokenError, SympifyError, TypeError, ValueError,
                 AttributeError, NameError)


def _as_float(value) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf


def _constant_value(node: sympy.Basic, source: str):
    """Approximate complex value of a constant subtree, or None if it is symbolic.

    Walks the unevaluated tree bottom-up so nothing is expanded exactly
    before its size is known.  Raises ParseError for a power whose exponent
    exceeds ``MAX_EXPONENT``, a factorial or gamma of an argument above
    ``MAX_FACTORIAL_ARGUMENT``, or any constant outside the float range.
    """
    values = [_constant_value(arg, source) for arg in node.args]

    if isinstance(node, sympy.Pow) and values[1] is not None:
        base = values[0]
        if abs(values[1]) > config.MAX_EXPONENT and (base is None or abs(base) not in (0.0, 1.0)):
            raise ParseError(
                f"Exponent in '{source}' is too large (limit {config.MAX_EXPONENT})."
            )
    if isinstance(node, _FACTORIAL_LIKE) and values[0] is not None:
        if abs(values[0]) > config.MAX_FACTORIAL_ARGUMENT:
            raise ParseError(
                f"Argument of {node.func.__name__} in '{source}' is too large "
                f"(limit {config.MAX_FACTORIAL_ARGUMENT})."
            )

    if node.free_symbols or any(v is None for v in values):
        return None
    try:
        approx = node.evalf(15)
    except (ArithmeticError, ValueError):
        # undefined constants such as 1/0 are reported when evaluated
        return None
    if (not approx.is_number or approx.has(sympy.zoo, sympy.nan, sympy.oo, -sympy.oo)
            or approx.atoms(sympy.Function)):
        return None
    real_part, imag_part = approx.as_real_imag()
    value = complex(_as_float(real_part), _as_float(imag_part))
    if not (math.isfinite(value.real) and math.isfinite(value.imag)):
        raise ParseError(f"A constant in '{source}' is too large to evaluate.")
    return value


def _parse_expr(text: str, local: dict, evaluate: bool) -> sympy.Basic:
    try:
        if evaluate:
            return parse_expr(text, local_dict=local, transformations=TRANSFORMATIONS)
        # function calls such as factorial(n) must stay unevaluated as well
        with global_evaluate(False):
            return parse_expr(text, local_dict=local, transformations=TRANSFORMATIONS,
                              evaluate=False)
    except _PARSE_ERRORS as e:
        raise ParseError(f"Could not parse expression: '{text}'. Error: {e}") from e


def parse(text: str, var_names: Iterable[str] = ()) -> sympy.Expr:
    """Parse *text* into a SymPy expression.

    Names listed in *var_names* are bound to plain symbols so implicit
    multiplication never splits them (``xy`` stays one name if declared).
    The text is first parsed unevaluated and its constants are size-checked,
    so inputs such as ``9^9^9^9`` are rejected instead of expanded.
    """
    if text is None or not text.strip():
        raise ParseError("Expression cannot be empty.")
    if len(text) > config.MAX_INPUT_LENGTH:
        raise ParseError(
            f"Expression is too long ({len(text)} characters, "
            f"limit {config.MAX_INPUT_LENGTH})."
        )
    _validate_characters(text)
    local = {}
    for name in var_names:
        _check_var_name(name)
        local[name] = Symbol(name)
    source = text.strip()

    raw = _parse_expr(source, local, evaluate=False)
    if not isinstance(raw, sympy.Expr):
        raise ParseError(f"'{source}' is not an algebraic expression.")
    _constant_value(raw, source)

    expr = _parse_expr(source, local, evaluate=True)
    if not isinstance(expr, sympy.Expr):
        raise ParseError(f"'{source}' is not an algebraic expression.")
    return expr


def _to_real(value, source: str) -> float:
    """Convert a SymPy number or lambdified result into a finite float."""
    if isinstance(value, sympy.Basic):
        if value.free_symbols:
            names = ", ".join(sorted(str(s) for s in value.free_symbols))
            raise EvaluationError(f"Missing value for variable(s): {names}.")
        value = value.evalf()
        if value.has(sympy.zoo, sympy.nan, sympy.oo, -sympy.oo):
            raise EvaluationError(f"'{source}' is undefined (division by zero or domain error).")
        if value.is_real is not True:
            real_part, imag_part = value.as_real_imag()
            if imag_part != 0:
                raise EvaluationError(f"'{source}' does not evaluate to a real number.")
            value = real_part
        value = float(value)
    if isinstance(value, complex):
        if value.imag != 0:
            raise EvaluationError(f"'{source}' does not evaluate to a real number.")
        value = value.real
    value = float(value)
    if not math.isfinite(value):
        raise EvaluationError(f"'{source}' is undefined (result is not finite).")
    return value


def compile_expression(text: str, var_names: Iterable[str]) -> Callable[..., float]:
    """Parse once and return a float-valued callable over *var_names*.

    Used wherever one expression is sampled many times (integration,
    charting).  Each call raises :class:`EvaluationError` on failure.
    """
    names = list(var_names)
    expr = parse(text, names)
    missing = sorted(str(s) for s in expr.free_symbols if str(s) not in names)
    if missing:
        raise EvaluationError(f"Missing value for variable(s): {', '.join(missing)}.")
    symbols_ = [Symbol(n) for n in names]
    try:
        fn = lambdify(symbols_, expr, modules="math")
    except (TypeError, ValueError, NotImplementedError, SyntaxError) as e:
        raise EvaluationError(f"Cannot evaluate '{text.strip()}' numerically: {e}") from e
    source = text.strip()

    def _call(*args: float) -> float:
        try:
            result = fn(*args)
        except _EVAL_ERRORS as e:
            point = ", ".join(f"{n} = {fmt_num(float(a))}" for n, a in zip(names, args))
            where = f" at {point}" if point else ""
            raise EvaluationError(f"Cannot evaluate '{source}'{where}: {e}") from e
        return _to_real(result, source)

    return _call


def evaluate(text: str, bindings: Mapping[str, float]) -> float:
    """Evaluate *text* with every free variable taken from *bindings*."""
    names = sorted(bindings)
    for name in names:
        value = bindings[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise EvaluationError(f"Value for '{name}' must be a finite number.")
    fn = compile_expression(text, names)
    return fn(*(float(bindings[n]) for n in names))


def evaluate_single_var(text: str, var_name: str, x: float) -> float:
    """Evaluate a one-variable expression at ``var_name = x``."""
    return evaluate(text, {var_name: x})


def derivative(text: str, var_name: str) -> str:
    """Symbolic derivative of *text* with respect to *var_name*."""
    _check_var_name(var_name)
    expr = parse(text, [var_name])
    result = sympy.diff(expr, Symbol(var_name))
    logger.debug("d/d%s(%s) = %s", var_name, text, result)
    return expr_to_text(result)


def simplify(text: str) -> str:
    """Simplified form of *text* (SymPy ``simplify``)."""
    return expr_to_text(sympy.simplify(parse(text)))


def derivative_result(text: str, var_name: str) -> EquationResult:
    """Derivative with the two-line step trace shown by the dashboard."""
    result = derivative(text, var_name)
    steps = [
        f"Taking the derivative of {text.strip()} with respect to {var_name}",
        f"Result: {pretty(result)}",
    ]
    return EquationResult(
        answer=f"d/d{var_name}({text.strip()}) = {result}",
        value=None,
        expression=result,
        steps=steps,
    )


def solve_equation(text: str, var_name: str = "x") -> EquationResult:
    """Solve a linear equation in one variable, or evaluate a bare expression.

    Without ``=`` the input must be a constant expression and is evaluated.
    With one ``=`` the equation is rearranged to ``lhs - (rhs) = 0`` and must
    be linear in *var_name*.
    """
    _check_var_name(var_name)
    if text is None or not text.strip():
        raise ParseError("Please enter an equation.")
    eq = text.strip()

    if "=" not in eq:
        value = evaluate(eq, {})
        return EquationResult(
            answer=f"Result: {fmt_num(value)}",
            value=value,
            expression=None,
            steps=[f"Evaluating expression: {eq}", f"Result: {fmt_num(value)}"],
        )

    parts = eq.split("=")
    if len(parts) != 2:
        raise ParseError("Equation must contain exactly one '=' sign.")
    lhs_str, rhs_str = parts[0].strip(), parts[1].strip()
    if not lhs_str or not rhs_str:
        raise ParseError("Both sides of the equation must have expressions.")

    var = Symbol(var_name)
    lhs = parse(lhs_str, [var_name])
    rhs = parse(rhs_str, [var_name])
    combined = sympy.simplify(lhs - rhs)

    steps = [
        f"Starting with equation: {eq}",
        f"Rearranging to standard form: {expr_to_text(combined)} = 0",
    ]

    others = sorted(str(s) for s in combined.free_symbols if s != var)
    if others:
        raise EvaluationError(
            f"Unknown variable(s) {', '.join(others)}; only '{var_name}' may appear."
        )
    if var not in combined.free_symbols:
        if combined == 0:
            raise EvaluationError(f"The equation is an identity: every {var_name} is a solution.")
        raise EvaluationError("The equation has no solution (contradiction).")

    poly = combined.as_poly(var)
    if poly is None or poly.degree() != 1:
        raise EvaluationError(
            f"'{eq}' is not linear in {var_name}; only linear equations can be solved."
        )

    expanded = sympy.expand(combined)
    a = _to_real(expanded.coeff(var, 1), eq)
    b = _to_real(expanded.coeff(var, 0), eq)
    value = -b / a
    steps.append(f"Isolating the variable: {fmt_num(a)}{var_name} + {fmt_num(b)} = 0")
    steps.append(f"Solving for {var_name}: {var_name} = {fmt_num(value)}")
    logger.debug("solved %r for %s = %r", eq, var_name, value)

    return EquationResult(
        answer=f"{var_name} = {fmt_num(value)}",
        value=value,
        expression=None,
        steps=steps,
    )
