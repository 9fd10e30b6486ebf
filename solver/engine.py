"""Request-level dispatch for the dashboard tools.

Each ``run_*`` function takes the raw form values of one tool, calls the
matching solver module and returns a result dict in one shape:

  - input        : the form values as received
  - method       : name / description of the technique used
  - steps        : ordered, human-readable step trace
  - final_answer : the line shown as "Result"
  - result       : structured payload of the computation
  - summary      : runtime_ms, total_steps, timestamp, library

The dict is only built after the computation succeeded, so a failing request
never yields a partial result.
"""

import time
from datetime import datetime

import numpy as np
import sympy

from solver import expression, integral, linear, table
from solver.formatting import fmt_num
from solver.logging_config import get_logger

logger = get_logger("engine")

_SYMPY = f"SymPy {sympy.__version__}"
_NUMPY = f"NumPy {np.__version__}"


def _build_result(inputs: dict, method_name: str, method_desc: str, steps: list,
                  final_answer: str, payload: dict, t_start: float, library: str) -> dict:
    runtime_ms = round((time.perf_counter() - t_start) * 1000, 2)
    return {
        "input": inputs,
        "method": {"name": method_name, "description": method_desc},
        "steps": list(steps),
        "final_answer": final_answer,
        "result": payload,
        "summary": {
            "runtime_ms": runtime_ms,
            "total_steps": len(steps),
            "timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "library": library,
        },
    }


def run_evaluate(expr: str, variables: dict = None) -> dict:
    t_start = time.perf_counter()
    bindings = dict(variables or {})
    value = expression.evaluate(expr, bindings)
    answer = f"Result: {fmt_num(value)}"
    steps = [f"Evaluating expression: {expr.strip()}"]
    if bindings:
        steps.append("Substituting " + ", ".join(
            f"{k} = {fmt_num(float(v))}" for k, v in sorted(bindings.items())
        ))
    steps.append(answer)
    return _build_result(
        {"expression": expr, "variables": bindings},
        "Direct evaluation", "Parse the expression and evaluate it numerically.",
        steps, answer, {"value": value}, t_start, _SYMPY,
    )


def run_solve(equation: str, variable: str = "x") -> dict:
    t_start = time.perf_counter()
    res = expression.solve_equation(equation, variable)
    if res.value is not None and "=" in equation:
        name, desc = "Linear rearrangement", "Move every term to one side and isolate the variable."
    else:
        name, desc = "Direct evaluation", "Parse the expression and evaluate it numerically."
    return _build_result(
        {"equation": equation, "variable": variable},
        name, desc, res.steps, res.answer, res.to_dict(), t_start, _SYMPY,
    )


def run_derivative(expr: str, variable: str = "x") -> dict:
    t_start = time.perf_counter()
    res = expression.derivative_result(expr, variable)
    return _build_result(
        {"expression": expr, "variable": variable},
        "Symbolic differentiation", f"Differentiate with respect to {variable}.",
        res.steps, res.answer, res.to_dict(), t_start, _SYMPY,
    )


def run_simplify(expr: str) -> dict:
    t_start = time.perf_counter()
    simplified = expression.simplify(expr)
    steps = [f"Simplifying {expr.strip()}", f"Result: {simplified}"]
    return _build_result(
        {"expression": expr},
        "Symbolic simplification", "Rewrite the expression in its simplest form.",
        steps, simplified, {"expression": simplified}, t_start, _SYMPY,
    )


def run_integral(expr: str, variable: str, lower, upper) -> dict:
    t_start = time.perf_counter()
    res = integral.integrate(expr, variable, lower, upper)
    if res.method == "closed_form":
        name = "Antiderivative"
        desc = "Evaluate a known antiderivative at both bounds."
    else:
        name = "Trapezoidal rule"
        desc = "Approximate the area with uniform trapezoid slices."
    return _build_result(
        {"expression": expr, "variable": variable, "lower": lower, "upper": upper},
        name, desc, res.steps, res.answer, res.to_dict(), t_start, _SYMPY,
    )


def run_system(equations: str, var_names=("x", "y"), strategy: str = "tokenize") -> dict:
    t_start = time.perf_counter()
    res = linear.solve_system(equations, tuple(var_names), strategy)
    return _build_result(
        {"equations": equations, "variables": ", ".join(var_names), "strategy": strategy},
        "Cramer's rule", "Solve the 2x2 system with determinant ratios.",
        res.steps, res.answer, res.to_dict(), t_start, "Python float",
    )


def run_table(raw: str, delimiter: str = ",", with_summary: bool = True,
              column: str = None, preview_rows: int = 5) -> dict:
    t_start = time.perf_counter()
    parsed = table.parse_table(raw, delimiter)
    payload = {
        "table": parsed.to_dict(),
        "preview": table.preview(parsed, preview_rows),
    }
    steps = [
        f"Read {len(parsed.headers)} column(s): {', '.join(parsed.headers)}",
        f"Read {len(parsed.rows)} data row(s)",
    ]
    if with_summary and (column is not None or table.default_column(parsed) is not None):
        summary = table.summarize(parsed, column)
        payload["summary"] = summary.to_dict()
        steps.append(
            f"Summarized column '{summary.column}': count {summary.count}, "
            f"mean {summary.mean:.2f}, median {summary.median:.2f}, "
            f"min {summary.min:.2f}, max {summary.max:.2f}"
        )
    logger.debug("table import: %d rows", len(parsed.rows))
    return _build_result(
        {"delimiter": delimiter},
        "Delimited text import", "Split lines on the delimiter and validate column counts.",
        steps, "File successfully processed", payload, t_start, _NUMPY,
    )
