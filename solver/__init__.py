"""MathDash solver core: expressions, linear systems, integrals and tables."""

from solver.errors import (
    ColumnMismatchError, EmptyInputError, EvaluationError, InvalidBoundsError,
    MalformedEquationError, MathDashError, ParseError, UnsupportedSystemSizeError,
)
from solver.expression import derivative, evaluate, evaluate_single_var, simplify
from solver.integral import integrate, trapezoid
from solver.linear import parse_linear_equation, solve_2x2, solve_system
from solver.table import parse_table

__all__ = [
    "ColumnMismatchError", "EmptyInputError", "EvaluationError", "InvalidBoundsError",
    "MalformedEquationError", "MathDashError", "ParseError", "UnsupportedSystemSizeError",
    "derivative", "evaluate", "evaluate_single_var", "simplify",
    "integrate", "trapezoid",
    "parse_linear_equation", "solve_2x2", "solve_system",
    "parse_table",
]
