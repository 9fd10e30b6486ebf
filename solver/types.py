"""Result types returned by the solver package.

Every computation produces its value and its step trace together in one
object, so a caller never sees a result without its derivation or the
other way round.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass
class EquationResult:
    """Result of solving/evaluating an equation or taking a derivative."""

    answer: str
    value: Optional[float] = None
    expression: Optional[str] = None
    steps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result = {"answer": self.answer, "steps": list(self.steps)}
        if self.value is not None:
            result["value"] = self.value
        if self.expression is not None:
            result["expression"] = self.expression
        return result


@dataclass(frozen=True)
class LinearEquationCoefficients:
    """The triple (a, b, c) of ``a·x + b·y = c``."""

    a: float
    b: float
    c: float

    def to_dict(self) -> dict[str, float]:
        return {"a": self.a, "b": self.b, "c": self.c}


@dataclass(frozen=True)
class Unique:
    x: float
    y: float
    kind: str = field(default="unique", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class InfiniteSolutions:
    kind: str = field(default="infinite", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind}


@dataclass(frozen=True)
class NoSolution:
    kind: str = field(default="none", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind}


LinearSystemSolution = Union[Unique, InfiniteSolutions, NoSolution]


@dataclass
class SystemResult:
    """Solution of a 2x2 system plus the Cramer's-rule derivation."""

    equations: tuple[LinearEquationCoefficients, LinearEquationCoefficients]
    solution: LinearSystemSolution
    steps: list[str] = field(default_factory=list)
    var_names: tuple[str, str] = ("x", "y")

    @property
    def answer(self) -> str:
        if isinstance(self.solution, Unique):
            xn, yn = self.var_names
            return f"{xn} = {self.solution.x:.4f}, {yn} = {self.solution.y:.4f}"
        if isinstance(self.solution, InfiniteSolutions):
            return "The system has infinitely many solutions"
        return "The system has no solution"

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "solution": self.solution.to_dict(),
            "coefficients": [eq.to_dict() for eq in self.equations],
            "steps": list(self.steps),
        }


@dataclass
class IntegralResult:
    """Definite integral value and how it was obtained."""

    expression: str
    variable: str
    lower: float
    upper: float
    value: float
    method: str  # "closed_form" or "trapezoid"
    antiderivative: Optional[str] = None
    steps: list[str] = field(default_factory=list)

    @property
    def answer(self) -> str:
        relation = "=" if self.method == "closed_form" else "≈"
        return (
            f"∫[{self.lower:g}, {self.upper:g}] {self.expression} d{self.variable} "
            f"{relation} {self.value:.6f}"
        )

    def to_dict(self) -> dict[str, Any]:
        result = {
            "answer": self.answer,
            "value": self.value,
            "method": self.method,
            "steps": list(self.steps),
        }
        if self.antiderivative is not None:
            result["antiderivative"] = self.antiderivative
        return result


@dataclass
class DelimitedTable:
    """Header row plus data rows; every row has ``len(headers)`` fields."""

    headers: list[str]
    rows: list[list[str]]

    def to_dict(self) -> dict[str, Any]:
        return {"headers": list(self.headers), "rows": [list(r) for r in self.rows]}


@dataclass
class TableSummary:
    """Summary statistics of one numeric column."""

    column: str
    count: int
    mean: float
    median: float
    min: float
    max: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "column": self.column,
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "min": self.min,
            "max": self.max,
        }
