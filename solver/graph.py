"""
Chart builder for MathDash.

Produces themed matplotlib Figures for the dashboard's chart panel:
  - function / data-point charts (line, bar, scatter)
  - table charts  : second column plotted by the first
  - system charts : the two lines of a 2x2 system and their intersection

Figures are built with the object-oriented ``Figure`` API so nothing touches
pyplot's global state; ``figure_to_png`` serializes them for the API.
"""

import io

import numpy as np

from solver.errors import ColumnMismatchError, ParseError
from solver.expression import compile_expression
from solver.table import numeric_column
from solver.types import DelimitedTable, InfiniteSolutions, NoSolution, SystemResult, Unique

# ── palette ────────────────────────────────────────────────────────────────
DARK_GRAPH = dict(
    C_BG    = "#0f0f0f",
    C_AX    = "#181818",
    C_GRID  = "#252525",
    C_TICK  = "#666666",
    C_SPINE = "#333333",
    C_LINE1 = "#1a8cff",   # primary line
    C_LINE2 = "#ff8c42",   # secondary line (system)
    C_DOT   = "#4caf50",   # intersection / solution dot
    C_TEXT  = "#cccccc",
    C_LEGEND= "#1e1e1e",
)

LIGHT_GRAPH = dict(
    C_BG    = "#ffffff",
    C_AX    = "#f7f9fc",
    C_GRID  = "#dde2ea",
    C_TICK  = "#555555",
    C_SPINE = "#9baabb",
    C_LINE1 = "#0F4C75",
    C_LINE2 = "#e65100",
    C_DOT   = "#2e7d32",
    C_TEXT  = "#222222",
    C_LEGEND= "#ffffff",
)

# Series colour per chart type.
_SERIES_COLORS = {
    "line":    "#4bc0c0",
    "bar":     "#36a2eb",
    "scatter": "#ff6384",
}

CHART_TYPES = tuple(_SERIES_COLORS)


def palette(theme: str) -> dict:
    """Return the graph palette for *theme* (``"dark"`` or ``"light"``)."""
    if theme not in ("dark", "light"):
        raise ValueError(f"Unknown theme {theme!r}; expected 'dark' or 'light'")
    return DARK_GRAPH if theme == "dark" else LIGHT_GRAPH


def _new_figure(p: dict, figsize=(7, 3.8)):
    from matplotlib.figure import Figure

    fig = Figure(figsize=figsize, dpi=100)
    ax = fig.add_subplot(111)
    _style_axes(ax, fig, p)
    return fig, ax


def _style_axes(ax, fig, p: dict):
    fig.patch.set_facecolor(p["C_BG"])
    ax.set_facecolor(p["C_AX"])
    ax.tick_params(colors=p["C_TICK"], labelsize=9)
    ax.xaxis.label.set_color(p["C_TEXT"])
    ax.yaxis.label.set_color(p["C_TEXT"])
    ax.title.set_color(p["C_TEXT"])
    for spine in ax.spines.values():
        spine.set_edgecolor(p["C_SPINE"])
    ax.grid(True, color=p["C_GRID"], linewidth=0.8, linestyle="--", alpha=0.7)
    ax.axhline(0, color=p["C_SPINE"], linewidth=0.8)
    ax.axvline(0, color=p["C_SPINE"], linewidth=0.8)


def _legend(ax, p: dict):
    ax.legend(fontsize=8, facecolor=p["C_LEGEND"], edgecolor=p["C_SPINE"],
              labelcolor=p["C_TEXT"])


# ── Data series ────────────────────────────────────────────────────────────

def parse_number_list(text: str, label: str = "values") -> list:
    """Parse a comma-separated list such as ``"-2,-1,0,1,2"``."""
    parts = [p.strip() for p in (text or "").split(",")]
    if not parts or parts == [""]:
        raise ParseError(f"Please enter {label} (comma separated).")
    numbers = []
    for part in parts:
        try:
            value = float(part)
        except ValueError:
            raise ParseError(f"'{part}' in {label} is not a number.") from None
        if not np.isfinite(value):
            raise ParseError(f"'{part}' in {label} is not a finite number.")
        numbers.append(value)
    return numbers


def series_from_formula(formula: str, x_values: str, var_name: str = "x"):
    """Sample *formula* at each comma-separated x value."""
    xs = parse_number_list(x_values, "X values")
    f = compile_expression(formula, [var_name])
    ys = [f(x) for x in xs]
    return xs, ys


def series_from_values(x_values: str, y_values: str):
    """Pair explicit comma-separated x and y values."""
    xs = parse_number_list(x_values, "X values")
    ys = parse_number_list(y_values, "Y values")
    if len(xs) != len(ys):
        raise ColumnMismatchError("X and Y arrays must have the same length")
    return xs, ys


# ── Figures ────────────────────────────────────────────────────────────────

def build_chart(xs, ys, chart_type: str = "line", title: str = None, theme: str = "dark"):
    """Line, bar or scatter chart of the points ``(xs[i], ys[i])``."""
    if chart_type not in CHART_TYPES:
        raise ValueError(f"Unknown chart type {chart_type!r}; expected one of {CHART_TYPES}")
    if len(xs) != len(ys):
        raise ColumnMismatchError("X and Y arrays must have the same length")

    p = palette(theme)
    fig, ax = _new_figure(p)
    color = _SERIES_COLORS[chart_type]
    if chart_type == "line":
        ax.plot(xs, ys, color=color, linewidth=2, marker="o", markersize=4)
    elif chart_type == "bar":
        ax.bar(xs, ys, color=color)
    else:
        ax.scatter(xs, ys, color=color, s=30)

    ax.set_title(title or f"{chart_type.capitalize()} Chart", color=p["C_TEXT"], fontsize=10)
    fig.tight_layout(pad=1.2)
    return fig


def build_table_chart(table: DelimitedTable, theme: str = "dark"):
    """Bar chart of the second column by the first.

    Returns None when the table has no rows or fewer than two columns.
    """
    if not table.rows or len(table.headers) < 2:
        return None
    x_name, y_name = table.headers[0], table.headers[1]
    labels = [row[0] for row in table.rows]
    heights = numeric_column(table, y_name)

    p = palette(theme)
    fig, ax = _new_figure(p)
    positions = np.arange(len(labels))
    ax.bar(positions, heights, color=_SERIES_COLORS["bar"])
    ax.set_xticks(positions)
    ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_xlabel(x_name, color=p["C_TEXT"])
    ax.set_ylabel(y_name, color=p["C_TEXT"])
    ax.set_title(f"{y_name} by {x_name}", color=p["C_TEXT"], fontsize=10)
    fig.tight_layout(pad=1.2)
    return fig


def _line_points(eq, x_range):
    """(xs, ys) of ``a·x + b·y = c``; vertical lines use a constant x."""
    if eq.b != 0:
        return x_range, (eq.c - eq.a * x_range) / eq.b
    if eq.a != 0:
        return np.full(2, eq.c / eq.a), np.array([-1e6, 1e6])
    return None


def build_system_figure(result: SystemResult, theme: str = "dark"):
    """Plot both equations of a 2x2 system and mark the intersection."""
    p = palette(theme)
    xn, yn = result.var_names
    solution = result.solution

    cx = solution.x if isinstance(solution, Unique) else 0.0
    cy = solution.y if isinstance(solution, Unique) else 0.0
    x_range = np.linspace(cx - 8, cx + 8, 400)

    fig, ax = _new_figure(p)
    colors = (p["C_LINE1"], p["C_LINE2"])
    finite_ys = []
    for i, (eq, color) in enumerate(zip(result.equations, colors), 1):
        pts = _line_points(eq, x_range)
        if pts is None:
            continue
        xs, ys = pts
        label = f"({i}) {eq.a:g}{xn} + {eq.b:g}{yn} = {eq.c:g}"
        ax.plot(xs, ys, color=color, linewidth=2, label=label)
        if eq.b != 0:
            finite_ys.append(ys)

    if isinstance(solution, Unique):
        ax.scatter([solution.x], [solution.y], color=p["C_DOT"], s=90, zorder=5,
                   label=f"Intersection: ({solution.x:g}, {solution.y:g})")
        title = f"One solution — lines intersect  at  ({solution.x:g}, {solution.y:g})"
    elif isinstance(solution, InfiniteSolutions):
        title = "Infinite solutions — same line (equations are equivalent)"
    elif isinstance(solution, NoSolution):
        title = "No solution — parallel lines (never intersect)"
    else:
        title = ""
    ax.set_title(title, color=p["C_TEXT"], fontsize=9)
    ax.set_xlim(x_range[0], x_range[-1])

    # Clip y-axis to avoid extreme values
    if finite_ys:
        y_all = np.concatenate(finite_ys)
        ylo, yhi = np.percentile(y_all, 2), np.percentile(y_all, 98)
        pad = max((yhi - ylo) * 0.2, 1.0)
        ax.set_ylim(min(ylo, cy) - pad, max(yhi, cy) + pad)
    else:
        ax.set_ylim(cy - 8, cy + 8)

    ax.set_xlabel(xn, color=p["C_TEXT"])
    ax.set_ylabel(yn, color=p["C_TEXT"])
    _legend(ax, p)
    fig.tight_layout(pad=1.2)
    return fig


def figure_to_png(fig) -> bytes:
    """Serialize *fig* to PNG bytes."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", bbox_inches="tight", dpi=100,
                facecolor=fig.get_facecolor())
    return buf.getvalue()
