from matplotlib.figure import Figure
import pytest

from solver import graph, linear, table
from solver.errors import ColumnMismatchError, EvaluationError, ParseError


def test_palette_matches_theme() -> None:
    assert graph.palette("dark") is graph.DARK_GRAPH
    assert graph.palette("light") is graph.LIGHT_GRAPH
    with pytest.raises(ValueError):
        graph.palette("neon")


def test_parse_number_list() -> None:
    assert graph.parse_number_list("-2, -1,0 ,1.5") == [-2.0, -1.0, 0.0, 1.5]
    with pytest.raises(ParseError):
        graph.parse_number_list("")
    with pytest.raises(ParseError):
        graph.parse_number_list("1,two,3")
    with pytest.raises(ParseError):
        graph.parse_number_list("1,inf")


def test_series_from_formula() -> None:
    xs, ys = graph.series_from_formula("x^2", "-1,0,1")
    assert xs == [-1.0, 0.0, 1.0]
    assert ys == [1.0, 0.0, 1.0]
    with pytest.raises(EvaluationError):
        graph.series_from_formula("1/x", "-1,0,1")


def test_series_from_values_length_mismatch() -> None:
    with pytest.raises(ColumnMismatchError, match="same length"):
        graph.series_from_values("1,2,3", "1,2")


@pytest.mark.parametrize("chart_type", graph.CHART_TYPES)
@pytest.mark.parametrize("theme", ["dark", "light"])
def test_build_chart(chart_type, theme) -> None:
    fig = graph.build_chart([1, 2, 3], [4, 5, 6], chart_type, theme=theme)
    assert isinstance(fig, Figure)
    assert fig.axes[0].get_title() == f"{chart_type.capitalize()} Chart"


def test_build_chart_rejects_unknown_type() -> None:
    with pytest.raises(ValueError):
        graph.build_chart([1], [1], "pie")


def test_build_table_chart() -> None:
    fig = graph.build_table_chart(table.parse_table("name,score\na,1\nb,3"))
    assert isinstance(fig, Figure)
    assert fig.axes[0].get_title() == "score by name"
    assert graph.build_table_chart(table.parse_table("name\na")) is None
    assert graph.build_table_chart(table.parse_table("a,b")) is None


@pytest.mark.parametrize("text,prefix", [
    ("2x + y = 5\n3x - 2y = 4", "One solution"),
    ("x + y = 5\nx + y = 5", "Infinite solutions"),
    ("x + y = 5\nx + y = 3", "No solution"),
    ("x = 2\nx + y = 3", "One solution"),
])
def test_build_system_figure(text, prefix) -> None:
    fig = graph.build_system_figure(linear.solve_system(text))
    assert fig.axes[0].get_title().startswith(prefix)


def test_figure_to_png() -> None:
    png = graph.figure_to_png(graph.build_chart([0, 1], [0, 1]))
    assert png.startswith(b"\x89PNG")
