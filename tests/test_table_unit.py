"""Tests for delimited-text import, summaries and export."""

import pytest

from solver import table
from solver.errors import ColumnMismatchError, EmptyInputError, EvaluationError

SCORES = "name,score\na,1\nb,2\nc,6"


def test_parse_headers_and_rows() -> None:
    t = table.parse_table("a,b\n1,2\n3,4")
    assert t.headers == ["a", "b"]
    assert t.rows == [["1", "2"], ["3", "4"]]


def test_fields_are_trimmed_and_blank_lines_dropped() -> None:
    t = table.parse_table("  a , b \n\n 1, 2 \n   \n")
    assert t.headers == ["a", "b"]
    assert t.rows == [["1", "2"]]


def test_windows_line_endings() -> None:
    t = table.parse_table("a,b\r\n1,2\r\n")
    assert t.headers == ["a", "b"]
    assert t.rows == [["1", "2"]]


def test_header_only() -> None:
    t = table.parse_table("a,b,c")
    assert t.headers == ["a", "b", "c"]
    assert t.rows == []


def test_other_delimiter() -> None:
    t = table.parse_table("a;b\n1;2", delimiter=";")
    assert t.rows == [["1", "2"]]


@pytest.mark.parametrize("raw,row_index", [
    ("a,b\n1,2,3", 0),
    ("a,b\n1,2\n3", 1),
])
def test_column_mismatch_reports_row(raw, row_index) -> None:
    with pytest.raises(ColumnMismatchError) as info:
        table.parse_table(raw)
    assert info.value.row_index == row_index
    assert info.value.code == "COLUMN_MISMATCH"


@pytest.mark.parametrize("raw", ["", "\n  \n", None])
def test_empty_input(raw) -> None:
    with pytest.raises(EmptyInputError, match="CSV file is empty"):
        table.parse_table(raw)


def test_empty_delimiter() -> None:
    with pytest.raises(ValueError):
        table.parse_table("a,b", delimiter="")


class TestSummary:
    def test_default_column(self):
        s = table.summarize(table.parse_table(SCORES))
        assert s.column == "score"
        assert (s.count, s.mean, s.median, s.min, s.max) == (3, 3.0, 2.0, 1.0, 6.0)

    def test_named_column(self):
        t = table.parse_table("x,y\n1,10\n2,20")
        assert table.summarize(t, "x").mean == 1.5

    def test_unknown_column(self):
        with pytest.raises(EvaluationError, match="Unknown column"):
            table.summarize(table.parse_table(SCORES), "grade")

    def test_non_numeric_column(self):
        with pytest.raises(EvaluationError, match="not numeric"):
            table.summarize(table.parse_table(SCORES), "name")

    def test_no_numeric_column(self):
        t = table.parse_table("a,b\nx,y")
        assert table.default_column(t) is None
        with pytest.raises(EvaluationError):
            table.summarize(t)

    def test_no_rows(self):
        with pytest.raises(EvaluationError):
            table.summarize(table.parse_table("a,b"))


def test_preview_truncates() -> None:
    raw = "n\n" + "\n".join(str(i) for i in range(8))
    p = table.preview(table.parse_table(raw), limit=5)
    assert p["rows"] == [["0"], ["1"], ["2"], ["3"], ["4"]]
    assert p["total_rows"] == 8
    assert p["truncated"] is True


def test_export_formats() -> None:
    t = table.parse_table(" a , b \n1,2")
    assert table.to_csv(t) == "a,b\n1,2"
    assert table.to_tsv(t) == "a\tb\n1\t2"


def test_parse_table_is_repeatable() -> None:
    raw = "a, b\n1, 2\n\n3, 4\n"
    assert table.parse_table(raw) == table.parse_table(raw)
    assert table.summarize(table.parse_table(raw)) == table.summarize(table.parse_table(raw))
