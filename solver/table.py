"""Delimited-text import, column statistics and export.

The parser is deliberately naive: it splits on the delimiter with no
support for quoted fields or embedded newlines.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from solver.errors import ColumnMismatchError, EmptyInputError, EvaluationError
from solver.logging_config import get_logger
from solver.types import DelimitedTable, TableSummary

logger = get_logger("table")


def parse_table(raw: str, delimiter: str = ",") -> DelimitedTable:
    """Split *raw* into a header row and data rows.

    Blank lines are dropped and every field is trimmed.  The whole input is
    rejected if any row's field count differs from the header's.
    """
    if not delimiter:
        raise ValueError("delimiter must be a non-empty string")
    lines = [line for line in (raw or "").split("\n") if line.strip() != ""]
    if not lines:
        raise EmptyInputError("CSV file is empty")

    headers = [field.strip() for field in lines[0].split(delimiter)]
    rows = [[cell.strip() for cell in line.split(delimiter)] for line in lines[1:]]

    for index, row in enumerate(rows):
        if len(row) != len(headers):
            raise ColumnMismatchError(
                f"CSV has inconsistent number of columns: row {index} has "
                f"{len(row)} fields, expected {len(headers)}",
                row_index=index,
            )

    logger.debug("parsed table: %d columns, %d rows", len(headers), len(rows))
    return DelimitedTable(headers=headers, rows=rows)


def _to_float(cell: str) -> Optional[float]:
    try:
        value = float(cell)
    except ValueError:
        return None
    return value if np.isfinite(value) else None


def numeric_column(table: DelimitedTable, column: str) -> np.ndarray:
    """Values of *column* as a float array; every cell must be numeric."""
    if column not in table.headers:
        raise EvaluationError(f"Unknown column '{column}'.")
    idx = table.headers.index(column)
    values = []
    for row_index, row in enumerate(table.rows):
        value = _to_float(row[idx])
        if value is None:
            raise EvaluationError(
                f"Column '{column}' is not numeric (row {row_index}: '{row[idx]}')."
            )
        values.append(value)
    return np.array(values, dtype=float)


def default_column(table: DelimitedTable) -> Optional[str]:
    """Last column whose cells are all numbers, or None."""
    for idx in range(len(table.headers) - 1, -1, -1):
        cells = [row[idx] for row in table.rows]
        if cells and all(_to_float(c) is not None for c in cells):
            return table.headers[idx]
    return None


def summarize(table: DelimitedTable, column: Optional[str] = None) -> TableSummary:
    """Count, mean, median, min and max of one numeric column."""
    if not table.rows:
        raise EvaluationError("The table has no data rows to summarize.")
    name = column if column is not None else default_column(table)
    if name is None:
        raise EvaluationError("The table has no numeric column to summarize.")
    arr = numeric_column(table, name)
    return TableSummary(
        column=name,
        count=int(arr.size),
        mean=float(np.mean(arr)),
        median=float(np.median(arr)),
        min=float(np.min(arr)),
        max=float(np.max(arr)),
    )


def preview(table: DelimitedTable, limit: int = 5) -> dict:
    """The first *limit* rows shown after an import, plus the total row count."""
    return {
        "headers": list(table.headers),
        "rows": [list(r) for r in table.rows[:limit]],
        "total_rows": len(table.rows),
        "truncated": len(table.rows) > limit,
    }


def _join(table: DelimitedTable, sep: str) -> str:
    lines = [sep.join(table.headers)]
    lines.extend(sep.join(str(cell) for cell in row) for row in table.rows)
    return "\n".join(lines)


def to_csv(table: DelimitedTable) -> str:
    """Comma-separated export (no quoting, mirroring the parser)."""
    return _join(table, ",")


def to_tsv(table: DelimitedTable) -> str:
    """Tab-separated text for pasting into a spreadsheet."""
    return _join(table, "\t")
