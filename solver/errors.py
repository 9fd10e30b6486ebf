"""Error taxonomy shared by every MathDash computation.

Each error carries a human-readable ``message`` (shown to the user as-is)
and a stable machine ``code`` used by the API layer.
"""

from __future__ import annotations


class MathDashError(Exception):
    """Base class for all errors raised by the solver package."""

    code = "MATHDASH_ERROR"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ParseError(MathDashError):
    """Raised when an expression or equation is syntactically invalid."""

    code = "PARSE_ERROR"


class EvaluationError(MathDashError):
    """Raised when a parsed expression cannot be evaluated to a real number."""

    code = "EVALUATION_ERROR"


class MalformedEquationError(MathDashError):
    """Raised when a linear equation has no '=' or no extractable coefficients."""

    code = "MALFORMED_EQUATION"


class UnsupportedSystemSizeError(MathDashError):
    """Raised when a system does not contain exactly two equations."""

    code = "UNSUPPORTED_SYSTEM_SIZE"

    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"Only 2x2 systems are supported (got {count} "
            f"equation{'s' if count != 1 else ''})."
        )


class EmptyInputError(MathDashError):
    """Raised when delimited text contains no non-blank lines."""

    code = "EMPTY_INPUT"


class ColumnMismatchError(MathDashError):
    """Raised when a data row's field count differs from the header's."""

    code = "COLUMN_MISMATCH"

    def __init__(self, message: str, row_index: int | None = None):
        self.row_index = row_index
        super().__init__(message)


class InvalidBoundsError(MathDashError):
    """Raised when integration bounds are missing, non-numeric or non-finite."""

    code = "INVALID_BOUNDS"
