"""Display helpers shared by the solver modules."""

import math
import re

_SUPERSCRIPT = str.maketrans("0123456789+-/()", "⁰¹²³⁴⁵⁶⁷⁸⁹⁺⁻ᐟ⁽⁾")


def fmt_num(value: float, max_decimals: int = 10) -> str:
    """Format a float into a clean decimal string.

    - Removes trailing zeros after the decimal point.
    - Uses up to *max_decimals* digits of precision.
    - Returns integers without a decimal point (e.g. ``7`` not ``7.0``).
    - Infinities and NaN print as ``inf`` / ``-inf`` / ``nan``.
    """
    if not math.isfinite(value):
        return str(value)
    if abs(value - round(value)) < 1e-12:
        return str(int(round(value)))
    return f"{value:.{max_decimals}f}".rstrip("0").rstrip(".")


def to_superscript(text: str) -> str:
    """Convert a string of digits / signs into Unicode superscript."""
    return text.translate(_SUPERSCRIPT)


def expr_to_text(expr) -> str:
    """Render a SymPy expression back into the caret notation users type.

    The result parses again through :func:`solver.expression.parse`.
    """
    return str(expr).replace("**", "^")


def pretty(text: str) -> str:
    """Display form: ``^N`` exponents as superscript, ``2*x`` as ``2x``."""
    def _sup_repl(m):
        exp_text = m.group(1)
        if exp_text.startswith("(") and exp_text.endswith(")"):
            exp_text = exp_text[1:-1]
        return to_superscript(exp_text)

    s = re.sub(r"\^\((-?\d+)\)", _sup_repl, text)
    s = re.sub(r"\^(-?\d+)", _sup_repl, s)
    s = re.sub(r"(\d)\*([A-Za-z])", r"\1\2", s)
    return s.replace("*", "·")
