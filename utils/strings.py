"""String and cell-value helpers for the scorecard tools.

Cells come out of openpyxl as str, int, float, datetime or None.  These
helpers are called for every scanned cell, so they stay small and avoid
raising on bad input.
"""

from __future__ import annotations

from utils.patterns import WHITESPACE, NUMERIC_NOISE

# Chart-score markers that mean "not scored" rather than zero
NOT_APPLICABLE = frozenset({"n/a", "na", "-"})


def safe_float(val, default: float = 0.0) -> float:
    """Safely convert value to float with fallback default.

    Handles:
    - None, empty strings -> default
    - Numeric types -> float (bool is treated as non-numeric)
    - Strings with percent signs, whitespace, commas
    - Invalid input -> default

    Args:
        val: Value to convert (any type)
        default: Value to return on failure (default: 0.0)

    Returns:
        float: Parsed value or default
    """
    if val is None or val == '':
        return default
    if isinstance(val, bool):
        return default
    if isinstance(val, (int, float)):
        return float(val)

    try:
        s = NUMERIC_NOISE.sub('', str(val))
        return float(s) if s else default
    except (ValueError, TypeError):
        return default


def parse_number(val) -> float | None:
    """Return the numeric value of a cell, or None when it holds no number."""
    sentinel = float("nan")
    result = safe_float(val, sentinel)
    if result != result:  # NaN sentinel
        return None
    return result


def parse_chart_score(val) -> float | None:
    """Parse one chart score, treating ``n/a``, ``na``, ``-`` and blanks as unscored."""
    if val is None:
        return None
    if isinstance(val, str) and val.strip().lower() in NOT_APPLICABLE:
        return None
    return parse_number(val)


def cell_text(val) -> str:
    """Render a cell as text; empty cells become ``""``."""
    if val is None:
        return ""
    return str(val)


def cell_lower(val) -> str:
    """Lower-cased cell text, as used by every label match."""
    return cell_text(val).lower()


def normalize_whitespace(s: str) -> str:
    """Normalize multiple whitespace characters to single spaces.

    Converts tabs, newlines, multiple spaces to single space.
    Used for labels only; criteria text is kept verbatim.

    Example:
        "Facility   Name\\n" -> "Facility Name"
    """
    return WHITESPACE.sub(' ', s).strip()


def normalize_percent(value: float | None) -> float | None:
    """Scale a 0-1 fraction to a 0-100 percentage.

    Cover sheets format percentage cells either as fractions (``0.87``)
    or as already-scaled numbers (``87``).  Values above 1 are kept.
    """
    if value is None:
        return None
    if 0 < value <= 1:
        return round(value * 100, 2)
    return round(value, 2)
