"""Review-period recovery.

Scorecard authors put the review month in loosely labelled cover cells
("Review Period: March 2025", "Month | Sept 2025"), and often only in the
filename.  Recovery is two passes:

1. Cover pass: scan the first rows of the format's cover sheet for a cell
   mentioning "review period" or "month" and read the cell to its right.
2. Filename pass: fill whichever of month/year is still missing from the
   lower-cased filename.

Matching is plain substring containment against MONTH_LEXICON in order,
so "may" inside "maybe" counts as May.  Callers rely on that behaviour;
see DESIGN.md before changing it.
"""

from __future__ import annotations

import logging

from scorecards.catalog import PERIOD_COVER_SHEETS
from scorecards.models import FormatTag, ReviewPeriod
from scorecards.sheet_index import SheetIndex
from utils.patterns import YEAR_20XX
from utils.strings import cell_lower

logger = logging.getLogger(__name__)

PERIOD_SCAN_ROWS = 20
PERIOD_LABELS = ("review period", "month")

# Checked in this order; the first entry contained in the text wins
MONTH_LEXICON: list[tuple[str, int]] = [
    ("jan", 1), ("january", 1),
    ("feb", 2), ("february", 2),
    ("mar", 3), ("march", 3),
    ("apr", 4), ("april", 4),
    ("may", 5),
    ("jun", 6), ("june", 6),
    ("jul", 7), ("july", 7),
    ("aug", 8), ("august", 8),
    ("sep", 9), ("sept", 9), ("september", 9),
    ("oct", 10), ("october", 10),
    ("nov", 11), ("november", 11),
    ("dec", 12), ("december", 12),
]


def month_from_text(text: str) -> int | None:
    """First lexicon month contained in the lower-cased *text*."""
    lowered = text.lower()
    for token, month in MONTH_LEXICON:
        if token in lowered:
            return month
    return None


def year_from_text(text: str) -> int | None:
    """First ``20xx`` year in *text*."""
    m = YEAR_20XX.search(text)
    return int(m.group(0)) if m else None


def _scan_cover(grid) -> tuple[int | None, int | None]:
    month = year = None
    for row in grid[:PERIOD_SCAN_ROWS]:
        for j, cell in enumerate(row):
            label = cell_lower(cell)
            if not any(key in label for key in PERIOD_LABELS):
                continue
            value = cell_lower(row[j + 1]) if j + 1 < len(row) else ""
            found_month = month_from_text(value)
            if found_month is not None:
                month = found_month
            found_year = year_from_text(value)
            if found_year is not None:
                year = found_year
    return month, year


def extract_period(sheet_index: SheetIndex, format_tag: FormatTag,
                   filename: str = "") -> ReviewPeriod:
    """Recover the review month/year of a classified workbook.

    Args:
        sheet_index: Loaded workbook.
        format_tag: Classification of the workbook; selects the cover sheet.
        filename: Base name of the source file, used as a fallback.

    Returns:
        ReviewPeriod whose month and year are independently optional.
    """
    month = year = None

    cover_name = PERIOD_COVER_SHEETS.get(format_tag)
    if cover_name and sheet_index.has_sheet(cover_name):
        month, year = _scan_cover(sheet_index.grid(cover_name))

    if (month is None or year is None) and filename:
        lowered = filename.lower()
        if month is None:
            month = month_from_text(lowered)
        if year is None:
            year = year_from_text(lowered)
        logger.debug("Period fallback for %s: month=%s year=%s", filename, month, year)

    return ReviewPeriod(month=month, year=year)
