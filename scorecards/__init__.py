"""Scorecard classification and extraction engine.

Workbook -> SheetIndex -> classify() -> extract() -> validate(), with
walker.run() driving the whole flow over a directory tree.
"""

from scorecards.models import (
    Category,
    CoverDetails,
    FormatTag,
    Item,
    ReviewPeriod,
    ScorecardRecord,
)
from scorecards.sheet_index import DocumentUnreadableError, SheetIndex, load_sheet_index
from scorecards.classifier import CLASSIFICATION_RULES, classify, classify_sheet_names
from scorecards.periods import MONTH_LEXICON, extract_period
from scorecards.extractor import EXTRACTORS, extract
from scorecards.validator import validate
from scorecards.walker import BatchReport, DocumentOutcome, FailedFileEntry, run

__all__ = [
    "Category",
    "CoverDetails",
    "FormatTag",
    "Item",
    "ReviewPeriod",
    "ScorecardRecord",
    "DocumentUnreadableError",
    "SheetIndex",
    "load_sheet_index",
    "CLASSIFICATION_RULES",
    "classify",
    "classify_sheet_names",
    "MONTH_LEXICON",
    "extract_period",
    "EXTRACTORS",
    "extract",
    "validate",
    "BatchReport",
    "DocumentOutcome",
    "FailedFileEntry",
    "run",
]
