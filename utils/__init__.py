"""Shared utilities for the scorecard tools.

Nothing in here knows about scorecard layouts; the ``scorecards`` package
builds on these helpers, never the other way round.
"""

# Common utilities
from utils.common import format_duration, relative_display

# Pattern definitions
from utils.patterns import (
    YEAR_20XX,
    ITEM_NUMBER,
    WHITESPACE,
    NUMERIC_NOISE,
)

# String utilities
from utils.strings import (
    safe_float,
    parse_number,
    parse_chart_score,
    cell_text,
    cell_lower,
    normalize_whitespace,
    normalize_percent,
)

# Validation utilities
from utils.validation import ValidationIssue, ValidationResult, ValidationRegistry

# Progress tracking
from utils.progress import ProgressTracker, TerminalProgressTracker, SilentProgressTracker

# Formatting utilities
from utils.formatting import (
    format_points,
    format_percent,
    format_count,
    truncate_text,
    TableFormatter,
    ReportFormatter,
)

# Configuration
from utils.config import Config, AuditConfig, KnownValues

__all__ = [
    # Common
    "format_duration",
    "relative_display",
    # Patterns
    "YEAR_20XX",
    "ITEM_NUMBER",
    "WHITESPACE",
    "NUMERIC_NOISE",
    # Strings
    "safe_float",
    "parse_number",
    "parse_chart_score",
    "cell_text",
    "cell_lower",
    "normalize_whitespace",
    "normalize_percent",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    "ValidationRegistry",
    # Progress
    "ProgressTracker",
    "TerminalProgressTracker",
    "SilentProgressTracker",
    # Formatting
    "format_points",
    "format_percent",
    "format_count",
    "truncate_text",
    "TableFormatter",
    "ReportFormatter",
    # Config
    "Config",
    "AuditConfig",
    "KnownValues",
]
