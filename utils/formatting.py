"""Output formatting utilities for the scorecard tools.

Provides reusable functions for:
- Formatting points, percentages and counts
- Tabular report output
- Sectioned text reports
"""

from typing import Optional, List, Dict, Any


def format_points(value: Optional[float], precision: int = 1) -> str:
    """Format a point value for display.

    Examples:
        format_points(142.5) -> "142.5"
        format_points(150) -> "150.0"
        format_points(None) -> "-"
    """
    if value is None:
        return "-"
    return f"{value:,.{precision}f}"


def format_percent(value: Optional[float], precision: int = 1) -> str:
    """Format a percentage (0.0 to 100.0) for display.

    Examples:
        format_percent(42.5) -> "42.5%"
        format_percent(None) -> "-"
    """
    if value is None:
        return "-"
    return f"{value:.{precision}f}%"


def format_count(value: Optional[int]) -> str:
    """Format a count with thousands separator ("1,234"; None -> "-")."""
    if value is None:
        return "-"
    return f"{value:,d}"


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to maximum length with ellipsis.

    Examples:
        truncate_text("Long text here", 10) -> "Long te..."
        truncate_text("Short", 10) -> "Short"
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


class TableFormatter:
    """Formats rows as aligned, whitespace-separated columns."""

    def __init__(self, columns: List[str], column_widths: Optional[List[int]] = None):
        """Initialize table formatter.

        Args:
            columns: Column headers
            column_widths: Minimum widths (defaults to header lengths)
        """
        self.columns = columns
        self.column_widths = list(column_widths or [len(col) for col in columns])
        self.rows: List[List[str]] = []

    def add_row(self, values: List[Any]) -> None:
        """Add a row to the table.

        Raises:
            ValueError: If value count doesn't match column count
        """
        if len(values) != len(self.columns):
            raise ValueError(f"Expected {len(self.columns)} values, got {len(values)}")

        row = ["-" if val is None else str(val) for val in values]
        for i, text in enumerate(row):
            self.column_widths[i] = max(self.column_widths[i], len(text))
        self.rows.append(row)

    @staticmethod
    def _is_numeric(text: str) -> bool:
        try:
            float(text.replace(",", "").rstrip("%"))
        except ValueError:
            return False
        return True

    def _format_row(self, values: List[str], is_header: bool = False) -> str:
        # Numbers are right-aligned; headers and text left-aligned
        cells = []
        for val, width in zip(values, self.column_widths):
            if not is_header and self._is_numeric(val):
                cells.append(val.rjust(width))
            else:
                cells.append(val.ljust(width))
        return "  ".join(cells).rstrip()

    def to_string(self, show_header: bool = True, show_separator: bool = True) -> str:
        """Format table as a multi-line string."""
        lines = []
        if show_header:
            lines.append(self._format_row(self.columns, is_header=True))
            if show_separator:
                lines.append("  ".join("-" * w for w in self.column_widths))
        lines.extend(self._format_row(row) for row in self.rows)
        return "\n".join(lines)


class ReportFormatter:
    """Formats a titled report made of headed sections.

    Section content may be a string, a list (rendered as bullets), a dict
    (rendered as ``key: value`` lines), a TableFormatter, or a callable
    returning any of those.
    """

    def __init__(self, title: str = "", rule_width: int = 80):
        self.title = title
        self.rule_width = rule_width
        self.sections: List[Dict[str, Any]] = []

    def add_section(self, heading: str, content: Any, level: int = 1) -> None:
        """Add a section to the report.

        Args:
            heading: Section heading
            content: Section content
            level: 1 for a ruled heading, 2 for an indented sub-heading
        """
        self.sections.append({"heading": heading, "content": content, "level": level})

    def _format_content(self, content: Any) -> List[str]:
        if isinstance(content, TableFormatter):
            return ["  " + line for line in content.to_string().splitlines()]
        if isinstance(content, str):
            return [content] if content else []
        if isinstance(content, (list, tuple)):
            return [f"  - {item}" for item in content]
        if isinstance(content, dict):
            return [f"  {key}: {value}" for key, value in content.items()]
        if callable(content):
            return self._format_content(content())
        return [str(content)]

    def to_string(self) -> str:
        lines = []
        if self.title:
            lines.append("=" * self.rule_width)
            lines.append(self.title)
            lines.append("=" * self.rule_width)
            lines.append("")

        for section in self.sections:
            if section["level"] == 1:
                lines.append(section["heading"])
                lines.append("-" * len(section["heading"]))
            else:
                lines.append(f"  {section['heading']}")
            lines.extend(self._format_content(section["content"]))
            lines.append("")

        return "\n".join(lines)
