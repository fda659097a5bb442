"""Batch report rendering and exports.

- render_report(): the operator-facing text summary
- export_json(): the full report (every document, record and issue)
- export_csv(): one summary row per document
- export_parquet(): one row per extracted item, for loading elsewhere
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from scorecards.models import FormatTag
from scorecards.walker import BatchReport
from utils.formatting import (
    ReportFormatter,
    TableFormatter,
    format_count,
    format_percent,
    format_points,
    truncate_text,
)

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "relative_path", "company", "facility", "format", "facility_name",
    "company_name", "month", "year", "total_score", "total_max_points",
    "score_percentage", "categories", "items", "issues", "error",
]

ITEM_SCHEMA = pa.schema([
    pa.field("source_file", pa.string()),
    pa.field("format", pa.string()),
    pa.field("company", pa.string()),
    pa.field("facility", pa.string()),
    pa.field("facility_name", pa.string()),
    pa.field("month", pa.int32()),
    pa.field("year", pa.int32()),
    pa.field("category", pa.string()),
    pa.field("category_points_earned", pa.float64()),
    pa.field("category_max_points", pa.float64()),
    pa.field("item_number", pa.int32()),
    pa.field("criteria_text", pa.string()),
    pa.field("max_points", pa.float64()),
    pa.field("points_earned", pa.float64()),
    pa.field("charts_met", pa.int32()),
    pa.field("sample_size", pa.int32()),
])


def _format_table(report: BatchReport) -> TableFormatter:
    total = report.documents_attempted
    table = TableFormatter(["Format", "Documents", "Share"])
    for tag in FormatTag:
        count = report.format_counts.get(tag, 0)
        if count:
            table.add_row([tag.value, format_count(count),
                           format_percent(count / total * 100 if total else 0.0)])
    return table


def _cross_table(report: BatchReport) -> TableFormatter:
    tags = [tag for tag in FormatTag if report.format_counts.get(tag)]
    table = TableFormatter(["Company"] + [tag.value for tag in tags] + ["Total"])
    for company in sorted(report.company_format_counts):
        counts = report.company_format_counts[company]
        table.add_row([company] + [counts.get(tag, 0) for tag in tags]
                      + [sum(counts.values())])
    return table


def render_report(report: BatchReport, verbose: bool = False) -> str:
    """Human-readable batch summary.

    Args:
        report: Result of ``walker.run``.
        verbose: Also list every document with its score and issues.
    """
    rf = ReportFormatter("SCORECARD FORMAT AUDIT REPORT")
    rf.add_section("Summary", {
        "Directory": report.root,
        "Documents": format_count(report.documents_attempted),
        "Extracted": format_count(report.success_count),
        "Failed": format_count(len(report.failures)),
        "Unreadable folders": format_count(len(report.scan_errors)),
    })
    rf.add_section("Documents by format", _format_table(report))
    rf.add_section("Company x format", _cross_table(report))

    rf.add_section("Primary format by company", [
        f"{company}: {tag.value} ({count} documents, {format_percent(pct)})"
        for company, (tag, count, pct) in report.primary_format_by_company().items()
    ])

    for company in sorted(report.facilities_by_company):
        names = sorted(report.facilities_by_company[company])
        rf.add_section(f"{company} ({len(names)} facilities)", names, level=2)

    missing = report.missing_periods_by_format()
    if missing:
        lines = []
        for tag in FormatTag:
            for outcome in missing.get(tag, []):
                period = outcome.record.review_period
                gaps = [name for name, value in (("month", period.month), ("year", period.year))
                        if value is None]
                lines.append(f"[{tag.value}] {outcome.relative_path} (missing {', '.join(gaps)})")
        rf.add_section("Documents missing review period", lines)

    by_check = report.validation.counts_by_check()
    if by_check:
        rf.add_section("Validation issues by check", {k: format_count(v) for k, v in by_check.items()})
    rf.add_section("Validation", report.validation.summary_text())

    if verbose:
        for outcome in report.outcomes:
            record = outcome.record
            lines = [f"{outcome.format_tag.value}, {record.review_period.label()}, "
                     f"score {format_points(record.total_score)} / "
                     f"{format_points(record.total_max_points)} "
                     f"({format_percent(record.score_percentage)})"]
            lines.extend(issue.message for issue in outcome.issues)
            rf.add_section(outcome.relative_path, lines, level=2)

    if report.failures or report.scan_errors:
        rf.add_section("Errors", [
            f"{o.relative_path}: {o.error.error_type}: {truncate_text(o.error.error_detail, 120)}"
            for o in report.failures
        ] + [f"{e.file_path}: {e.error_type}: {e.error_detail}" for e in report.scan_errors])

    return rf.to_string()


def export_json(report: BatchReport, output_path: Path) -> Path:
    """Write the full report as JSON."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
    logger.info("Wrote JSON report to %s", output_path)
    return output_path


def export_csv(report: BatchReport, output_path: Path) -> Path:
    """Write one summary row per document."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for outcome in report.outcomes:
            record = outcome.record
            writer.writerow({
                "relative_path": outcome.relative_path,
                "company": outcome.company,
                "facility": outcome.facility,
                "format": outcome.format_tag.value,
                "facility_name": record.facility_name or "",
                "company_name": record.company_name or "",
                "month": record.review_period.month or "",
                "year": record.review_period.year or "",
                "total_score": record.total_score,
                "total_max_points": record.total_max_points,
                "score_percentage": record.score_percentage,
                "categories": len(record.categories),
                "items": record.item_count,
                "issues": "; ".join(issue.message for issue in outcome.issues),
                "error": outcome.error.error_detail if outcome.error else "",
            })
    logger.info("Wrote CSV summary to %s", output_path)
    return output_path


def export_parquet(report: BatchReport, output_path: Path) -> int:
    """Write every extracted item as one Parquet row.

    Returns:
        Number of rows written.
    """
    columns: dict[str, list] = {f.name: [] for f in ITEM_SCHEMA}
    for outcome in report.outcomes:
        record = outcome.record
        for category in record.categories:
            for item in category.items:
                columns["source_file"].append(outcome.relative_path)
                columns["format"].append(outcome.format_tag.value)
                columns["company"].append(outcome.company)
                columns["facility"].append(outcome.facility)
                columns["facility_name"].append(record.facility_name)
                columns["month"].append(record.review_period.month)
                columns["year"].append(record.review_period.year)
                columns["category"].append(category.category_name)
                columns["category_points_earned"].append(category.total_points_earned)
                columns["category_max_points"].append(category.total_max_points)
                columns["item_number"].append(item.item_number)
                columns["criteria_text"].append(item.criteria_text)
                columns["max_points"].append(item.max_points)
                columns["points_earned"].append(item.points_earned)
                columns["charts_met"].append(item.charts_met)
                columns["sample_size"].append(item.sample_size)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    arrays = [pa.array(columns[f.name], type=f.type) for f in ITEM_SCHEMA]
    table = pa.table(arrays, schema=ITEM_SCHEMA)
    pq.write_table(table, str(output_path), compression="snappy")
    logger.info("Wrote %d item rows to %s", table.num_rows, output_path)
    return table.num_rows
