"""Structural extraction: workbook -> ScorecardRecord.

One extraction function per FormatTag, registered in EXTRACTORS.  Every
variant reads its layout from ``scorecards.catalog`` and shares the cover
and item-table readers below, so a new layout needs a catalog entry and,
at most, one new function.

Totals are taken from the workbook's own cells (cover score tables and
category "Total" rows).  Nothing here re-adds item points; reconciling
items against declared totals is the validator's job.  A total that the
workbook does not state is recorded as 0.0.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from scorecards.catalog import (
    CATEGORY_KEYWORDS,
    CHART_SCORE_SCALE,
    COVER_LABELS,
    MAX_CHART_COLUMNS,
    SCORE_TABLE_TOTAL_LABELS,
    find_chart_columns,
    find_matching_columns,
    get_format_spec,
)
from scorecards.models import (
    Category,
    CoverDetails,
    FormatTag,
    Item,
    ScorecardRecord,
    empty_record,
)
from scorecards.periods import extract_period
from scorecards.sheet_index import SheetIndex
from utils.patterns import ITEM_NUMBER
from utils.strings import (
    cell_lower,
    cell_text,
    normalize_percent,
    normalize_whitespace,
    parse_chart_score,
    parse_number,
)

logger = logging.getLogger(__name__)


# ── Cover sheets ──────────────────────────────────────────────────────────────


@dataclass
class ScoreRow:
    """One ``label | possible | met | %`` row of a cover score table."""

    possible: float | None = None
    met: float | None = None
    percent: float | None = None


@dataclass
class CoverFields:
    facility_name: str | None = None
    company_name: str | None = None
    review_period_text: str | None = None
    date_of_completion: str | None = None
    audit_completed_by: str | None = None
    overall_score: float | None = None
    area_scores: dict[str, ScoreRow] = field(default_factory=dict)
    total: ScoreRow | None = None

    def details(self) -> CoverDetails:
        return CoverDetails(
            review_period_text=self.review_period_text,
            date_of_completion=self.date_of_completion,
            audit_completed_by=self.audit_completed_by,
            overall_score=self.overall_score,
        )


def _is_cover_label(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return normalize_whitespace(value.lower()).rstrip(":").strip() in COVER_LABELS


def _value_after(row, col: int) -> Any:
    """First non-empty cell to the right of *col* (merged label cells leave gaps).

    None when that cell is the next label, i.e. the value was left blank.
    """
    for value in row[col + 1:]:
        if value is not None and cell_text(value).strip():
            return None if _is_cover_label(value) else value
    return None


def _display_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (dt.datetime, dt.date)):
        return value.strftime("%m/%d/%Y")
    text = cell_text(value).strip()
    return text or None


def _score_row(row, label_col: int) -> ScoreRow | None:
    # possible / met / % sit in the three cells after the label; blanks stay None
    possible, met, percent = (parse_number(_cell(row, label_col + k)) for k in (1, 2, 3))
    if possible is None or (met is None and percent is None):
        return None
    return ScoreRow(possible=possible, met=met, percent=normalize_percent(percent))


def read_cover(grid, scan_rows: int, areas: dict[str, tuple[str, ...]]) -> CoverFields:
    """Read identity labels and the score table from a cover sheet.

    Args:
        grid: Cover sheet rows.
        scan_rows: Identity labels are only looked for in this many rows.
        areas: Category name -> keywords that identify its score-table row.

    Returns:
        CoverFields; anything not found stays None.
    """
    cover = CoverFields()

    for row_idx, row in enumerate(grid):
        for col, cell in enumerate(row):
            if not isinstance(cell, str) or not cell.strip():
                continue
            label = normalize_whitespace(cell.lower())

            # Score table rows: label followed by possible / met / %
            if label.startswith(SCORE_TABLE_TOTAL_LABELS):
                score = _score_row(row, col)
                if score is not None and cover.total is None:
                    cover.total = score
                break
            area = next((name for name, keys in areas.items()
                         if name not in cover.area_scores
                         and any(k in label for k in keys)), None)
            if area is not None:
                score = _score_row(row, col)
                if score is not None:
                    cover.area_scores[area] = score
                    break

            if row_idx >= scan_rows:
                continue
            if "overall score" in label and cover.overall_score is None:
                cover.overall_score = normalize_percent(parse_number(_value_after(row, col)))
                continue

            value = _display_value(_value_after(row, col))
            if value is None:
                continue
            if "facility" in label and cover.facility_name is None:
                cover.facility_name = value
            elif ("company" in label or "organization" in label) and cover.company_name is None:
                cover.company_name = value
            elif "review period" in label and cover.review_period_text is None:
                cover.review_period_text = value
            elif "date" in label and "complet" in label and cover.date_of_completion is None:
                cover.date_of_completion = value
            elif "completed by" in label and cover.audit_completed_by is None:
                cover.audit_completed_by = value

    return cover


# ── Item tables ───────────────────────────────────────────────────────────────


def _cell(row, col: int | None) -> Any:
    if col is None or col >= len(row):
        return None
    return row[col]


TOTAL_ROW_LABELS = frozenset({
    "total", "totals", "total score", "total points", "subtotal", "sub total",
    "category total",
})


def _is_total_label(text: str) -> bool:
    return normalize_whitespace(text.lower()).rstrip(":") in TOTAL_ROW_LABELS


def _as_count(value: Any) -> int:
    number = parse_number(value)
    return int(round(number)) if number is not None else 0


def _locate_columns(grid, spec: dict) -> tuple[int, dict, list]:
    """Find the item header row; fall back to the layout's default columns.

    Returns:
        (header row index or -1, field -> column index, chart columns)
    """
    for idx, row in enumerate(grid[:spec["header_scan_rows"]]):
        columns = find_matching_columns(row)
        if "max_points" in columns:
            columns.setdefault("criteria", 0)
            return idx, columns, find_chart_columns(row)

    columns = dict(spec["default_columns"])
    return spec.get("default_header_row", -1), columns, []


def _chart_score_columns(columns: dict, chart_cols: list) -> list:
    if chart_cols:
        return chart_cols
    # No chart headers: the scores sit in the columns right after max points
    taken = set(columns.values())
    start = columns["max_points"] + 1
    return [c for c in range(start, start + MAX_CHART_COLUMNS) if c not in taken]


def _numbered_item(row, match, columns: dict, chart_cols: list) -> Item:
    max_points = parse_number(_cell(row, columns["max_points"])) or 0.0
    points = parse_number(_cell(row, columns.get("points_earned")))
    charts_met = _as_count(_cell(row, columns.get("charts_met")))
    sample_size = _as_count(_cell(row, columns.get("sample_size")))

    if points is None:
        scores = [s for s in (parse_chart_score(_cell(row, c)) for c in chart_cols)
                  if s is not None]
        if scores:
            average = sum(scores) / len(scores)
            points = round(average / CHART_SCORE_SCALE * max_points, 2)
            charts_met = int(round(sum(scores)))
            sample_size = len(scores) * int(CHART_SCORE_SCALE)

    return Item(
        item_number=int(match.group(1)),
        criteria_text=match.group(2),
        max_points=max_points,
        points_earned=points or 0.0,
        charts_met=charts_met,
        sample_size=sample_size,
    )


YES_NO_LEGENDS = ("y=1", "n=0")
MET_ANSWERS = frozenset({"y", "yes"})


def _is_yes_no_row(sample_cell: Any, max_points: float) -> bool:
    # The sample column holds a "Y=1 / N=0" legend, or a lone 1 on a 5+ point item
    legend = cell_lower(sample_cell)
    if any(marker in legend for marker in YES_NO_LEGENDS):
        return True
    return parse_number(sample_cell) == 1 and max_points >= 5


def _columnar_item(row, number: int, columns: dict, max_points: float) -> Item:
    sample_cell = _cell(row, columns.get("sample_size"))
    met_cell = _cell(row, columns.get("charts_met"))
    points = parse_number(_cell(row, columns.get("points_earned")))

    if _is_yes_no_row(sample_cell, max_points):
        answered = parse_number(met_cell) == 1 or cell_lower(met_cell).strip() in MET_ANSWERS
        met = 1 if answered else 0
        sample = 1
    else:
        met = _as_count(met_cell)
        sample = _as_count(sample_cell) or 3
    if points is None:
        points = round(max_points / sample * met, 2)

    return Item(
        item_number=number,
        criteria_text=cell_text(_cell(row, columns["criteria"])),
        max_points=max_points,
        points_earned=points,
        charts_met=met,
        sample_size=sample,
    )


def parse_item_sheet(grid, spec: dict) -> tuple[list[Item], ScoreRow | None]:
    """Parse the item rows of one category sheet.

    Args:
        grid: Category sheet rows.
        spec: Catalog entry of the workbook's format.

    Returns:
        (items in sheet order, declared total from a "Total" row or None)
    """
    header_idx, columns, chart_cols = _locate_columns(grid, spec)
    numbered = spec["item_layout"] == "numbered"
    if numbered:
        chart_cols = _chart_score_columns(columns, chart_cols)

    items: list[Item] = []
    declared: ScoreRow | None = None

    for row in grid[header_idx + 1:]:
        text = cell_text(_cell(row, columns["criteria"]))
        if not text.strip():
            continue

        if _is_total_label(text):
            if declared is None:
                declared = ScoreRow(
                    possible=parse_number(_cell(row, columns["max_points"])),
                    met=parse_number(_cell(row, columns.get("points_earned"))),
                )
            continue

        if numbered:
            match = ITEM_NUMBER.match(text)
            if match:
                items.append(_numbered_item(row, match, columns, chart_cols))
            continue

        max_points = parse_number(_cell(row, columns["max_points"]))
        if max_points is None:
            continue  # section heading
        items.append(_columnar_item(row, len(items) + 1, columns, max_points))

    return items, declared


def build_category(name: str, items: list[Item], cover_score: ScoreRow | None,
                   declared: ScoreRow | None) -> Category:
    """Attach declared totals to a category; cover tables win over sheet totals."""
    earned = possible = None
    for source in (cover_score, declared):
        if source is None:
            continue
        if earned is None:
            earned = source.met
        if possible is None:
            possible = source.possible
    return Category(
        category_name=name,
        total_points_earned=earned if earned is not None else 0.0,
        total_max_points=possible if possible is not None else 0.0,
        items=tuple(items),
    )


def _build_record(tag: FormatTag, sheet_index: SheetIndex, filename: str,
                  cover: CoverFields, categories: list[Category]) -> ScorecardRecord:
    total = cover.total or ScoreRow()
    percent = total.percent if total.percent is not None else cover.overall_score
    return ScorecardRecord(
        kev_type=tag,
        facility_name=cover.facility_name,
        company_name=cover.company_name,
        review_period=extract_period(sheet_index, tag, filename),
        total_score=total.met if total.met is not None else 0.0,
        total_max_points=total.possible if total.possible is not None else 0.0,
        score_percentage=percent if percent is not None else 0.0,
        categories=tuple(categories),
        cover=cover.details(),
    )


# ── Format variants ───────────────────────────────────────────────────────────


def _extract_kev(sheet_index: SheetIndex, tag: FormatTag, filename: str) -> ScorecardRecord:
    spec = get_format_spec(tag)
    cover_sheet = spec["cover_sheet"]
    names = [name for name, _sheet in spec["categories"]]
    cover = read_cover(sheet_index.grid(cover_sheet), spec["cover_scan_rows"],
                       {name: CATEGORY_KEYWORDS[name] for name in names})

    used = {cover_sheet}
    categories = []
    for name, sheet_name in spec["categories"]:
        if not sheet_index.has_sheet(sheet_name):
            sheet_name = sheet_index.find_sheet(CATEGORY_KEYWORDS[name], exclude=used)
        if sheet_name is None:
            logger.debug("%s: no sheet for category %r", filename, name)
            continue
        used.add(sheet_name)
        items, declared = parse_item_sheet(sheet_index.grid(sheet_name), spec)
        categories.append(build_category(name, items, cover.area_scores.get(name), declared))

    return _build_record(tag, sheet_index, filename, cover, categories)


def _extract_snf(sheet_index: SheetIndex, tag: FormatTag, filename: str) -> ScorecardRecord:
    spec = get_format_spec(tag)
    overview = spec["cover_sheet"]
    if not sheet_index.has_sheet(overview):
        overview = sheet_index.find_sheet(("overview", "summary", "cover"))

    # Score-table rows are matched on the words of each system name only
    areas = {
        name: tuple(k for k in keywords if not any(ch.isdigit() for ch in k))
        for _number, name, keywords in spec["systems"]
    }
    cover = read_cover(sheet_index.grid(overview) if overview else (),
                       spec["cover_scan_rows"], areas)

    used = {overview} if overview else set()
    categories = []
    for number, name, keywords in spec["systems"]:
        sheet_name = sheet_index.find_sheet(keywords, exclude=used)
        if sheet_name is None:
            logger.debug("%s: system %d (%s) not found", filename, number, name)
            continue
        used.add(sheet_name)
        items, declared = parse_item_sheet(sheet_index.grid(sheet_name), spec)
        categories.append(build_category(name, items, cover.area_scores.get(name), declared))

    return _build_record(tag, sheet_index, filename, cover, categories)


def _extract_olympus(sheet_index: SheetIndex, tag: FormatTag, filename: str) -> ScorecardRecord:
    spec = get_format_spec(tag)
    cover_sheet = None
    for keyword in spec["cover_keywords"]:
        cover_sheet = sheet_index.find_sheet((keyword,))
        if cover_sheet:
            break

    names = [name for name, _sheet in spec["categories"]]
    cover = read_cover(sheet_index.grid(cover_sheet) if cover_sheet else (),
                       spec["cover_scan_rows"],
                       {name: CATEGORY_KEYWORDS[name] for name in names})

    used = {cover_sheet} if cover_sheet else set()
    categories = []
    for name in names:
        sheet_name = sheet_index.find_sheet(CATEGORY_KEYWORDS[name], exclude=used)
        if sheet_name is None:
            continue
        used.add(sheet_name)
        items, declared = parse_item_sheet(sheet_index.grid(sheet_name), spec)
        categories.append(build_category(name, items, cover.area_scores.get(name), declared))

    return _build_record(tag, sheet_index, filename, cover, categories)


def _extract_unknown(sheet_index: SheetIndex, tag: FormatTag, filename: str) -> ScorecardRecord:
    return empty_record(FormatTag.UNKNOWN)


EXTRACTORS: dict[FormatTag, Callable[[SheetIndex, FormatTag, str], ScorecardRecord]] = {
    FormatTag.KEV_MINI: _extract_kev,
    FormatTag.KEV_HYBRID: _extract_kev,
    FormatTag.SNF_CLINICAL_SYSTEMS_REVIEW: _extract_snf,
    FormatTag.ALF_OLYMPUS: _extract_olympus,
    FormatTag.UNKNOWN: _extract_unknown,
}


def extract(sheet_index: SheetIndex, format_tag: FormatTag,
            filename: str = "") -> ScorecardRecord:
    """Build the normalized record of a classified workbook.

    Args:
        sheet_index: Loaded workbook.
        format_tag: Result of ``classify(sheet_index)``.
        filename: Base name of the source file (review-period fallback).

    Returns:
        ScorecardRecord; missing regions give fewer categories or empty items.
    """
    extractor = EXTRACTORS.get(format_tag, _extract_unknown)
    record = extractor(sheet_index, format_tag, filename)
    logger.debug("%s: %s, %d categories, %d items", filename or "<workbook>",
                 format_tag.value, len(record.categories), record.item_count)
    return record
