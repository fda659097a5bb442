"""
Scorecard Format Catalog

Single source of truth for how each known scorecard layout is structured:
which sheet holds the cover metadata, which sheets hold the scored
categories, how item rows are recognised, and which header text maps to
which item field.  The extractors are driven entirely by this table.

Layout notes (verified against production workbooks):

  KEV Mini / KEV Hybrid
    - A cover sheet with "Facility Name", "Review Period" and a quality
      area table:  Area | Total Possible Score | Total Met Score | Score %
      ending in a "Total Quality Review Score" row.
    - One sheet per category.  Item rows start with "N)" in column A,
      a "Max Score" column, then up to five chart score columns (0-4).

  SNF Clinical Systems Review
    - "Clinical Systems Overview" cover with facility, month and a system
      table in the same Possible | Met | % shape.
    - One sheet per clinical system ("1. Change of Condition", ...).
      Header row: Category | Max Points | # Met | Sample Size | Points | Notes.
      Rows without max points are section headings.

  ALF Olympus
    - A cover sheet (name contains "cover", else the "Olympus" sheet).
    - Keyword-named category sheets, same row layout as SNF.
"""

from scorecards.models import FormatTag

# Item-table column specs.  header_patterns use substring matching; the
# longest matching pattern wins (see find_matching_columns).
ITEM_COLUMN_SPEC = [
    {"field": "criteria", "header_patterns": ["category", "criteria", "question", "standard"]},
    {"field": "max_points", "header_patterns": ["max points", "max score", "max pts",
                                                "possible", "max"]},
    {"field": "charts_met", "header_patterns": ["# met", "charts met", "met"]},
    {"field": "sample_size", "header_patterns": ["sample size", "sample"]},
    {"field": "points_earned", "header_patterns": ["points earned", "earned", "points", "pts"]},
    {"field": "notes", "header_patterns": ["notes", "comments"]},
]

# Chart-score columns on KEV category sheets ("Chart 1" .. "Chart 5")
CHART_HEADER_PATTERN = "chart"
MAX_CHART_COLUMNS = 5
CHART_SCORE_SCALE = 4.0

# Score-table column order on cover/overview sheets: label | possible | met | %
SCORE_TABLE_TOTAL_LABELS = ("total quality review", "total score", "total")

# Identity labels on cover sheets.  A label followed directly by another
# label has a blank value.
COVER_LABELS = frozenset({
    "facility", "facility name", "company", "company name", "organization",
    "review period", "month", "date", "date of completion", "date completed",
    "completion date", "completed by", "audit completed by", "overall score",
})

# Keywords locating a category on a cover score table, or its sheet when
# the exact sheet name is missing
CATEGORY_KEYWORDS = {
    "Abuse & Grievances": ("abuse", "griev"),
    "Accidents & Incidents": ("accident", "incident", "fall"),
    "Infection Prevention & Control": ("infection", "inf prev"),
    "Skin Integrity & Wounds": ("skin", "wound"),
}

SNF_SYSTEMS = [
    # (system number, canonical name, sheet-name keywords)
    (1, "Change of Condition", ("change of condition", "1.", "system 1")),
    (2, "Accidents, Falls, Incidents", ("accident", "falls", "incident", "2.", "system 2")),
    (3, "Skin", ("skin", "3.", "system 3")),
    (4, "Med Management & Weight Loss", ("med management", "medication", "weight", "4.", "system 4")),
    (5, "Infection Control", ("infection", "5.", "system 5")),
    (6, "Transfer/Discharge", ("transfer", "discharge", "6.", "system 6")),
    (7, "Abuse/Self Report/Grievance Review", ("abuse", "grievance", "self report", "7.", "system 7")),
]

FORMAT_CATALOG = {
    FormatTag.KEV_MINI: {
        "name": "KEV Score Cards (Mini)",
        "cover_sheet": "KEV Score Cards Cover Sheet",
        "cover_scan_rows": 25,
        "item_layout": "numbered",
        "header_scan_rows": 15,
        "default_columns": {"criteria": 0, "max_points": 4},
        "categories": [
            # (category name, sheet name)
            ("Abuse & Grievances", "Abuse & Griev"),
            ("Accidents & Incidents", "Accidents & Incidents"),
            ("Infection Prevention & Control", "Inf Prev & Cont"),
            ("Skin Integrity & Wounds", "Skin Integrity & Wounds"),
        ],
    },
    FormatTag.KEV_HYBRID: {
        "name": "KEV Score Cards (Hybrid)",
        "cover_sheet": "Cover Sheet",
        "cover_scan_rows": 20,
        "item_layout": "numbered",
        "header_scan_rows": 15,
        "default_columns": {"criteria": 0, "max_points": 4},
        "categories": [
            ("Abuse & Grievances", "Abuse & Grievances"),
            ("Accidents & Incidents", "Accidents & Incidents"),
            ("Infection Prevention & Control", "Infection Prevention & Control"),
            ("Skin Integrity & Wounds", "Skin Integrity & Wounds"),
        ],
    },
    FormatTag.SNF_CLINICAL_SYSTEMS_REVIEW: {
        "name": "SNF Clinical Systems Review",
        "cover_sheet": "Clinical Systems Overview",
        "cover_scan_rows": 20,
        "item_layout": "columnar",
        "header_scan_rows": 10,
        "default_columns": {"criteria": 0, "max_points": 1, "charts_met": 2,
                            "sample_size": 3, "points_earned": 4, "notes": 5},
        "default_header_row": 2,
        "systems": SNF_SYSTEMS,
    },
    FormatTag.ALF_OLYMPUS: {
        "name": "ALF Olympus Score Card",
        "cover_sheet": None,
        "cover_keywords": ("cover", "olympus"),
        "cover_scan_rows": 20,
        "item_layout": "columnar",
        "header_scan_rows": 10,
        "default_columns": {"criteria": 0, "max_points": 1, "charts_met": 2,
                            "sample_size": 3, "points_earned": 4, "notes": 5},
        "default_header_row": 2,
        "categories": [
            # (category name, sheet name); sheets are found by CATEGORY_KEYWORDS
            ("Abuse & Grievances", None),
            ("Accidents & Incidents", None),
            ("Infection Prevention & Control", None),
            ("Skin Integrity & Wounds", None),
        ],
    },
}

# Period cover sheets.  Olympus workbooks carry no period cell the
# period scan can rely on, so they go straight to the filename fallback.
PERIOD_COVER_SHEETS = {
    FormatTag.KEV_MINI: "KEV Score Cards Cover Sheet",
    FormatTag.KEV_HYBRID: "Cover Sheet",
    FormatTag.SNF_CLINICAL_SYSTEMS_REVIEW: "Clinical Systems Overview",
}


# --------------------------------------------------------------------------
# Helper Functions
# --------------------------------------------------------------------------

def get_format_spec(tag: FormatTag):
    """Return the catalog entry for *tag*, or None for Unknown."""
    return FORMAT_CATALOG.get(tag)


def find_matching_columns(header_row) -> dict:
    """
    Match an item-table header row against ITEM_COLUMN_SPEC.

    Uses longest-match-first: for each header cell all matching patterns
    are collected and the longest pattern wins, so "Max Points" maps to
    max_points rather than being consumed by "points" -> points_earned.

    Args:
        header_row: Sequence of header cell values.

    Returns:
        Dict mapping field name -> column index for matched columns.
    """
    header_lower = [str(h).lower().replace("\n", " ").strip() if h is not None else ""
                    for h in header_row]

    candidates = []
    for col_idx, header_text in enumerate(header_lower):
        if not header_text or CHART_HEADER_PATTERN in header_text:
            continue
        for col_spec in ITEM_COLUMN_SPEC:
            for pattern in col_spec["header_patterns"]:
                if pattern in header_text:
                    candidates.append((col_idx, col_spec["field"], len(pattern)))

    # Longest pattern first; earlier column wins a tie
    candidates.sort(key=lambda x: (-x[2], x[0]))

    matched: dict = {}
    used_cols = set()
    for col_idx, field, _plen in candidates:
        if col_idx in used_cols or field in matched:
            continue
        matched[field] = col_idx
        used_cols.add(col_idx)
    return matched


def find_chart_columns(header_row) -> list:
    """Column indexes whose header mentions a chart, left to right."""
    return [
        i for i, h in enumerate(header_row)
        if h is not None and CHART_HEADER_PATTERN in str(h).lower()
    ][:MAX_CHART_COLUMNS]


def describe_catalog() -> str:
    """Human-readable summary of the known layouts."""
    lines = ["=" * 80, "SCORECARD FORMAT CATALOG", "=" * 80, ""]
    for tag, spec in FORMAT_CATALOG.items():
        categories = spec.get("categories") or [(name, None) for _n, name, _k in spec.get("systems", [])]
        lines.append(f"{tag.value:26s} | {spec['name']:32s} | {len(categories)} categories")
        cover = spec.get("cover_sheet") or "/".join(spec.get("cover_keywords", ()))
        lines.append(f"{'':26s}   cover: {cover}")
    return "\n".join(lines)
