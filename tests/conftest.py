"""
Pytest fixtures for the scorecard audit tests.

Provides one synthetic workbook layout per known scorecard format, both as
plain ``{sheet name: rows}`` mappings (for in-memory SheetIndex tests) and
as real .xlsx files written with openpyxl (for loader and walker tests),
plus a ``scorecard_tree`` fixture laid out like a company/facility upload
folder.

Numbers in the KEV and SNF fixtures are internally consistent: item points
add up to the category totals stated on the cover, so a clean record
validates without issues.
"""

import datetime as dt
import sys
from pathlib import Path

import openpyxl
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


def _create_xlsx(path: Path, sheets: dict) -> Path:
    """Helper to write ``{sheet name: rows}`` as an .xlsx workbook."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(list(row))
    wb.save(str(path))
    wb.close()
    return path


# ── KEV Mini ──────────────────────────────────────────────────────────────────

_CHART_HEADER = ["Criteria", None, None, None, "Max Score",
                 "Chart 1", "Chart 2", "Chart 3", "Chart 4", "Chart 5"]


def _kev_item(text, max_points, *scores):
    return [text, None, None, None, max_points, *scores]


def build_mini_sheets() -> dict:
    return {
        "KEV Score Cards Cover Sheet": [
            ["KEV Score Cards Cover Sheet"],
            ["Facility Name", "Colville Health"],
            ["Company", "Northern Healthcare"],
            ["Review Period", "March 2025"],
            ["Date of Completion", dt.datetime(2025, 4, 2)],
            ["Audit Completed By", "J. Rivera"],
            [],
            ["Quality Area", "Total Possible Score", "Total Met Score", "Score"],
            ["Abuse & Grievances", 30, 25, 0.8333],
            ["Accidents & Incidents", 20, 15, 0.75],
            ["Infection Prevention & Control", 30, 20, 0.6667],
            ["Skin Integrity & Wounds", 20, 10, 0.5],
            ["Total Quality Review Score", 100, 70, 0.7],
        ],
        "Abuse & Griev": [
            ["Abuse & Grievances"],
            _CHART_HEADER,
            _kev_item("1) Resident rights posted", 10, 4, 4, 4, 4, "n/a"),
            _kev_item("2) Grievance log current", 20, 4, 2, 4, 2),
        ],
        "Accidents & Incidents": [
            ["Accidents & Incidents"],
            _CHART_HEADER,
            _kev_item("1) Fall huddles held", 10, 4, 4),
            _kev_item("2) Incident reports complete", 10, 2, 2),
        ],
        "Inf Prev & Cont": [
            ["Infection Prevention & Control"],
            _CHART_HEADER,
            _kev_item("1) Hand hygiene audits", 20, 4, 4, 4),
            _kev_item("2) Isolation signage", 10, "n/a", "n/a"),
        ],
        "Skin Integrity & Wounds": [
            ["Skin Integrity & Wounds"],
            _CHART_HEADER,
            _kev_item("1) Weekly skin checks", 10, 0, 0),
            _kev_item("2) Wound measurements", 10, 4, 4, 4, 4, 4),
        ],
    }


# ── KEV Hybrid ────────────────────────────────────────────────────────────────

_POINTS_HEADER = ["Criteria", None, None, None, "Max Score", "Points Earned"]


def _hybrid_sheet(title, items, total):
    rows = [[title], _POINTS_HEADER]
    for i, (text, max_points, earned) in enumerate(items, start=1):
        rows.append([f"{i}) {text}", None, None, None, max_points, earned])
    rows.append(["Total", None, None, None, total[0], total[1]])
    return rows


def build_hybrid_sheets() -> dict:
    return {
        "Cover Sheet": [
            ["Quality Review"],
            ["Facility Name", "Riverside Manor"],
            ["Company", "Three Rivers Senior Living"],
            ["Month", "February 2024"],
            ["Overall Score", 0.9],
        ],
        "Abuse & Grievances": _hybrid_sheet(
            "Abuse & Grievances",
            [("Grievance log reviewed", 10, 8), ("Staff trained", 10, 10)], (20, 18)),
        "Accidents & Incidents": _hybrid_sheet(
            "Accidents & Incidents",
            [("Falls investigated", 10, 9)], (10, 9)),
        "Infection Prevention & Control": _hybrid_sheet(
            "Infection Prevention & Control",
            [("Line list current", 10, 10)], (10, 10)),
        "Skin Integrity & Wounds": _hybrid_sheet(
            "Skin Integrity & Wounds",
            [("Turning schedule followed", 10, 8)], (10, 8)),
    }


# ── SNF Clinical Systems Review ───────────────────────────────────────────────

SNF_HEADER = ["Category", "Max Points", "# Met", "Sample Size", "Points", "Notes"]


def _system_sheet(title, rows, total):
    return [[title], [], SNF_HEADER, *rows, ["Total", total[0], None, None, total[1]]]


def build_snf_sheets() -> dict:
    return {
        "Clinical Systems Overview": [
            ["Clinical Systems Review"],
            ["Facility Name", "Bayview Care Center"],
            ["Month", "Sept 2025"],
            [],
            ["System", "Possible", "Met", "%"],
            ["1. Change of Condition", 12, 10, 0.8333],
            ["2. Accidents Falls Incidents", 20, 15, 0.75],
            ["3. Skin", 12, 8, 0.6667],
            ["4. Med Management & Weight Loss", 10, 10, 1.0],
            ["Total Score", 54, 43, 0.7963],
        ],
        "1. Change of Condition": _system_sheet("Change of Condition", [
            ["Documentation"],
            ["Physician notified timely", 4, 3, 3, 4, ""],
            ["Care plan updated", 6, 2, 3, None],
            ["Family notified", 2, "Y", "Y=1, N=0", None],
        ], (12, 10)),
        "2. Accidents Falls Incidents": _system_sheet("Accidents, Falls, Incidents", [
            ["Falls reviewed", 10, 3, 3, 10],
            ["Incident reports filed", 10, 2, 4, 5],
        ], (20, 15)),
        "3. Skin": _system_sheet("Skin", [
            ["Skin checks weekly", 8, 2, 2, 8],
            ["Wound photos", 4, "N", "Y=1, N=0", None],
        ], (12, 8)),
        "4. Med Management & Weight Loss": _system_sheet("Med Management & Weight Loss", [
            ["MAR reviewed", 10, 3, 3, 10],
        ], (10, 10)),
    }


# ── ALF Olympus ───────────────────────────────────────────────────────────────

OLYMPUS_FILENAME = "Olympus Pines June 2025.xlsx"


def build_olympus_sheets() -> dict:
    return {
        "Olympus Score Card Cover": [
            ["Facility", "Olympus Pines"],
            ["Organization", "Olympus Senior Living"],
        ],
        "Grievances": [
            ["Grievances"], [], SNF_HEADER,
            ["Grievances resolved in 5 days", 5, 3, 3, 5],
            ["Total", 5, None, None, 5],
        ],
        "Falls & Incidents": [
            ["Falls & Incidents"], [], SNF_HEADER,
            ["Post-fall assessment", 6, 2, 3, None],
        ],
        "Infection Control": [
            ["Infection Control"], [], SNF_HEADER,
            ["Vaccination records", 4, "Yes", "Y=1", None],
            ["Total", 4, None, None, 4],
        ],
        "Skin & Wounds": [
            ["Skin & Wounds"], [], SNF_HEADER,
            ["Wound care plan", 5, 1, 1, 5],
            ["Total", 5, None, None, 5],
        ],
    }


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture()
def mini_sheets():
    return build_mini_sheets()


@pytest.fixture()
def hybrid_sheets():
    return build_hybrid_sheets()


@pytest.fixture()
def snf_sheets():
    return build_snf_sheets()


@pytest.fixture()
def olympus_sheets():
    return build_olympus_sheets()


@pytest.fixture()
def make_workbook():
    """Factory fixture: ``make_workbook(path, sheets)`` writes an .xlsx file."""
    return _create_xlsx


@pytest.fixture()
def scorecard_tree(tmp_path):
    """A "Score Cards" upload tree with one workbook per format.

    Layout::

        Score Cards/
            Northern/Colville/Scorecards/Colville March 2025 KEV Score Cards (Mini).xlsx
            Northern/Colville/Scorecards/~$Colville March 2025 KEV Score Cards (Mini).xlsx
            Northern/Lakeside/Lakeside April 2025 Mini.XLSX
            Three Rivers/Riverside/Riverside Hybrid.xlsx
            Envision/Bayview/Bayview SNF.xlsx
            Olympus/Pines/Olympus Pines June 2025.xlsx
            Misc/Broken/broken.xlsx          (not a zip)
            Misc/Other/notes.txt             (ignored)
    """
    root = tmp_path / "Score Cards"
    colville = root / "Northern" / "Colville" / "Scorecards"
    _create_xlsx(colville / "Colville March 2025 KEV Score Cards (Mini).xlsx",
                 build_mini_sheets())
    # Excel lock file next to the real workbook
    (colville / "~$Colville March 2025 KEV Score Cards (Mini).xlsx").write_bytes(b"lock")
    _create_xlsx(root / "Northern" / "Lakeside" / "Lakeside April 2025 Mini.XLSX",
                 build_mini_sheets())
    _create_xlsx(root / "Three Rivers" / "Riverside" / "Riverside Hybrid.xlsx",
                 build_hybrid_sheets())
    _create_xlsx(root / "Envision" / "Bayview" / "Bayview SNF.xlsx", build_snf_sheets())
    _create_xlsx(root / "Olympus" / "Pines" / OLYMPUS_FILENAME, build_olympus_sheets())

    broken = root / "Misc" / "Broken"
    broken.mkdir(parents=True)
    (broken / "broken.xlsx").write_bytes(b"this is not a workbook")
    other = root / "Misc" / "Other"
    other.mkdir(parents=True)
    (other / "notes.txt").write_text("not a scorecard")
    return root
