"""
Tests for scorecards/classifier.py — format classification from sheet names

Verifies the ordered rule chain: each layout's marker sheets, the
precedence between layouts that share marker names, and the Unknown
fallback.
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from scorecards.classifier import (
    CLASSIFICATION_RULES,
    classify,
    classify_sheet_names,
)
from scorecards.models import FormatTag
from scorecards.sheet_index import SheetIndex


class TestClassifySheetNames:
    def test_mini_cover(self):
        names = ["KEV Score Cards Cover Sheet", "Abuse & Griev"]
        assert classify_sheet_names(names) is FormatTag.KEV_MINI

    def test_hybrid_needs_cover_and_marker(self):
        names = ["Cover Sheet", "Abuse & Grievances", "Skin Integrity & Wounds"]
        assert classify_sheet_names(names) is FormatTag.KEV_HYBRID

    def test_cover_sheet_alone_is_unknown(self):
        assert classify_sheet_names(["Cover Sheet"]) is FormatTag.UNKNOWN

    def test_mini_wins_over_hybrid(self):
        names = ["KEV Score Cards Cover Sheet", "Cover Sheet", "Abuse & Grievances"]
        assert classify_sheet_names(names) is FormatTag.KEV_MINI

    def test_snf_overview(self):
        assert classify_sheet_names(["Clinical Systems Overview"]) is \
            FormatTag.SNF_CLINICAL_SYSTEMS_REVIEW

    def test_snf_numbered_tab_without_overview(self):
        names = ["Summary", "1. Change of Condition", "2. Falls"]
        assert classify_sheet_names(names) is FormatTag.SNF_CLINICAL_SYSTEMS_REVIEW

    def test_snf_numbered_tab_with_suffix(self):
        names = ["Overview", "1. Change of Condition (rev)"]
        assert classify_sheet_names(names) is FormatTag.SNF_CLINICAL_SYSTEMS_REVIEW

    def test_hybrid_wins_over_snf(self):
        names = ["Cover Sheet", "Abuse & Grievances", "Clinical Systems Overview"]
        assert classify_sheet_names(names) is FormatTag.KEV_HYBRID

    def test_olympus_any_case(self):
        assert classify_sheet_names(["OLYMPUS Cover"]) is FormatTag.ALF_OLYMPUS

    def test_snf_wins_over_olympus(self):
        names = ["Clinical Systems Overview", "Olympus notes"]
        assert classify_sheet_names(names) is FormatTag.SNF_CLINICAL_SYSTEMS_REVIEW

    def test_unknown(self):
        assert classify_sheet_names(["Sheet1", "Sheet2"]) is FormatTag.UNKNOWN

    def test_empty_workbook(self):
        assert classify_sheet_names([]) is FormatTag.UNKNOWN

    def test_exact_names_only(self):
        # Mini and Hybrid markers are exact, case-sensitive sheet names
        assert classify_sheet_names(["kev score cards cover sheet"]) is FormatTag.UNKNOWN
        assert classify_sheet_names(["cover sheet", "abuse & grievances"]) is FormatTag.UNKNOWN


class TestClassify:
    @pytest.mark.parametrize("fixture_name, expected", [
        ("mini_sheets", FormatTag.KEV_MINI),
        ("hybrid_sheets", FormatTag.KEV_HYBRID),
        ("snf_sheets", FormatTag.SNF_CLINICAL_SYSTEMS_REVIEW),
        ("olympus_sheets", FormatTag.ALF_OLYMPUS),
    ])
    def test_fixture_layouts(self, request, fixture_name, expected):
        sheets = request.getfixturevalue(fixture_name)
        assert classify(SheetIndex.from_mapping(sheets)) is expected

    def test_ignores_cell_content(self):
        index = SheetIndex.from_mapping({"Sheet1": [["KEV Score Cards Cover Sheet"]]})
        assert classify(index) is FormatTag.UNKNOWN

    def test_rule_order(self):
        assert [rule.tag for rule in CLASSIFICATION_RULES] == [
            FormatTag.KEV_MINI,
            FormatTag.KEV_HYBRID,
            FormatTag.SNF_CLINICAL_SYSTEMS_REVIEW,
            FormatTag.ALF_OLYMPUS,
        ]
