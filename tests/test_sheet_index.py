"""
Tests for scorecards/sheet_index.py and scorecards/models.py
"""
import sys
from pathlib import Path

import openpyxl
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from scorecards.models import (
    Category,
    FormatTag,
    Item,
    ReviewPeriod,
    ScorecardRecord,
    empty_record,
)
from scorecards.sheet_index import DocumentUnreadableError, SheetIndex, load_sheet_index


class TestSheetIndex:
    def test_order_and_lookup(self):
        index = SheetIndex.from_mapping({"Cover": [["a", 1]], "Data": []})
        assert index.sheet_names == ("Cover", "Data")
        assert index.has_sheet("Cover")
        assert index.grid("Cover") == (("a", 1),)
        assert index.grid("Data") == ()

    def test_unknown_sheet_gives_empty_grid(self):
        assert SheetIndex.from_mapping({}).grid("Nope") == ()

    def test_names_without_grid(self):
        index = SheetIndex(["Chart1"], {})
        assert index.has_sheet("Chart1")
        assert index.grid("Chart1") == ()

    def test_immutable(self):
        index = SheetIndex.from_mapping({"A": []})
        with pytest.raises(AttributeError):
            index.extra = 1

    def test_find_sheet(self):
        index = SheetIndex.from_mapping({"Cover": [], "Skin & Wounds": [], "Skin 2": []})
        assert index.find_sheet(("skin",)) == "Skin & Wounds"
        assert index.find_sheet(("skin",), exclude={"Skin & Wounds"}) == "Skin 2"
        assert index.find_sheet(("falls",)) is None

    def test_equality(self):
        a = SheetIndex.from_mapping({"A": [[1, 2]]})
        assert a == SheetIndex.from_mapping({"A": [(1, 2)]})
        assert a != SheetIndex.from_mapping({"B": [[1, 2]]})


class TestLoadSheetIndex:
    def test_loads_every_sheet(self, tmp_path, make_workbook):
        path = make_workbook(tmp_path / "book.xlsx", {
            "Cover Sheet": [["Facility Name", "Maple"]],
            "Abuse & Grievances": [["1) a", None, None, None, 10]],
        })
        index = load_sheet_index(path)
        assert index.sheet_names == ("Cover Sheet", "Abuse & Grievances")
        assert index.grid("Cover Sheet")[0][:2] == ("Facility Name", "Maple")

    def test_cached_formula_values(self, tmp_path):
        # openpyxl writes no cached value for formulas, so data_only reads None
        path = tmp_path / "formula.xlsx"
        wb = openpyxl.Workbook()
        wb.active.title = "Sheet"
        wb.active.append([1, 2, "=A1+B1"])
        wb.save(str(path))
        wb.close()
        assert load_sheet_index(path).grid("Sheet")[0] == (1, 2, None)

    def test_not_a_workbook(self, tmp_path):
        path = tmp_path / "bad.xlsx"
        path.write_bytes(b"not a zip")
        with pytest.raises(DocumentUnreadableError) as excinfo:
            load_sheet_index(path)
        assert excinfo.value.path == str(path)
        assert excinfo.value.error_type

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentUnreadableError):
            load_sheet_index(tmp_path / "missing.xlsx")


class TestModels:
    def test_format_tag_values(self):
        assert [tag.value for tag in FormatTag] == [
            "SNFClinicalSystemsReview", "KEVMini", "KEVHybrid", "ALFOlympus", "Unknown",
        ]
        assert str(FormatTag.KEV_MINI) == "KEVMini"

    @pytest.mark.parametrize("period, label", [
        (ReviewPeriod(3, 2025), "2025-03"),
        (ReviewPeriod(None, 2025), "2025-??"),
        (ReviewPeriod(3, None), "????-03"),
        (ReviewPeriod(), "-"),
    ])
    def test_period_label(self, period, label):
        assert period.label() == label

    def test_period_flags(self):
        assert ReviewPeriod(3, 2025).is_complete
        assert not ReviewPeriod(3, None).is_complete
        assert ReviewPeriod().is_empty

    def test_record_is_frozen(self):
        record = empty_record()
        with pytest.raises(AttributeError):
            record.facility_name = "x"

    def test_item_count_and_dict(self):
        record = ScorecardRecord(
            kev_type=FormatTag.KEV_HYBRID,
            categories=(Category("A", items=(Item(1, "a"), Item(2, "b"))), Category("B")),
        )
        assert record.item_count == 2
        data = record.to_dict()
        assert data["kev_type"] == "KEVHybrid"
        assert data["categories"][0]["items"][1]["criteria_text"] == "b"

    def test_items_points_sum(self):
        category = Category("A", items=(Item(1, "a", 5, 2.5), Item(2, "b", 5, 3)))
        assert category.items_points_sum == 5.5
