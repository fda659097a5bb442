"""Normalized scorecard data model.

Every supported layout is reduced to the same shape:

    ScorecardRecord
      └── Category (one per scored area, in document order)
            └── Item (one per scored criterion, in document order)

Records are frozen once built.  Numeric invariants (points earned never
exceeding max points, items summing to the category total) are checked by
``scorecards.validator``, not enforced here, because source workbooks are
routinely inconsistent.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FormatTag(str, Enum):
    """Known scorecard layouts.  Exactly one tag per document."""

    SNF_CLINICAL_SYSTEMS_REVIEW = "SNFClinicalSystemsReview"
    KEV_MINI = "KEVMini"
    KEV_HYBRID = "KEVHybrid"
    ALF_OLYMPUS = "ALFOlympus"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ReviewPeriod:
    """Month/year a scorecard covers.  Either field may be absent."""

    month: int | None = None
    year: int | None = None

    @property
    def is_complete(self) -> bool:
        return self.month is not None and self.year is not None

    @property
    def is_empty(self) -> bool:
        return self.month is None and self.year is None

    def label(self) -> str:
        """``2025-03``, ``2025-??``, ``????-03`` or ``-``."""
        if self.is_empty:
            return "-"
        year = str(self.year) if self.year is not None else "????"
        month = f"{self.month:02d}" if self.month is not None else "??"
        return f"{year}-{month}"


@dataclass(frozen=True)
class Item:
    """One scored criterion."""

    item_number: int
    criteria_text: str
    max_points: float = 0.0
    points_earned: float = 0.0
    charts_met: int = 0
    sample_size: int = 0


@dataclass(frozen=True)
class Category:
    """One scored area with its declared totals and items."""

    category_name: str
    total_points_earned: float = 0.0
    total_max_points: float = 0.0
    items: tuple[Item, ...] = ()

    @property
    def items_points_sum(self) -> float:
        return sum(item.points_earned for item in self.items)


@dataclass(frozen=True)
class CoverDetails:
    """Supplementary cover-sheet metadata, kept alongside the record."""

    review_period_text: str | None = None
    date_of_completion: str | None = None
    audit_completed_by: str | None = None
    overall_score: float | None = None


@dataclass(frozen=True)
class ScorecardRecord:
    """Normalized extraction result for one workbook."""

    kev_type: FormatTag
    facility_name: str | None = None
    company_name: str | None = None
    review_period: ReviewPeriod = field(default_factory=ReviewPeriod)
    total_score: float = 0.0
    total_max_points: float = 0.0
    score_percentage: float = 0.0
    categories: tuple[Category, ...] = ()
    cover: CoverDetails = field(default_factory=CoverDetails)

    @property
    def item_count(self) -> int:
        return sum(len(c.items) for c in self.categories)

    def to_dict(self) -> dict[str, Any]:
        d = dataclasses.asdict(self)
        d["kev_type"] = self.kev_type.value
        return d


def empty_record(kev_type: FormatTag = FormatTag.UNKNOWN) -> ScorecardRecord:
    """Record with every identity field absent and no categories."""
    return ScorecardRecord(kev_type=kev_type)
