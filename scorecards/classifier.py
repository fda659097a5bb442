"""Format classification from a workbook's sheet names.

Layouts share marker sheet names ("Cover Sheet" appears in more than one
family), so classification is an ordered rule chain rather than a score:
CLASSIFICATION_RULES is evaluated top to bottom and the first matching
rule decides the tag.  Anything unmatched is ``FormatTag.UNKNOWN``.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, NamedTuple

from scorecards.models import FormatTag
from scorecards.sheet_index import SheetIndex

logger = logging.getLogger(__name__)

MINI_COVER_SHEET = "KEV Score Cards Cover Sheet"
HYBRID_COVER_SHEET = "Cover Sheet"
HYBRID_MARKER_SHEET = "Abuse & Grievances"
SNF_OVERVIEW_SHEET = "Clinical Systems Overview"
SNF_NUMBERED_TAB = "1. Change of Condition"
OLYMPUS_MARKER = "olympus"


class ClassificationRule(NamedTuple):
    name: str
    predicate: Callable[[frozenset], bool]
    tag: FormatTag


def _is_kev_mini(names: frozenset) -> bool:
    return MINI_COVER_SHEET in names


def _is_kev_hybrid(names: frozenset) -> bool:
    return HYBRID_COVER_SHEET in names and HYBRID_MARKER_SHEET in names


def _is_snf(names: frozenset) -> bool:
    # Some authors renamed the overview but kept the numbered system tabs
    return SNF_OVERVIEW_SHEET in names or any(SNF_NUMBERED_TAB in n for n in names)


def _is_olympus(names: frozenset) -> bool:
    return any(OLYMPUS_MARKER in n.lower() for n in names)


# Order matters: a Mini workbook may also carry a "Cover Sheet".
CLASSIFICATION_RULES: list[ClassificationRule] = [
    ClassificationRule("kev_mini_cover", _is_kev_mini, FormatTag.KEV_MINI),
    ClassificationRule("kev_hybrid_cover", _is_kev_hybrid, FormatTag.KEV_HYBRID),
    ClassificationRule("snf_overview", _is_snf, FormatTag.SNF_CLINICAL_SYSTEMS_REVIEW),
    ClassificationRule("olympus_sheet", _is_olympus, FormatTag.ALF_OLYMPUS),
]


def classify_sheet_names(sheet_names: Iterable[str]) -> FormatTag:
    """Classify a workbook from its sheet names alone."""
    names = frozenset(str(n) for n in sheet_names)
    for rule in CLASSIFICATION_RULES:
        if rule.predicate(names):
            logger.debug("Matched rule %s -> %s", rule.name, rule.tag.value)
            return rule.tag
    return FormatTag.UNKNOWN


def classify(sheet_index: SheetIndex) -> FormatTag:
    """Map a loaded workbook to its FormatTag.  Never raises."""
    return classify_sheet_names(sheet_index.sheet_names)
