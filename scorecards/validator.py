"""Post-extraction data-quality checks.

``validate(record)`` runs RECORD_CHECKS in registration order and returns
the issues in the order they were found.  Issues are informational: the
record is never modified and a record with issues is still stored.

Check order (fixed):
    1. facility name present
    2. month present, then year present
    3. at least EXPECTED_CATEGORY_COUNT categories
    4. per category, in category order: items present, max points set,
       points within max, items summing to the declared total
"""

from __future__ import annotations

from functools import partial

from scorecards.models import Category, ScorecardRecord
from utils.validation import ValidationIssue, ValidationRegistry

# Applied uniformly to every format; see DESIGN.md
CATEGORY_TOLERANCE = 1.0
EXPECTED_CATEGORY_COUNT = 4


def check_facility(record: ScorecardRecord) -> list[ValidationIssue]:
    if record.facility_name:
        return []
    return [ValidationIssue("facility", "error", "Missing facility name")]


def check_period(record: ScorecardRecord) -> list[ValidationIssue]:
    issues = []
    if record.review_period.month is None:
        issues.append(ValidationIssue("period", "error", "Missing month"))
    if record.review_period.year is None:
        issues.append(ValidationIssue("period", "error", "Missing year"))
    return issues


def check_category_count(record: ScorecardRecord,
                         expected: int = EXPECTED_CATEGORY_COUNT) -> list[ValidationIssue]:
    found = len(record.categories)
    if found >= expected:
        return []
    return [ValidationIssue(
        "category_count", "warning",
        f"Only {found} of {expected} categories found",
        count=expected - found,
    )]


def _points_label(value: float) -> str:
    # Whole totals print without a trailing ".0"
    return str(int(value)) if float(value).is_integer() else str(value)


def check_category(category: Category,
                   tolerance: float = CATEGORY_TOLERANCE) -> list[ValidationIssue]:
    """Consistency checks for one category, in their fixed order."""
    name = category.category_name
    issues = []
    if not category.items:
        issues.append(ValidationIssue("category_items", "warning", f"{name}: No items extracted"))

    zero_max = sum(1 for item in category.items if not item.max_points)
    if zero_max:
        issues.append(ValidationIssue(
            "item_max_points", "warning",
            f"{name}: {zero_max} items with 0 max points", count=zero_max,
        ))

    over_max = sum(1 for item in category.items if item.points_earned > item.max_points)
    if over_max:
        issues.append(ValidationIssue(
            "item_points_over_max", "error",
            f"{name}: {over_max} items with points > max", count=over_max,
        ))

    items_sum = category.items_points_sum
    if abs(items_sum - category.total_points_earned) > tolerance:
        issues.append(ValidationIssue(
            "category_total", "warning",
            f"{name}: Items sum ({items_sum:.1f}) ≠ category total "
            f"({_points_label(category.total_points_earned)})",
        ))
    return issues


def check_categories(record: ScorecardRecord,
                     tolerance: float = CATEGORY_TOLERANCE) -> list[ValidationIssue]:
    issues = []
    for category in record.categories:
        issues.extend(check_category(category, tolerance))
    return issues


def build_registry(tolerance: float = CATEGORY_TOLERANCE,
                   expected_categories: int = EXPECTED_CATEGORY_COUNT) -> ValidationRegistry:
    """Registry of the record checks, in the order their issues are reported."""
    registry = ValidationRegistry()
    registry.register("facility", check_facility)
    registry.register("period", check_period)
    registry.register("category_count",
                      partial(check_category_count, expected=expected_categories))
    registry.register("categories", partial(check_categories, tolerance=tolerance))
    return registry


RECORD_CHECKS = build_registry()


def validate(record: ScorecardRecord,
             tolerance: float = CATEGORY_TOLERANCE,
             expected_categories: int = EXPECTED_CATEGORY_COUNT) -> list[ValidationIssue]:
    """Run every record check; returns issues in check order."""
    if tolerance == CATEGORY_TOLERANCE and expected_categories == EXPECTED_CATEGORY_COUNT:
        return RECORD_CHECKS.run(record)
    return build_registry(tolerance, expected_categories).run(record)
