"""Data validation utilities for the scorecard tools.

Provides:
- ValidationIssue, one finding produced by a named check
- ValidationResult, a batch-wide tally of issues by check and severity
- ValidationRegistry, an ordered set of check functions run against one
  target (an extracted scorecard record)
"""

from typing import List, Dict, Any, Callable, Optional


class ValidationIssue:
    """Represents a single validation issue found during checks."""

    def __init__(self, check_name: str, severity: str, detail: str,
                 count: int = 1):
        """Initialize a validation issue.

        Args:
            check_name: Name of the check that found this issue
            severity: Issue severity ('error', 'warning', 'info')
            detail: Human-readable description of the issue
            count: Number of affected items
        """
        self.check_name = check_name
        self.severity = severity
        self.detail = detail
        self.count = count

    @property
    def message(self) -> str:
        """The human-readable text of the issue."""
        return self.detail

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "check": self.check_name,
            "severity": self.severity,
            "message": self.detail,
            "count": self.count,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationIssue):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self.check_name, self.severity, self.detail, self.count))

    def __str__(self) -> str:
        return self.detail

    def __repr__(self) -> str:
        return (f"ValidationIssue(check={self.check_name}, severity={self.severity}, "
                f"message={self.detail!r})")


class ValidationResult:
    """Collects validation issues across the documents of one batch."""

    def __init__(self):
        self.issues: List[ValidationIssue] = []
        self.documents_checked = 0
        self.documents_with_issues = 0

    def add_document(self, issues: List[ValidationIssue]) -> None:
        """Fold one document's issue list into the tally."""
        self.documents_checked += 1
        if issues:
            self.documents_with_issues += 1
        self.issues.extend(issues)

    def get_issues_by_severity(self, severity: str) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == severity]

    def error_count(self) -> int:
        return len(self.get_issues_by_severity("error"))

    def warning_count(self) -> int:
        return len(self.get_issues_by_severity("warning"))

    def counts_by_check(self) -> Dict[str, int]:
        """Number of issues raised per check name, in first-seen order."""
        counts: Dict[str, int] = {}
        for issue in self.issues:
            counts[issue.check_name] = counts.get(issue.check_name, 0) + 1
        return counts

    def is_valid(self) -> bool:
        """True when no document raised an error-level issue."""
        return self.error_count() == 0

    def summary_text(self) -> str:
        """Generate human-readable validation summary."""
        lines = [
            "Validation Summary:",
            f"  Documents checked:     {self.documents_checked}",
            f"  Documents with issues: {self.documents_with_issues}",
            f"  Issues: {len(self.issues)}",
            f"    - Errors: {self.error_count()}",
            f"    - Warnings: {self.warning_count()}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documents_checked": self.documents_checked,
            "documents_with_issues": self.documents_with_issues,
            "by_check": self.counts_by_check(),
            "summary": {
                "issues": len(self.issues),
                "errors": self.error_count(),
                "warnings": self.warning_count(),
            },
        }


class ValidationRegistry:
    """Manages an ordered collection of validation check functions.

    Checks run in registration order, and each check's issues are kept in
    the order the check emitted them, so the combined issue list is
    deterministic for a given target.
    """

    def __init__(self):
        self.checks: Dict[str, Callable] = {}

    def register(self, name: str, check_fn: Callable) -> None:
        """Register a validation check function.

        Args:
            name: Check name (also the ``check_name`` of its issues)
            check_fn: Function taking the target, returning List[ValidationIssue]
        """
        self.checks[name] = check_fn

    def check(self, name: str) -> Callable:
        """Decorator form of :meth:`register`."""
        def decorator(fn: Callable) -> Callable:
            self.register(name, fn)
            return fn
        return decorator

    def run(self, target: Any,
            skip_checks: Optional[List[str]] = None) -> List[ValidationIssue]:
        """Run all registered checks against *target*.

        Args:
            target: Object under validation
            skip_checks: Check names to skip

        Returns:
            Issues from every check, in registration order
        """
        skip = skip_checks or []
        issues: List[ValidationIssue] = []

        for check_name, check_fn in self.checks.items():
            if check_name in skip:
                continue
            try:
                issues.extend(check_fn(target) or [])
            except Exception as e:
                issues.append(ValidationIssue(
                    check_name, "error",
                    f"Check raised exception: {str(e)[:100]}",
                ))

        return issues

