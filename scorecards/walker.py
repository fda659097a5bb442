"""Batch walker: directory tree -> per-document outcomes -> BatchReport.

Discovery is a sorted recursive scan that keeps ``.xlsx``/``.xlsm`` files
and skips Excel lock files (``~$Book.xlsx``).  Every document runs through
load -> classify -> extract -> validate in :func:`process_document`, which
is a plain top-level function over a tuple of arguments so it can run in a
``ProcessPoolExecutor``.  Workers return private :class:`DocumentOutcome`
values; only the main process folds them into the :class:`BatchReport`.

Usage::

    from scorecards.walker import run

    report = run("Score Cards", workers=0)      # 0 = auto
    print(report.format_counts)
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections import Counter, defaultdict
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from scorecards.classifier import classify
from scorecards.extractor import extract
from scorecards.models import FormatTag, ScorecardRecord, empty_record
from scorecards.sheet_index import DocumentUnreadableError, load_sheet_index
from scorecards.validator import CATEGORY_TOLERANCE, EXPECTED_CATEGORY_COUNT, validate
from utils.common import relative_display
from utils.config import AuditConfig, KnownValues
from utils.progress import ProgressTracker
from utils.validation import ValidationIssue, ValidationResult

logger = logging.getLogger(__name__)


# ── Outcomes ──────────────────────────────────────────────────────────────────


@dataclasses.dataclass
class FailedFileEntry:
    """Record of a document or directory that could not be read."""
    file_path: str
    error_type: str
    error_detail: str
    timestamp: str = dataclasses.field(
        default_factory=lambda: datetime.now().isoformat()
    )

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


@dataclass
class DocumentOutcome:
    """Exactly one per attempted document: a record plus issues, or an error."""

    relative_path: str
    company: str
    facility: str
    format_tag: FormatTag
    record: ScorecardRecord
    issues: list[ValidationIssue] = field(default_factory=list)
    error: FailedFileEntry | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "relative_path": self.relative_path,
            "company": self.company,
            "facility": self.facility,
            "format": self.format_tag.value,
            "record": self.record.to_dict(),
            "issues": [issue.message for issue in self.issues],
        }
        if self.error is not None:
            d["error"] = self.error.to_dict()
        return d


class OutcomeSink(Protocol):
    """Receiver of per-document outcomes (e.g. an import batch)."""

    def record(self, outcome: DocumentOutcome) -> None: ...


# ── Path conventions ──────────────────────────────────────────────────────────


def is_candidate_document(name: str, config: AuditConfig | None = None) -> bool:
    """True for ``.xlsx``/``.xlsm`` names (any case) that aren't lock files."""
    config = config or AuditConfig()
    if name.startswith(config.temp_prefix):
        return False
    return Path(name).suffix.lower() in config.suffixes


def infer_company(path: Path, root: Path) -> str:
    """Company from keywords anywhere in the path below the root's parent."""
    path, root = Path(path), Path(root)
    try:
        text = str(path.relative_to(root.parent))
    except ValueError:
        text = str(path)
    return KnownValues.company_for_path(text)


def infer_facility(path: Path) -> str:
    """Facility = parent folder, or grandparent when the parent is a "Scorecards" folder."""
    parent = Path(path).parent
    if "scorecard" in parent.name.lower() and parent.parent.name:
        return parent.parent.name
    return parent.name


def discover_documents(root: Path, config: AuditConfig | None = None,
                       ) -> tuple[list[Path], list[FailedFileEntry]]:
    """Recursively list candidate documents under *root*.

    Directories that cannot be listed are logged and reported, not raised.

    Returns:
        (sorted document paths, scan errors)
    """
    config = config or AuditConfig()
    documents: list[Path] = []
    scan_errors: list[FailedFileEntry] = []

    pending = [Path(root)]
    while pending:
        directory = pending.pop()
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            logger.warning("Skipping unreadable directory %s: %s", directory, e)
            scan_errors.append(FailedFileEntry(str(directory), type(e).__name__, str(e)))
            continue

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    pending.append(Path(entry.path))
                elif entry.is_file() and is_candidate_document(entry.name, config):
                    documents.append(Path(entry.path))
            except OSError as e:
                logger.warning("Skipping unreadable entry %s: %s", entry.path, e)
                scan_errors.append(FailedFileEntry(entry.path, type(e).__name__, str(e)))

    documents.sort()
    return documents, scan_errors


# ── Per-document worker ───────────────────────────────────────────────────────


def failed_outcome(file_path: Path, root: Path, error_type: str, detail: str) -> DocumentOutcome:
    """Unknown outcome for a document that could not be processed."""
    relative_path = relative_display(file_path, root)
    return DocumentOutcome(
        relative_path=relative_path,
        company=infer_company(file_path, root),
        facility=infer_facility(file_path),
        format_tag=FormatTag.UNKNOWN,
        record=empty_record(),
        error=FailedFileEntry(relative_path, error_type, detail),
    )


def process_document(args: tuple) -> DocumentOutcome:
    """Worker function: classify, extract and validate one document.

    Reads nothing but its own file and shares no state, so it can run in
    a subprocess.

    Args:
        args: Tuple of (file_path_str, root_str[, tolerance, expected_categories]).

    Returns:
        DocumentOutcome; read failures come back as an Unknown record with
        ``error`` set.
    """
    file_path_str, root_str, *thresholds = args
    tolerance = thresholds[0] if len(thresholds) > 0 else CATEGORY_TOLERANCE
    expected = thresholds[1] if len(thresholds) > 1 else EXPECTED_CATEGORY_COUNT

    file_path = Path(file_path_str)
    root = Path(root_str)
    relative_path = relative_display(file_path, root)

    outcome = DocumentOutcome(
        relative_path=relative_path,
        company=infer_company(file_path, root),
        facility=infer_facility(file_path),
        format_tag=FormatTag.UNKNOWN,
        record=empty_record(),
    )

    try:
        sheet_index = load_sheet_index(file_path)
    except DocumentUnreadableError as e:
        logger.warning("Unreadable document %s: %s", relative_path, e.detail)
        return failed_outcome(file_path, root, e.error_type, e.detail)

    outcome.format_tag = classify(sheet_index)
    try:
        outcome.record = extract(sheet_index, outcome.format_tag, file_path.name)
    except Exception as e:
        # Layout surprises in a recognised format are reported per document
        logger.exception("Extraction failed for %s", relative_path)
        outcome.error = FailedFileEntry(relative_path, type(e).__name__, str(e))
        outcome.record = empty_record(outcome.format_tag)
        return outcome

    outcome.issues = validate(outcome.record, tolerance, expected)
    return outcome


# ── Aggregation ───────────────────────────────────────────────────────────────


@dataclass
class BatchReport:
    """Everything one batch run found, folded from per-document outcomes."""

    root: str
    outcomes: list[DocumentOutcome] = field(default_factory=list)
    scan_errors: list[FailedFileEntry] = field(default_factory=list)
    format_counts: Counter = field(default_factory=Counter)
    company_counts: Counter = field(default_factory=Counter)
    company_format_counts: dict[str, Counter] = field(
        default_factory=lambda: defaultdict(Counter))
    facilities_by_company: dict[str, set[str]] = field(
        default_factory=lambda: defaultdict(set))
    validation: ValidationResult = field(default_factory=ValidationResult)

    def fold(self, outcome: DocumentOutcome) -> None:
        """Merge one document's outcome into the aggregate."""
        self.outcomes.append(outcome)
        self.format_counts[outcome.format_tag] += 1
        self.company_counts[outcome.company] += 1
        self.company_format_counts[outcome.company][outcome.format_tag] += 1
        if KnownValues.is_known_company(outcome.company):
            self.facilities_by_company[outcome.company].add(outcome.facility)
        if outcome.ok:
            self.validation.add_document(outcome.issues)

    # ── derived views ─────────────────────────────────────────────────────

    @property
    def documents_attempted(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> list[DocumentOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    def primary_format_by_company(self) -> dict[str, tuple[FormatTag, int, float]]:
        """Most common format per company as (tag, count, percent of company).

        Ties go to the format listed first in FormatTag.
        """
        order = {tag: i for i, tag in enumerate(FormatTag)}
        primary = {}
        for company in sorted(self.company_format_counts):
            counts = self.company_format_counts[company]
            total = sum(counts.values())
            tag, count = min(counts.items(), key=lambda kv: (-kv[1], order[kv[0]]))
            primary[company] = (tag, count, round(count / total * 100, 1) if total else 0.0)
        return primary

    def missing_periods_by_format(self) -> dict[FormatTag, list[DocumentOutcome]]:
        """Readable documents lacking a month or a year, grouped by format."""
        missing: dict[FormatTag, list[DocumentOutcome]] = defaultdict(list)
        for outcome in self.outcomes:
            if outcome.ok and not outcome.record.review_period.is_complete:
                missing[outcome.format_tag].append(outcome)
        return dict(missing)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "documents_attempted": self.documents_attempted,
            "success_count": self.success_count,
            "failed_count": len(self.failures),
            "format_counts": {tag.value: n for tag, n in self.format_counts.items()},
            "company_counts": dict(self.company_counts),
            "company_format_counts": {
                company: {tag.value: n for tag, n in counts.items()}
                for company, counts in sorted(self.company_format_counts.items())
            },
            "primary_format_by_company": {
                company: {"format": tag.value, "count": count, "percent": pct}
                for company, (tag, count, pct) in self.primary_format_by_company().items()
            },
            "facilities_by_company": {
                company: sorted(names)
                for company, names in sorted(self.facilities_by_company.items())
            },
            "validation": self.validation.to_dict(),
            "scan_errors": [e.to_dict() for e in self.scan_errors],
            "documents": [o.to_dict() for o in self.outcomes],
        }


# ── Entry point ───────────────────────────────────────────────────────────────


def run(
    root_path: Path | str,
    workers: int | None = None,
    config: AuditConfig | None = None,
    sink: OutcomeSink | None = None,
    progress: ProgressTracker | None = None,
) -> BatchReport:
    """Walk *root_path* and build the batch report.

    Args:
        root_path: Directory tree of scorecard workbooks.
        workers: Parallel worker processes (0 = auto, 1 = in-process).
            Defaults to ``config.workers``.
        config: Audit settings; defaults to AuditConfig().
        sink: Optional receiver of every DocumentOutcome, one per document.
        progress: Optional progress tracker (total is set from discovery).

    Returns:
        BatchReport with outcomes sorted by relative path.

    Raises:
        FileNotFoundError: If *root_path* is not a directory.
    """
    config = config or AuditConfig()
    root = Path(root_path)
    if not root.is_dir():
        raise FileNotFoundError(f"Scorecard directory not found: {root}")

    if workers is None:
        workers = config.workers
    num_workers = workers if workers > 0 else min(os.cpu_count() or 1, 4)

    documents, scan_errors = discover_documents(root, config)
    report = BatchReport(root=str(root), scan_errors=scan_errors)
    if progress is not None:
        progress.total_items = len(documents)

    logger.info("Auditing %d documents under %s with %d workers",
                len(documents), root, num_workers)

    task_args = [
        (str(path), str(root), config.category_tolerance, config.expected_categories)
        for path in documents
    ]

    def _merge(outcome: DocumentOutcome) -> None:
        report.fold(outcome)
        if sink is not None:
            sink.record(outcome)
        if progress is not None:
            if outcome.ok:
                progress.mark_completed()
            else:
                progress.mark_failed()

    if num_workers > 1 and len(task_args) > 1:
        with ProcessPoolExecutor(max_workers=num_workers) as pool:
            futures = {pool.submit(process_document, a): a for a in task_args}
            for future in as_completed(futures):
                try:
                    outcome = future.result()
                except Exception as e:
                    # The worker process itself failed (BrokenProcessPool, pickling)
                    file_path_str, root_str = futures[future][:2]
                    logger.error("Worker failed on %s: %s", file_path_str, e)
                    outcome = failed_outcome(Path(file_path_str), Path(root_str),
                                             type(e).__name__, str(e))
                _merge(outcome)
    else:
        for a in task_args:
            _merge(process_document(a))

    report.outcomes.sort(key=lambda o: o.relative_path)
    if progress is not None:
        progress.finish()

    logger.info("Audit complete: %d documents, %d failed, %d scan errors",
                report.documents_attempted, len(report.failures), len(scan_errors))
    return report
