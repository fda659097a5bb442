"""
Audit Logging — one log file per audit step, tallied by format and company.

PipelineLogger owns a ``logs/audit/<run_id>/`` directory.  Each step gets a
StepReport; the scan step feeds it every DocumentOutcome and every
unreadable folder, so the step log, the console line and ``summary.json``
all show how many documents of each layout each company sent in, and
which documents were left without a classification or a review period.

Usage inside audit_scorecards.py::

    pl = PipelineLogger()
    step = pl.start_step("scan")            # scan.log receives engine logging
    for outcome in report.outcomes:
        step.record_outcome(outcome)
    pl.finish_step("scan", step)
    pl.write_summary()

Skip categories (SkipRecord.category):
    unreadable_directory  a folder could not be listed
    classification_miss   workbook matched no known layout
    missing_period        no month or year could be recovered
"""

from __future__ import annotations

import json
import logging
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from scorecards.models import FormatTag

if TYPE_CHECKING:
    from scorecards.walker import DocumentOutcome, FailedFileEntry

UNREADABLE_DIRECTORY = "unreadable_directory"
CLASSIFICATION_MISS = "classification_miss"
MISSING_PERIOD = "missing_period"

# Errors listed at the end of a step log before truncating
_MAX_LOGGED_ERRORS = 20


@dataclass
class SkipRecord:
    """A document or folder the audit could only partly account for."""

    category: str
    path: str
    detail: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass
class StepReport:
    """Per-step document tallies: formats, companies, skips and failures."""

    step_name: str
    status: str = "not_started"               # started | completed | failed
    elapsed_seconds: float = 0.0
    documents: int = 0
    failed: int = 0
    formats: Counter = field(default_factory=Counter)
    companies: dict[str, Counter] = field(default_factory=dict)
    skips: list[SkipRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def record_outcome(self, outcome: DocumentOutcome) -> None:
        """Count one attempted document under its format and company."""
        tag = outcome.format_tag.value
        self.documents += 1
        self.formats[tag] += 1
        self.companies.setdefault(outcome.company, Counter())[tag] += 1

        if outcome.error is not None:
            self.failed += 1
            self.errors.append(f"{outcome.relative_path}: {outcome.error.error_detail}")
        elif outcome.format_tag is FormatTag.UNKNOWN:
            self.skips.append(SkipRecord(CLASSIFICATION_MISS, outcome.relative_path,
                                         "no layout rule matched"))
        elif not outcome.record.review_period.is_complete:
            self.skips.append(SkipRecord(MISSING_PERIOD, outcome.relative_path,
                                         outcome.record.review_period.label()))

    def record_scan_error(self, entry: FailedFileEntry) -> None:
        self.skips.append(SkipRecord(UNREADABLE_DIRECTORY, entry.file_path,
                                     entry.error_detail))

    def skip_counts(self) -> dict[str, int]:
        return dict(Counter(s.category for s in self.skips))

    def console_summary(self) -> str:
        """e.g. ``6 documents, 1 failed | KEVMini 2, Unknown 1 | 1 missing period``"""
        if not self.documents and not self.skips and not self.errors:
            return "no documents"
        parts = [f"{self.documents:,} documents, {self.failed:,} failed"]
        if self.formats:
            parts.append(", ".join(f"{tag} {n}" for tag, n in sorted(self.formats.items())))
        for category, n in sorted(self.skip_counts().items()):
            parts.append(f"{n} {category.replace('_', ' ')}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "step_name": self.step_name,
            "status": self.status,
            "elapsed_seconds": round(self.elapsed_seconds, 2),
            "documents": self.documents,
            "failed": self.failed,
        }
        if self.formats:
            d["formats"] = dict(sorted(self.formats.items()))
            d["companies"] = {
                company: dict(sorted(counts.items()))
                for company, counts in sorted(self.companies.items())
            }
        if self.skips:
            d["skips"] = [s.to_dict() for s in self.skips]
        if self.errors:
            d["errors"] = self.errors
        return d

    def write_log_summary(self, stream) -> None:
        """Append the step's tallies to the end of its own log file."""
        rule = "=" * 60
        lines = [
            "", rule,
            f"STEP SUMMARY: {self.step_name} ({self.status}, {self.elapsed_seconds:.1f}s)",
            f"  Documents: {self.documents} ({self.failed} failed)",
        ]
        for tag, n in sorted(self.formats.items()):
            lines.append(f"    {tag:<28} {n:>5}")
        for company, counts in sorted(self.companies.items()):
            mix = ", ".join(f"{tag} {n}" for tag, n in counts.most_common())
            lines.append(f"  {company}: {mix}")
        for category, n in sorted(self.skip_counts().items()):
            lines.append(f"  skipped {category}: {n}")
        for err in self.errors[:_MAX_LOGGED_ERRORS]:
            lines.append(f"    - {err}")
        if len(self.errors) > _MAX_LOGGED_ERRORS:
            lines.append(f"    ... and {len(self.errors) - _MAX_LOGGED_ERRORS} more")
        lines.append(rule)
        stream.write("\n".join(lines) + "\n")


class PipelineLogger:
    """Per-run log directory for the audit::

        logs/audit/2026-02-22T14-30-00/
            scan.log
            report.log
            summary.json
    """

    def __init__(self, logs_dir: Path | str = "logs/audit") -> None:
        self.logs_root = Path(logs_dir)
        self.run_id = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
        self.run_dir = self.logs_root / self.run_id
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self.run_start = time.monotonic()
        self.args_dict: dict[str, Any] = {}
        self.steps: dict[str, StepReport] = {}
        self._handlers: dict[str, tuple[logging.FileHandler, float]] = {}

    def start_step(self, step_name: str) -> StepReport:
        """Route root-logger output into ``<step_name>.log`` until the step ends."""
        handler = logging.FileHandler(self.run_dir / f"{step_name}.log", encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s  %(levelname)-7s  %(name)s  %(message)s", datefmt="%H:%M:%S",
        ))
        logging.getLogger().addHandler(handler)
        self._handlers[step_name] = (handler, time.monotonic())

        step = StepReport(step_name=step_name, status="started")
        self.steps[step_name] = step
        return step

    def finish_step(self, step_name: str, step: StepReport | None = None) -> StepReport:
        step = step or self.steps.get(step_name) or StepReport(step_name)
        handler, started = self._handlers.pop(step_name, (None, self.run_start))
        step.elapsed_seconds = time.monotonic() - started
        if step.status == "started":
            step.status = "completed"
        self.steps[step_name] = step

        if step.failed or step.skips:
            print(f"  [{step_name}] {step.console_summary()}", flush=True)

        if handler is not None:
            step.write_log_summary(handler.stream)
            logging.getLogger().removeHandler(handler)
            handler.close()
        return step

    def fail_step(self, step_name: str, message: str) -> StepReport:
        step = self.steps.get(step_name) or StepReport(step_name)
        step.status = "failed"
        step.errors.append(message)
        return self.finish_step(step_name, step)

    def totals(self) -> dict[str, Any]:
        """Run-wide document counts, summed over every step that saw documents."""
        formats: Counter = Counter()
        companies: dict[str, Counter] = {}
        documents = failed = 0
        for step in self.steps.values():
            documents += step.documents
            failed += step.failed
            formats.update(step.formats)
            for company, counts in step.companies.items():
                companies.setdefault(company, Counter()).update(counts)
        return {
            "documents": documents,
            "failed": failed,
            "formats": dict(sorted(formats.items())),
            "companies": {c: dict(sorted(n.items())) for c, n in sorted(companies.items())},
        }

    def write_summary(self) -> Path:
        """Write ``summary.json`` for the whole run."""
        summary = {
            "run_id": self.run_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "total_elapsed_seconds": round(time.monotonic() - self.run_start, 2),
            "args": self.args_dict,
            "totals": self.totals(),
            "steps": {name: step.to_dict() for name, step in self.steps.items()},
        }
        with open(self.summary_path, "w") as f:
            json.dump(summary, f, indent=2)
        return self.summary_path

    @property
    def summary_path(self) -> Path:
        return self.run_dir / "summary.json"
