"""
Import Batch — bookkeeping for one set of scorecards imported together.

The batch is a small state machine::

    pending ──start()──> processing ──complete()──> completed
                             │                      completed_with_errors
                             └──fail()──> failed
    completed / completed_with_errors ──rollback()──> rolled_back

The audit engine never drives these transitions.  It only hands the batch
one outcome per attempted document through :meth:`ImportBatch.record`;
whoever owns the batch (the CLI, or a storage layer) starts and finishes
it.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

PENDING = "pending"
PROCESSING = "processing"
COMPLETED = "completed"
COMPLETED_WITH_ERRORS = "completed_with_errors"
FAILED = "failed"
ROLLED_BACK = "rolled_back"

BATCH_STATUSES = (PENDING, PROCESSING, COMPLETED, COMPLETED_WITH_ERRORS, FAILED, ROLLED_BACK)

_TRANSITIONS = {
    PENDING: {PROCESSING},
    PROCESSING: {COMPLETED, COMPLETED_WITH_ERRORS, FAILED},
    COMPLETED: {ROLLED_BACK},
    COMPLETED_WITH_ERRORS: {ROLLED_BACK},
    FAILED: set(),
    ROLLED_BACK: set(),
}


@dataclass
class ImportBatch:
    """In-memory import batch; also the walker's outcome sink."""

    import_type: str = "historical_full"
    batch_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: str = PENDING
    total_files: int = 0
    processed_files: int = 0
    success_count: int = 0
    failed_count: int = 0
    error_log: list[dict[str, str]] = field(default_factory=list)
    imported: list[str] = field(default_factory=list)    # relative paths
    completed_at: str | None = None

    def _move_to(self, new_status: str) -> None:
        if new_status not in _TRANSITIONS[self.status]:
            raise ValueError(
                f"Import batch {self.batch_id}: cannot go from {self.status} to {new_status}"
            )
        logger.debug("Import batch %s: %s -> %s", self.batch_id, self.status, new_status)
        self.status = new_status

    # ── lifecycle ─────────────────────────────────────────────────────────

    def start(self, total_files: int) -> None:
        """Begin processing *total_files* documents."""
        self._move_to(PROCESSING)
        self.total_files = total_files

    def record(self, outcome) -> None:
        """Count one document outcome (a ``DocumentOutcome``).

        Raises:
            ValueError: If the batch is not processing.
        """
        if self.status != PROCESSING:
            raise ValueError(f"Import batch {self.batch_id} is {self.status}, not processing")
        self.processed_files += 1
        if outcome.error is None:
            self.success_count += 1
            self.imported.append(outcome.relative_path)
        else:
            self.failed_count += 1
            self.error_log.append({
                "filename": outcome.relative_path,
                "error": f"{outcome.error.error_type}: {outcome.error.error_detail}",
            })

    def complete(self) -> str:
        """Finish the batch; any failed document makes it completed_with_errors."""
        self._move_to(COMPLETED if self.failed_count == 0 else COMPLETED_WITH_ERRORS)
        self.completed_at = datetime.now(timezone.utc).isoformat()
        return self.status

    def fail(self, reason: str) -> None:
        """Abort the batch as a whole (e.g. the root folder vanished)."""
        self._move_to(FAILED)
        self.error_log.append({"filename": "", "error": reason})
        self.completed_at = datetime.now(timezone.utc).isoformat()

    def rollback(self) -> list[str]:
        """Mark a finished batch rolled back; returns the paths it had imported.

        Raises:
            ValueError: If the batch was already rolled back or never finished.
        """
        if self.status == ROLLED_BACK:
            raise ValueError(f"Import batch {self.batch_id} already rolled back")
        self._move_to(ROLLED_BACK)
        removed, self.imported = self.imported, []
        return removed

    def to_dict(self) -> dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "import_type": self.import_type,
            "status": self.status,
            "total_files": self.total_files,
            "processed_files": self.processed_files,
            "success_count": self.success_count,
            "failed_count": self.failed_count,
            "completed_at": self.completed_at,
            "error_log": list(self.error_log),
        }
