"""Progress tracking for batch scorecard runs.

Provides an abstract base class and two implementations:
- TerminalProgressTracker prints a bar every N documents
- SilentProgressTracker records counts without output (tests, --no-progress)

The batch walker only calls ``mark_completed`` / ``mark_failed`` /
``finish``; everything else is display.
"""

import time
from abc import ABC, abstractmethod

from utils.common import format_duration


class ProgressTracker(ABC):
    """Abstract base class for document progress tracking."""

    def __init__(self, total_items: int):
        """Initialize progress tracker.

        Args:
            total_items: Number of documents the run will attempt
        """
        self.total_items = total_items
        self.completed = 0
        self.failed = 0
        self.start_time = time.time()

    @property
    def processed(self) -> int:
        """Documents attempted so far (completed + failed)."""
        return self.completed + self.failed

    @property
    def remaining(self) -> int:
        return self.total_items - self.processed

    @property
    def progress_fraction(self) -> float:
        """Progress as a fraction (0.0 to 1.0)."""
        if self.total_items == 0:
            return 0.0
        return min(1.0, self.processed / self.total_items)

    @property
    def progress_percent(self) -> int:
        return int(self.progress_fraction * 100)

    def mark_completed(self, count: int = 1) -> None:
        """Record documents that produced a record."""
        self.completed += count
        self.update()

    def mark_failed(self, count: int = 1) -> None:
        """Record documents that could not be read."""
        self.failed += count
        self.update()

    @abstractmethod
    def update(self) -> None:
        """Refresh the display after a count changes."""

    @abstractmethod
    def finish(self) -> None:
        """Close out the display once the run is done."""


class TerminalProgressTracker(ProgressTracker):
    """Prints ``[=====>    ]  50% (10/20) [failed: 1] - 0m 04s`` lines."""

    def __init__(self, total_items: int, show_every_n: int = 10):
        """Initialize terminal progress tracker.

        Args:
            total_items: Number of documents
            show_every_n: Print a line every N documents
        """
        super().__init__(total_items)
        self.show_every_n = show_every_n
        self.last_shown = 0

    def _format_bar(self, width: int = 30) -> str:
        filled = int(self.progress_fraction * width)
        return "[" + "=" * filled + ">" + " " * max(0, width - filled - 1) + "]"

    def _status_line(self, percent: int) -> str:
        return (f"{self._format_bar()} {percent:3d}% "
                f"({self.processed}/{self.total_items}) [failed: {self.failed}] "
                f"- {format_duration(time.time() - self.start_time)}")

    def update(self) -> None:
        if self.processed - self.last_shown < self.show_every_n:
            return
        self.last_shown = self.processed
        print(self._status_line(self.progress_percent), flush=True)

    def finish(self) -> None:
        print(self._status_line(100), flush=True)
        print(f"Extracted: {self.completed}, Failed: {self.failed}")


class SilentProgressTracker(ProgressTracker):
    """Progress tracker that doesn't display anything."""

    def update(self) -> None:
        pass

    def finish(self) -> None:
        pass
