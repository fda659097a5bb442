"""Common utility functions used across the scorecard tools."""

from pathlib import Path


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as a human-readable string.

    Examples:
        0m 30s, 2m 15s, 1h 05m 30s
    """
    secs = int(seconds)
    m, s = divmod(secs, 60)
    h, m = divmod(m, 60)
    if h:
        return f"{h}h {m:02d}m {s:02d}s"
    return f"{m}m {s:02d}s"


def relative_display(path: Path, root: Path) -> str:
    """Return *path* relative to *root* when possible, else the full path."""
    try:
        return str(Path(path).relative_to(root))
    except ValueError:
        return str(path)
