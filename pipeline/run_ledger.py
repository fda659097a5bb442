"""
Audit Run Ledger — one JSON line per audit, appended to ``ledger.jsonl``.

Each line carries the run's document counts per format and per company,
so layout drift across monthly uploads shows up without re-scanning::

    python audit_scorecards.py --history 6
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pipeline.logging import PipelineLogger
from utils.formatting import TableFormatter

LEDGER_FILENAME = "ledger.jsonl"


def ledger_record(pl: PipelineLogger, exit_code: int) -> dict[str, Any]:
    """Compact form of a finished run: totals plus per-step status."""
    return {
        "run_id": pl.run_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "exit_code": exit_code,
        "args": pl.args_dict,
        "totals": pl.totals(),
        "steps": {
            name: {
                "status": step.status,
                "elapsed": round(step.elapsed_seconds, 1),
                "documents": step.documents,
                "failed": step.failed,
                **({"skips": step.skip_counts()} if step.skips else {}),
            }
            for name, step in pl.steps.items()
        },
    }


def append_to_ledger(pl: PipelineLogger, exit_code: int,
                     ledger_path: Path | None = None) -> Path:
    """Append this run to ``<logs_dir>/ledger.jsonl``; the file is never rewritten."""
    ledger_path = Path(ledger_path) if ledger_path else pl.logs_root / LEDGER_FILENAME
    ledger_path.parent.mkdir(parents=True, exist_ok=True)
    with open(ledger_path, "a") as f:
        f.write(json.dumps(ledger_record(pl, exit_code), separators=(",", ":"),
                           default=str) + "\n")
    return ledger_path


def read_ledger(ledger_path: Path, last: int | None = None) -> list[dict[str, Any]]:
    """Ledger records, oldest first; only the *last* N when given."""
    if not Path(ledger_path).exists():
        return []
    with open(ledger_path) as f:
        records = [json.loads(line) for line in f if line.strip()]
    return records[-last:] if last else records


def format_history(records: list[dict[str, Any]]) -> str:
    """Table of documents per format for each recorded run.

    Runs that failed before scanning (no documents) are left out.
    """
    runs = [r for r in records if r.get("totals", {}).get("documents")]
    if not runs:
        return "No audited runs in the ledger."
    tags = sorted({tag for r in runs for tag in r["totals"]["formats"]})

    table = TableFormatter(["Run", "Documents", "Failed", *tags])
    for r in runs:
        totals = r["totals"]
        table.add_row([r["run_id"], totals["documents"], totals["failed"],
                       *(totals["formats"].get(tag, 0) for tag in tags)])
    return table.to_string()
