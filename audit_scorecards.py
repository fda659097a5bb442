#!/usr/bin/env python3
"""
Scorecard Format Audit

Walks a folder tree of facility scorecard workbooks (.xlsx / .xlsm),
classifies each workbook's layout, extracts the normalized scorecard,
validates it, and prints a report of formats per company, facilities per
company, missing review periods and validation issues.

Usage:
    python audit_scorecards.py --root "Score Cards"
    python audit_scorecards.py --root "Score Cards" --workers 0        # auto
    python audit_scorecards.py --root "Score Cards" --export-json audit.json
    python audit_scorecards.py --root "Score Cards" --export-parquet items.parquet
    python audit_scorecards.py --root "Score Cards" --config audit.json -v
    python audit_scorecards.py --history 6                           # format drift
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pipeline.import_batch import ImportBatch
from pipeline.logging import PipelineLogger
from pipeline.run_ledger import LEDGER_FILENAME, append_to_ledger, format_history, read_ledger
from scorecards.catalog import describe_catalog
from scorecards.report import export_csv, export_json, export_parquet, render_report
from scorecards.walker import run
from utils.config import AuditConfig
from utils.progress import SilentProgressTracker, TerminalProgressTracker


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Classify, extract and validate scorecard workbooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python audit_scorecards.py --root "Score Cards"
  python audit_scorecards.py --root "Score Cards" --output audit.txt --verbose
  python audit_scorecards.py --root "Score Cards" --export-csv audit.csv
        """,
    )
    parser.add_argument("--root", type=Path, default=Path("Score Cards"),
                        help="Scorecard folder tree (default: 'Score Cards')")
    parser.add_argument("--workers", type=int, default=None,
                        help="Worker processes: 0 = auto, 1 = sequential "
                             "(default: from config, 1)")
    parser.add_argument("--config", type=Path, default=None,
                        help="JSON file overriding AuditConfig defaults")
    parser.add_argument("--output", type=Path, default=None,
                        help="Save text report to file")
    parser.add_argument("--export-json", type=Path, default=None,
                        help="Export the full report as JSON")
    parser.add_argument("--export-csv", type=Path, default=None,
                        help="Export one summary row per document as CSV")
    parser.add_argument("--export-parquet", type=Path, default=None,
                        help="Export every extracted item as Parquet")
    parser.add_argument("--logs-dir", default=None,
                        help="Run log directory (default: logs/audit)")
    parser.add_argument("--no-progress", action="store_true",
                        help="Don't print progress lines")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="List every document with its score and issues")
    parser.add_argument("--list-formats", action="store_true",
                        help="Print the known scorecard layouts and exit")
    parser.add_argument("--history", type=int, metavar="N", default=None,
                        help="Print documents per format for the last N ledger runs and exit")
    return parser.parse_args(argv)


def _load_config(args: argparse.Namespace) -> AuditConfig:
    config = AuditConfig.load_json(args.config) if args.config else AuditConfig()
    if args.workers is not None:
        config.workers = args.workers
    if args.logs_dir:
        config.logs_dir = args.logs_dir
    return config


def _finalize(pl: PipelineLogger, exit_code: int) -> None:
    """Write run summary JSON and append to the cross-run ledger."""
    summary_path = pl.write_summary()
    ledger_path = append_to_ledger(pl, exit_code)
    print(f"\n  Run logs : {pl.run_dir}", flush=True)
    print(f"  Summary  : {summary_path}", flush=True)
    print(f"  Ledger   : {ledger_path}", flush=True)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.list_formats:
        print(describe_catalog())
        return 0
    try:
        config = _load_config(args)
    except (OSError, ValueError) as e:
        print(f"ERROR: cannot load config {args.config}: {e}")
        return 1

    if args.history is not None:
        print(format_history(read_ledger(Path(config.logs_dir) / LEDGER_FILENAME,
                                         last=args.history)))
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        force=True,
    )

    pl = PipelineLogger(logs_dir=config.logs_dir)
    pl.args_dict = {
        k: str(v) if isinstance(v, Path) else v
        for k, v in vars(args).items()
        if v is not None and v is not False
    }

    print("\nScorecard Format Audit")
    print(f"  Root     : {args.root}")
    print(f"  Workers  : {config.workers or 'auto'}")

    batch = ImportBatch(import_type="format_audit")
    batch.start(total_files=0)
    progress = SilentProgressTracker(0) if args.no_progress else TerminalProgressTracker(0)

    # ── scan ──────────────────────────────────────────────────────────────
    step = pl.start_step("scan")
    try:
        report = run(args.root, config=config, sink=batch, progress=progress)
    except FileNotFoundError as e:
        print(f"ERROR: {e}")
        batch.fail(str(e))
        pl.fail_step("scan", str(e))
        _finalize(pl, 1)
        return 1

    batch.total_files = report.documents_attempted
    for entry in report.scan_errors:
        step.record_scan_error(entry)
    for outcome in report.outcomes:
        step.record_outcome(outcome)
    pl.finish_step("scan", step)
    batch.complete()

    # ── report ────────────────────────────────────────────────────────────
    step = pl.start_step("report")
    text = render_report(report, verbose=args.verbose)
    print(text)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
        print(f"✓ Saved report to {args.output}")
    if args.export_json:
        export_json(report, args.export_json)
        print(f"✓ Exported JSON to {args.export_json}")
    if args.export_csv:
        export_csv(report, args.export_csv)
        print(f"✓ Exported CSV to {args.export_csv}")
    if args.export_parquet:
        rows = export_parquet(report, args.export_parquet)
        print(f"✓ Exported {rows:,} items to {args.export_parquet}")
    pl.finish_step("report", step)

    print(f"\n  Import batch {batch.batch_id}: {batch.status} "
          f"({batch.success_count} ok, {batch.failed_count} failed)")

    exit_code = 0
    _finalize(pl, exit_code)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
