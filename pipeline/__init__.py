"""
Pipeline package -- run bookkeeping around a scorecard audit.

Re-exports key entry points so callers can do::

    from pipeline import PipelineLogger, ImportBatch, append_to_ledger
"""

from pipeline.logging import PipelineLogger, StepReport, SkipRecord
from pipeline.run_ledger import append_to_ledger, read_ledger
from pipeline.import_batch import ImportBatch, BATCH_STATUSES

__all__ = [
    "PipelineLogger",
    "StepReport",
    "SkipRecord",
    "append_to_ledger",
    "read_ledger",
    "ImportBatch",
    "BATCH_STATUSES",
]
