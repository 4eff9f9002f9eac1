"""Two-directory, timestamp based sync for alfredwf."""

from .comparator import (
    FileComparator,
    SyncAction,
    SyncComparison,
    SyncOutcome,
    compare,
)
from .engine import run_sync_outcomes, sync_outcomes
from .gate import SyncPlan, uncommitted_details, verify_committed
from .operations import SyncOperations, apply_outcomes
from .probe import FileProbe, probe, probe_async

__all__ = [
    "FileComparator",
    "FileProbe",
    "SyncAction",
    "SyncComparison",
    "SyncOperations",
    "SyncOutcome",
    "SyncPlan",
    "apply_outcomes",
    "compare",
    "probe",
    "probe_async",
    "run_sync_outcomes",
    "sync_outcomes",
    "uncommitted_details",
    "verify_committed",
]
