"""alfredwf - tools for keeping source-controlled Alfred workflows in sync."""

from .exceptions import (
    AlfredWfError,
    ConfigError,
    InfoPlistCorruptError,
    InfoPlistFieldError,
    InfoPlistMissingError,
    NotASymlinkError,
    ProcessError,
    ReportableError,
    SyncFailedError,
    UncommittedChangesError,
    WorkflowDirMissingError,
)
from .info_plist import InfoPlist, read_info_plist
from .sync import SyncAction, SyncOutcome, sync_outcomes
from .workflow import WorkflowLayout

__all__ = [
    "AlfredWfError",
    "ConfigError",
    "InfoPlist",
    "InfoPlistCorruptError",
    "InfoPlistFieldError",
    "InfoPlistMissingError",
    "NotASymlinkError",
    "ProcessError",
    "ReportableError",
    "SyncAction",
    "SyncFailedError",
    "SyncOutcome",
    "UncommittedChangesError",
    "WorkflowDirMissingError",
    "WorkflowLayout",
    "read_info_plist",
    "sync_outcomes",
]
