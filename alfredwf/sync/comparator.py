"""File comparison logic for sync operations."""

from collections.abc import Collection
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .probe import FileProbe


class SyncComparison(Enum):
    """How the source and target entries for one name relate."""

    SOURCE_NOT_A_FILE = "source_not_a_file"
    """Source exists but is a symlink, directory or other non regular file"""

    TARGET_NOT_A_FILE = "target_not_a_file"
    """Target exists but is a symlink, directory or other non regular file"""

    SOURCE_ABSENT = "source_absent"
    """Source has no entry (target may or may not)"""

    TARGET_ABSENT = "target_absent"
    """Source is a file and target has no entry"""

    SOURCE_NEWER = "source_newer"
    """Both are files and source was modified later"""

    TARGET_NEWER = "target_newer"
    """Both are files and target was modified later"""

    SAME_TIMESTAMP = "same_timestamp"
    """Both are files with identical modification times"""


class SyncAction(str, Enum):
    """Actions that can be taken during sync."""

    NONE = "none"
    """Nothing to do"""

    COPY = "copy"
    """Copy source file over target"""

    DELETE = "delete"
    """Delete target file"""

    FAIL = "fail"
    """Sync must not proceed for this file"""


@dataclass(frozen=True)
class SyncOutcome:
    """The decision for one file name."""

    name: str
    """File name, relative to both directories"""

    action: SyncAction
    """Action to take"""

    reason: Optional[str] = None
    """Human-readable explanation, present exactly when action is FAIL"""

    def __post_init__(self) -> None:
        if self.action is SyncAction.FAIL:
            if not self.reason:
                raise ValueError(f"{self.name}: FAIL requires a non-empty reason")
        elif self.reason is not None:
            raise ValueError(f"{self.name}: reason is only given for FAIL")


def compare(
    source: Optional[FileProbe], target: Optional[FileProbe]
) -> SyncComparison:
    """Compare two probes for the same name.

    Checks run in a fixed order and the first match wins. Entries that are
    not plain files are reported before anything about presence or
    timestamps, so timestamp logic never resolves a type mismatch.

    Args:
        source: Probe of the source entry, None if absent
        target: Probe of the target entry, None if absent

    Returns:
        The comparison result
    """
    if source is not None and not source.is_file:
        return SyncComparison.SOURCE_NOT_A_FILE
    if target is not None and not target.is_file:
        return SyncComparison.TARGET_NOT_A_FILE
    if source is None:
        return SyncComparison.SOURCE_ABSENT
    if target is None:
        return SyncComparison.TARGET_ABSENT
    if source.mtime_ns > target.mtime_ns:
        return SyncComparison.SOURCE_NEWER
    if source.mtime_ns < target.mtime_ns:
        return SyncComparison.TARGET_NEWER
    return SyncComparison.SAME_TIMESTAMP


class FileComparator:
    """Turns probes of a source and a target directory into sync outcomes."""

    def __init__(
        self,
        source: Union[str, Path],
        target: Union[str, Path],
        ignores: Collection[str] = frozenset(),
    ):
        """Initialize file comparator.

        Args:
            source: Directory whose content is authoritative
            target: Directory to bring into line with source
            ignores: Names that may be missing from target without a copy,
                because another stage produces them
        """
        self.source = str(source)
        self.target = str(target)
        self.ignores = ignores

    def outcome(
        self,
        name: str,
        source_probe: Optional[FileProbe],
        target_probe: Optional[FileProbe],
    ) -> SyncOutcome:
        """Decide what to do with one name.

        Args:
            name: File name present in at least one listing
            source_probe: Probe of name in the source directory
            target_probe: Probe of name in the target directory

        Returns:
            SyncOutcome for name
        """
        comparison = compare(source_probe, target_probe)

        if comparison is SyncComparison.SOURCE_NOT_A_FILE:
            return SyncOutcome(
                name, SyncAction.FAIL, f"{self.source}/{name} is not a plain file"
            )
        if comparison is SyncComparison.TARGET_NOT_A_FILE:
            return SyncOutcome(
                name, SyncAction.FAIL, f"{self.target}/{name} is not a plain file"
            )
        if comparison is SyncComparison.SOURCE_ABSENT:
            # Also reached when target is absent too; deleting nothing is harmless
            return SyncOutcome(name, SyncAction.DELETE)
        if comparison is SyncComparison.TARGET_ABSENT:
            if name in self.ignores:
                return SyncOutcome(name, SyncAction.NONE)
            return SyncOutcome(name, SyncAction.COPY)
        if comparison is SyncComparison.SOURCE_NEWER:
            return SyncOutcome(name, SyncAction.COPY)
        if comparison is SyncComparison.TARGET_NEWER:
            return SyncOutcome(
                name,
                SyncAction.FAIL,
                f"{self.target}/{name} is newer than {self.source}/{name}",
            )
        return SyncOutcome(name, SyncAction.NONE)
