"""Filesystem probing for sync operations."""

import asyncio
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class FileProbe:
    """What a sync needs to know about a single directory entry."""

    is_file: bool
    """True only for a regular file; symlinks, directories and devices are not"""

    mtime_ns: int
    """Last modification time in nanoseconds since the epoch"""

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "FileProbe":
        return cls(is_file=stat.S_ISREG(st.st_mode), mtime_ns=st.st_mtime_ns)


def probe(directory: Union[str, Path], name: str) -> Optional[FileProbe]:
    """Stat name in directory without following a final symlink.

    Args:
        directory: Directory to look in
        name: Bare file name

    Returns:
        FileProbe for the entry, or None if there is no such entry

    Raises:
        OSError: For any failure other than the entry not existing
    """
    try:
        st = os.lstat(Path(directory) / name)
    except FileNotFoundError:
        return None
    return FileProbe.from_stat(st)


async def probe_async(directory: Union[str, Path], name: str) -> Optional[FileProbe]:
    """Run probe on the default executor."""
    return await asyncio.to_thread(probe, directory, name)
