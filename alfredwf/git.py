"""Git queries used to make sure destructive operations are reversible."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .process import ProcessBuilder
from .utils import split_bytes_on

logger = logging.getLogger(__name__)

DIFF_OPTIONS = ("--name-only", "--relative")


async def git(*args: str) -> bytes:
    """Run git with the given arguments and return its stdout."""
    return await ProcessBuilder("git", *args).run()


async def git_cz(directory: Union[str, Path], command: str, *args: str) -> list[str]:
    """Run a git command in directory with ``-z`` and return the file names.

    Paths after ``--`` are matched literally, so names containing glob
    characters only ever match themselves.

    Args:
        directory: Directory passed to ``git -C``
        command: Git subcommand
        *args: Further arguments, following ``-z``

    Returns:
        NUL separated names from stdout, decoded strictly as UTF-8
    """
    out = await git(
        "--literal-pathspecs", "-C", str(directory), command, "-z", *args
    )
    return split_bytes_on(out, 0)


async def git_update_index(directory: Union[str, Path]) -> None:
    """Refresh the git index.

    Diff commands consult the index, and copies that preserve timestamps can
    leave its stat information stale. The status output is not needed.
    """
    await git("-C", str(directory), "update-index", "-q", "--refresh")


@dataclass
class GitStatus:
    """Files that are not safely committed, by category."""

    staged: list[str] = field(default_factory=list)
    """Files with changes staged against HEAD"""

    unstaged: list[str] = field(default_factory=list)
    """Files modified in the working tree but not staged"""

    untracked: list[str] = field(default_factory=list)
    """Files git does not track and does not ignore"""

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked)

    def by_kind(self) -> list[tuple[str, list[str]]]:
        """Categories in reporting order, as (kind, files) pairs."""
        return [
            ("staged", self.staged),
            ("unstaged", self.unstaged),
            ("untracked", self.untracked),
        ]

    def all_files(self) -> list[str]:
        """Sorted distinct files across every category."""
        return sorted({name for _, files in self.by_kind() for name in files})


async def git_status(directory: Union[str, Path], files: Iterable[str]) -> GitStatus:
    """Report which of files in directory are staged, unstaged or untracked.

    The three queries run concurrently, each scoped with ``--`` to files.
    Callers must not pass an empty list of files, since git then reports on
    the whole tree.

    Args:
        directory: Directory inside a git work tree
        files: Names relative to directory

    Returns:
        GitStatus with the offending names in each category
    """
    names = list(files)
    if not names:
        raise ValueError("git_status requires at least one file")

    await git_update_index(directory)
    staged, unstaged, untracked = await asyncio.gather(
        git_cz(
            directory, "diff-index", *DIFF_OPTIONS, "--cached", "HEAD", "--", *names
        ),
        git_cz(directory, "diff-files", *DIFF_OPTIONS, "--", *names),
        git_cz(
            directory, "ls-files", "--others", "--exclude-standard", "--", *names
        ),
    )
    status = GitStatus(staged=staged, unstaged=unstaged, untracked=untracked)
    logger.debug(f"git status in {directory}: {status}")
    return status
