"""Checks that must pass before sync outcomes are applied.

Applying a sync overwrites and deletes files. The gate refuses when any
outcome failed, and when any file about to be changed in the target is not
safely committed to git, so every change can be inspected and reverted with
git afterwards.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from ..exceptions import SyncFailedError, UncommittedChangesError
from ..git import GitStatus, git_status
from .comparator import SyncAction, SyncOutcome

logger = logging.getLogger(__name__)


@dataclass
class SyncPlan:
    """Sync outcomes partitioned by what they require."""

    failures: list[SyncOutcome] = field(default_factory=list)
    """Outcomes with action FAIL"""

    changes: list[SyncOutcome] = field(default_factory=list)
    """Outcomes with action COPY or DELETE"""

    unchanged: list[SyncOutcome] = field(default_factory=list)
    """Outcomes with action NONE"""

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[SyncOutcome]) -> "SyncPlan":
        """Partition outcomes, preserving their order within each part."""
        plan = cls()
        for outcome in outcomes:
            if outcome.action is SyncAction.FAIL:
                plan.failures.append(outcome)
            elif outcome.action is SyncAction.NONE:
                plan.unchanged.append(outcome)
            else:
                plan.changes.append(outcome)
        return plan

    @property
    def copies(self) -> list[SyncOutcome]:
        return [o for o in self.changes if o.action is SyncAction.COPY]

    @property
    def deletes(self) -> list[SyncOutcome]:
        return [o for o in self.changes if o.action is SyncAction.DELETE]

    def raise_for_failures(self, message: str, description: str = "") -> None:
        """Raise if any outcome failed, listing every failure.

        Args:
            message: Leading line of the report, the failure count is appended
            description: Optional description of the sync, such as "a -> b"

        Raises:
            SyncFailedError: If there is at least one failure
        """
        if not self.failures:
            return
        raise SyncFailedError(
            f"{message}, {len(self.failures)} problems with sync"
            f"{' ' + description if description else ''}:",
            [f"  {o.name}: {o.reason}" for o in self.failures],
        )


def uncommitted_details(
    status: GitStatus, changes: Iterable[SyncOutcome]
) -> list[str]:
    """Describe blocking files by category and by the action they would get."""
    actions = {o.name: o.action for o in changes}
    details: list[str] = []
    for kind, files in status.by_kind():
        if files:
            details.append(f"Following {len(files)} files are {kind} in git:")
            details.extend(f"  {name}" for name in files)
    details.append("and so cannot perform actions:")
    for name in status.all_files():
        action = actions.get(name)
        details.append(f"  {name}: {action.name if action is not None else '???'}")
    return details


async def verify_committed(
    directory: Union[str, Path],
    changes: list[SyncOutcome],
    message: str = "Cannot sync",
) -> None:
    """Make sure every file changes would touch in directory is committed.

    Args:
        directory: The directory about to be overwritten or deleted from
        changes: COPY and DELETE outcomes for directory
        message: Leading line of the report when blocked

    Raises:
        UncommittedChangesError: If any changed file is staged, unstaged or
            untracked in git
    """
    if not changes:
        # git would report on every file if given no paths
        return

    status = await git_status(directory, [o.name for o in changes])
    if status.is_clean:
        logger.debug(f"All {len(changes)} changed files in {directory} are committed")
        return
    raise UncommittedChangesError(
        message, uncommitted_details(status, changes), status
    )
