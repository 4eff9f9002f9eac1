"""Sync operations that apply outcomes to the filesystem."""

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Optional, Union

from .comparator import SyncAction, SyncOutcome

logger = logging.getLogger(__name__)


def copy_file(source: Path, target: Path) -> None:
    """Copy a file, preserving its mode and timestamps."""
    shutil.copy2(source, target, follow_symlinks=False)


def delete_file(target: Path) -> None:
    """Delete a file, doing nothing if it is already gone."""
    try:
        os.remove(target)
    except FileNotFoundError:
        logger.debug(f"{target} already absent, nothing to delete")


class SyncOperations:
    """Applies COPY and DELETE outcomes from a source to a target directory."""

    def __init__(self, source: Union[str, Path], target: Union[str, Path]):
        """Initialize sync operations.

        Args:
            source: Directory files are copied from
            target: Directory files are copied to or deleted from
        """
        self.source = Path(source)
        self.target = Path(target)

    async def apply(self, outcome: SyncOutcome) -> str:
        """Apply a single outcome.

        Args:
            outcome: COPY or DELETE outcome

        Returns:
            Message describing what was done

        Raises:
            ValueError: If the outcome is not a COPY or DELETE
            OSError: If the copy or delete fails
        """
        target = self.target / outcome.name
        if outcome.action is SyncAction.COPY:
            source = self.source / outcome.name
            await asyncio.to_thread(copy_file, source, target)
            return f"{target} updated from {source}"
        if outcome.action is SyncAction.DELETE:
            await asyncio.to_thread(delete_file, target)
            return f"{target} deleted"
        raise ValueError(
            f"Internal error: unexpected {outcome.action.name} syncing {target}"
        )

    async def apply_all(
        self,
        outcomes: list[SyncOutcome],
        on_applied: Optional[Callable[[str], None]] = None,
    ) -> list[str]:
        """Apply outcomes concurrently, waiting for all of them.

        Args:
            outcomes: COPY and DELETE outcomes
            on_applied: Optional callback with each message as it completes

        Returns:
            Messages in the order of outcomes
        """

        async def run(outcome: SyncOutcome) -> str:
            message = await self.apply(outcome)
            logger.debug(message)
            if on_applied is not None:
                on_applied(message)
            return message

        results = await asyncio.gather(
            *(run(o) for o in outcomes), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return [str(result) for result in results]


async def apply_outcomes(
    source: Union[str, Path],
    target: Union[str, Path],
    outcomes: list[SyncOutcome],
    on_applied: Optional[Callable[[str], None]] = None,
) -> list[str]:
    """Apply COPY and DELETE outcomes from source to target.

    Any failure propagates; nothing is retried or skipped.
    """
    return await SyncOperations(source, target).apply_all(outcomes, on_applied)
