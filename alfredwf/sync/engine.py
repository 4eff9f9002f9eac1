"""Core sync engine for computing sync outcomes."""

import asyncio
import logging
from collections.abc import Collection, Iterable
from pathlib import Path
from typing import Union

from .comparator import FileComparator, SyncOutcome
from .probe import probe_async

logger = logging.getLogger(__name__)


async def sync_outcomes(
    source: Union[str, Path],
    target: Union[str, Path],
    names: Iterable[str],
    ignores: Collection[str] = frozenset(),
) -> list[SyncOutcome]:
    """Decide how to bring each name in target into line with source.

    Every name is probed in both directories concurrently and classified.
    The returned outcomes are positional: outcome i is for names[i],
    whatever order the probes finish in. Nothing is modified.

    Args:
        source: Directory whose content is authoritative
        target: Directory to bring into line with source
        names: Flat file names to check, usually the union of both listings
        ignores: Names that may be missing from target without a copy

    Returns:
        One SyncOutcome per name, in input order

    Raises:
        OSError: If any probe fails other than by the entry being absent

    Examples:
        >>> outcomes = await sync_outcomes("dist", "installation", ["info.plist"])
        >>> outcomes[0].action
        <SyncAction.COPY: 'copy'>
    """
    comparator = FileComparator(source, target, ignores)

    async def outcome_for(name: str) -> SyncOutcome:
        source_probe, target_probe = await asyncio.gather(
            probe_async(source, name), probe_async(target, name)
        )
        outcome = comparator.outcome(name, source_probe, target_probe)
        logger.debug(f"{source} -> {target}: {name}: {outcome.action.value}")
        return outcome

    return list(await asyncio.gather(*(outcome_for(name) for name in names)))


def run_sync_outcomes(
    source: Union[str, Path],
    target: Union[str, Path],
    names: Iterable[str],
    ignores: Collection[str] = frozenset(),
) -> list[SyncOutcome]:
    """Blocking wrapper around sync_outcomes for callers without a loop."""
    return asyncio.run(sync_outcomes(source, target, names, ignores))
