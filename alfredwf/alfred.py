"""Utilities for finding workflows in the Alfred installation."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .config import config
from .exceptions import ConfigError, ReportableError
from .info_plist import InfoPlist, read_info_plist

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstalledWorkflow:
    """A workflow directory found in the Alfred preferences."""

    target: Path
    """Directory Alfred installed the workflow in"""

    info_plist: InfoPlist
    """Metadata read from the directory"""


def current_workflows_root(prefs_path: Union[str, Path]) -> Path:
    """Find the workflows directory from Alfred's prefs.json.

    Args:
        prefs_path: Path of prefs.json

    Returns:
        The ``workflows`` directory under the ``current`` preferences path

    Raises:
        ConfigError: If prefs.json cannot be read or has no usable ``current``
    """
    try:
        text = Path(prefs_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {prefs_path}", cause=e) from e
    try:
        prefs = json.loads(text)
    except ValueError as e:
        raise ConfigError(f"Failed to parse JSON from {prefs_path}", cause=e) from e
    if not isinstance(prefs, dict):
        raise ConfigError(
            f"Cannot parse {prefs_path} to a JSON object, "
            f"found {type(prefs).__name__}"
        )
    current = prefs.get("current")
    if current is None:
        raise ConfigError(f'Failed to parse "current" from {prefs_path}')
    if not isinstance(current, str):
        raise ConfigError(
            f"Property 'current' from {prefs_path} was "
            f"{type(current).__name__} != string as expected"
        )
    return Path(current) / "workflows"


def list_workflows(
    workflows_root: Union[str, Path],
) -> tuple[list[InstalledWorkflow], list[str]]:
    """Read every workflow under workflows_root.

    Workflows that cannot be read are skipped with a warning rather than
    failing the whole listing.

    Returns:
        Tuple of (workflows, warnings), workflows sorted by directory name
    """
    workflows: list[InstalledWorkflow] = []
    warnings: list[str] = []
    for target in sorted(Path(workflows_root).iterdir()):
        try:
            workflows.append(InstalledWorkflow(target, read_info_plist(target)))
        except ReportableError as e:
            logger.debug(f"Skipping {target}: {e}")
            warnings.append(f"ignoring corrupted workflow: {e}")
    return workflows, warnings


def list_current_workflows(
    prefs_path: Optional[Union[str, Path]] = None,
) -> tuple[list[InstalledWorkflow], list[str]]:
    """List the workflows of the current Alfred installation."""
    root = current_workflows_root(prefs_path or config.prefs_path)
    return list_workflows(root)
