"""Reading and updating the Alfred workflow info.plist."""

import json
import logging
import os
import plistlib
import re
import stat
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional, Union

from .exceptions import (
    InfoPlistCorruptError,
    InfoPlistFieldError,
    InfoPlistMissingError,
    NotASymlinkError,
    ReportableError,
    WorkflowDirMissingError,
)

logger = logging.getLogger(__name__)

INFO_PLIST = "info.plist"

_NON_WORD = re.compile(r"[^\w]")


@dataclass(frozen=True)
class InfoPlist:
    """The fields of interest in an Alfred workflow info.plist."""

    bundleid: str
    """Bundle identifier, unique per workflow"""

    name: str
    """Display name of the workflow"""

    createdby: Optional[str] = None
    """Author"""

    description: Optional[str] = None
    """One line description"""

    version: Optional[str] = None
    """Version string, usually major.minor.patch"""

    def repository_name(self) -> str:
        """The directory name used for this workflow in a repository."""
        return _NON_WORD.sub("-", self.name).lower()

    def export_name(self) -> str:
        """The installable workflow file name, safe for a download URL path."""
        return _NON_WORD.sub("_", self.name) + ".alfredworkflow"

    def describe(self) -> str:
        return json.dumps({k: v for k, v in asdict(self).items() if v is not None})


def verify_symlink(path: Union[str, Path], st: os.stat_result) -> None:
    """Raise NotASymlinkError unless st, from lstat of path, is a symlink."""
    if not stat.S_ISLNK(st.st_mode):
        raise NotASymlinkError(path, st.st_mode)


def _string_field(data: dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if isinstance(value, str):
        return value
    return None


def parse_info_plist(info_plist_path: Union[str, Path]) -> dict[str, Any]:
    """Load info.plist into a dictionary.

    Raises:
        InfoPlistCorruptError: If the file cannot be read or is not a property
            list dictionary
    """
    try:
        with open(info_plist_path, "rb") as f:
            data = plistlib.load(f)
    except Exception as e:
        # plistlib raises assorted types for bad content, e.g. AttributeError
        # for a malformed <date>
        raise InfoPlistCorruptError(info_plist_path, e) from e
    if not isinstance(data, dict):
        raise InfoPlistCorruptError(
            info_plist_path, ValueError(f"top level is {type(data).__name__}")
        )
    return data


def read_info_plist(
    workflow_dir: Union[str, Path], require_symlink: bool = False
) -> InfoPlist:
    """Read the info.plist of a workflow directory.

    Each way this can fail raises its own ReportableError subclass, so
    callers can tolerate some failures and report the rest.

    Args:
        workflow_dir: Directory containing info.plist
        require_symlink: Also require workflow_dir itself to be a symlink

    Returns:
        InfoPlist for the workflow

    Raises:
        WorkflowDirMissingError: workflow_dir does not exist
        NotASymlinkError: require_symlink is set and workflow_dir is not one
        InfoPlistMissingError: workflow_dir has no info.plist
        InfoPlistCorruptError: info.plist cannot be parsed
        InfoPlistFieldError: bundleid or name is missing
    """
    workflow_dir = Path(workflow_dir)
    try:
        dir_stat = os.lstat(workflow_dir)
    except FileNotFoundError:
        raise WorkflowDirMissingError(workflow_dir) from None
    if require_symlink:
        verify_symlink(workflow_dir, dir_stat)

    info_plist_path = workflow_dir / INFO_PLIST
    if not os.path.lexists(info_plist_path):
        raise InfoPlistMissingError(info_plist_path)

    data = parse_info_plist(info_plist_path)
    bundleid = _string_field(data, "bundleid")
    if bundleid is None:
        raise InfoPlistFieldError(info_plist_path, "bundleid")
    name = _string_field(data, "name")
    if name is None:
        raise InfoPlistFieldError(info_plist_path, "name")
    return InfoPlist(
        bundleid=bundleid,
        name=name,
        createdby=_string_field(data, "createdby"),
        description=_string_field(data, "description"),
        version=_string_field(data, "version"),
    )


def bump_patch_version(version: str) -> str:
    """Increment the patch component of a dotted version.

    Missing minor or patch components count as 0, so "1" becomes "1.0.1".

    Raises:
        ValueError: If the version has more than three components or the
            components are not numbers
    """
    parts = version.split(".")
    if len(parts) > 3 or not all(part.isdigit() for part in parts):
        raise ValueError(f"Cannot bump version '{version}'")
    while len(parts) < 3:
        parts.append("0")
    parts[2] = str(int(parts[2]) + 1)
    return ".".join(parts)


def upversion_info_plist(info_plist_path: Union[str, Path]) -> str:
    """Bump the patch version in an info.plist in place.

    Args:
        info_plist_path: Path to info.plist

    Returns:
        The new version

    Raises:
        ReportableError: If there is no version to bump
    """
    data = parse_info_plist(info_plist_path)
    version = _string_field(data, "version")
    if version is None:
        raise InfoPlistFieldError(info_plist_path, "version")
    try:
        new_version = bump_patch_version(version)
    except ValueError as e:
        raise ReportableError(str(e)) from e
    data["version"] = new_version
    with open(info_plist_path, "wb") as f:
        plistlib.dump(data, f, sort_keys=False)
    logger.debug(f"{info_plist_path}: version {version} -> {new_version}")
    return new_version
