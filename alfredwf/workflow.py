"""The on-disk layout of a source-controlled Alfred workflow."""

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .config import Config, config
from .exceptions import ReportableError
from .info_plist import InfoPlist, read_info_plist
from .utils import PREFS_PLIST, help_sh_command


@dataclass(frozen=True)
class WorkflowLayout:
    """Paths of one workflow directory."""

    root: Path
    """Workflow directory"""

    dist_name: str = "dist"
    raw_name: str = "raw"
    installation_name: str = "installation"

    @classmethod
    def from_config(
        cls, root: Union[str, Path], cfg: Optional[Config] = None
    ) -> "WorkflowLayout":
        cfg = cfg or config
        return cls(
            root=Path(root),
            dist_name=cfg.dist_dir,
            raw_name=cfg.raw_dir,
            installation_name=cfg.installation_link,
        )

    @property
    def dist(self) -> Path:
        return self.root / self.dist_name

    @property
    def raw(self) -> Path:
        return self.root / self.raw_name

    @property
    def installation(self) -> Path:
        return self.root / self.installation_name

    @property
    def scripts(self) -> Path:
        return self.root / "src" / "scripts"

    @property
    def package_json(self) -> Path:
        return self.root / "package.json"

    def dist_filenames(self) -> list[str]:
        return _listdir(self.dist)

    def raw_filenames(self) -> list[str]:
        return _listdir(self.raw)

    def installation_filenames(self) -> list[str]:
        # prefs.plist is per user configuration, never part of the workflow
        return [name for name in _listdir(self.installation) if name != PREFS_PLIST]

    def help(self, command: str, extra: Iterable[str] = ()) -> str:
        """Shell line that runs an alfredwf command in this workflow."""
        return help_sh_command(self.root, command, extra)


def _listdir(directory: Path) -> list[str]:
    """Sorted names in directory.

    Raises:
        ReportableError: If directory does not exist
    """
    try:
        return sorted(os.listdir(directory))
    except FileNotFoundError as e:
        raise ReportableError(f"No directory at '{directory}'", cause=e) from e


def verify_bundleid(
    this_dir: Union[str, Path], this_info_plist: InfoPlist, that_dir: Union[str, Path]
) -> InfoPlist:
    """Check that that_dir holds the same workflow as this_dir.

    Returns:
        The InfoPlist read from that_dir

    Raises:
        ReportableError: If that_dir cannot be read or the bundleids differ
    """
    that_info_plist = read_info_plist(that_dir)
    if this_info_plist.bundleid != that_info_plist.bundleid:
        raise ReportableError(
            f"{this_dir} bundleid {this_info_plist.bundleid} != "
            f"{that_dir} bundleid {that_info_plist.bundleid}"
        )
    return that_info_plist


def package_name(repository_name: str, cfg: Optional[Config] = None) -> str:
    """The package.json name for a workflow repository directory."""
    return f"{(cfg or config).package_prefix}{repository_name}"
