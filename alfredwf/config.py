"""Configuration for alfredwf.

Settings come from environment variables, falling back to the conventions of
a workflow repository checked out next to a standard Alfred installation.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_PREFS_PATH = "Library/Application Support/Alfred/prefs.json"
DEFAULT_DIST_DIR = "dist"
DEFAULT_RAW_DIR = "raw"
DEFAULT_INSTALLATION_LINK = "installation"
DEFAULT_PACKAGE_PREFIX = "alfred-workflows-"
DEFAULT_WORKFLOWS_DIR = "workflows"


class Config:
    """Environment backed settings."""

    def __init__(self, environ: Optional[dict[str, str]] = None):
        """Initialize configuration.

        Args:
            environ: Environment mapping to read, defaults to os.environ
        """
        self._environ = os.environ if environ is None else environ

    def _get(self, name: str, default: str) -> str:
        value = self._environ.get(name)
        if value is None or value == "":
            return default
        logger.debug(f"Using {name}={value!r} from environment")
        return value

    @property
    def prefs_path(self) -> Path:
        """Path of Alfred's prefs.json."""
        explicit = self._environ.get("ALFREDWF_PREFS_PATH")
        if explicit:
            return Path(explicit)
        home = self._environ.get("HOME")
        if home is None:
            raise ConfigError("Environment variable 'HOME' is not set")
        return Path(home) / DEFAULT_PREFS_PATH

    @property
    def dist_dir(self) -> str:
        """Name of the assembled workflow directory."""
        return self._get("ALFREDWF_DIST_DIR", DEFAULT_DIST_DIR)

    @property
    def raw_dir(self) -> str:
        """Name of the source-controlled raw files directory."""
        return self._get("ALFREDWF_RAW_DIR", DEFAULT_RAW_DIR)

    @property
    def installation_link(self) -> str:
        """Name of the symlink to the installed workflow."""
        return self._get("ALFREDWF_INSTALLATION_LINK", DEFAULT_INSTALLATION_LINK)

    @property
    def package_prefix(self) -> str:
        """Prefix for package.json names derived from a repository name."""
        return self._get("ALFREDWF_PACKAGE_PREFIX", DEFAULT_PACKAGE_PREFIX)

    @property
    def workflows_dir(self) -> str:
        """Repository subdirectory holding one directory per workflow."""
        return self._get("ALFREDWF_WORKFLOWS_DIR", DEFAULT_WORKFLOWS_DIR)


config = Config()
