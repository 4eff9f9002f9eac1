"""Unit tests for environment backed configuration."""

from pathlib import Path

import pytest

from alfredwf.config import Config
from alfredwf.exceptions import ConfigError


class TestConfig:
    """Tests for Config."""

    def test_defaults(self):
        cfg = Config({"HOME": "/home/user"})

        assert cfg.prefs_path == Path(
            "/home/user/Library/Application Support/Alfred/prefs.json"
        )
        assert cfg.dist_dir == "dist"
        assert cfg.raw_dir == "raw"
        assert cfg.installation_link == "installation"
        assert cfg.package_prefix == "alfred-workflows-"
        assert cfg.workflows_dir == "workflows"

    def test_overrides(self):
        cfg = Config(
            {
                "ALFREDWF_PREFS_PATH": "/tmp/prefs.json",
                "ALFREDWF_DIST_DIR": "build",
                "ALFREDWF_RAW_DIR": "source",
                "ALFREDWF_INSTALLATION_LINK": "installed",
                "ALFREDWF_PACKAGE_PREFIX": "wf-",
                "ALFREDWF_WORKFLOWS_DIR": "wfs",
            }
        )

        assert cfg.prefs_path == Path("/tmp/prefs.json")
        assert cfg.dist_dir == "build"
        assert cfg.raw_dir == "source"
        assert cfg.installation_link == "installed"
        assert cfg.package_prefix == "wf-"
        assert cfg.workflows_dir == "wfs"

    def test_empty_value_uses_default(self):
        assert Config({"ALFREDWF_DIST_DIR": ""}).dist_dir == "dist"

    def test_missing_home(self):
        """Test that prefs_path needs HOME when not set explicitly."""
        with pytest.raises(ConfigError, match="HOME"):
            Config({}).prefs_path

    def test_explicit_prefs_does_not_need_home(self):
        cfg = Config({"ALFREDWF_PREFS_PATH": "prefs.json"})

        assert cfg.prefs_path == Path("prefs.json")
