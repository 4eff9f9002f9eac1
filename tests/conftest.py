"""Shared fixtures for alfredwf tests."""

import json
import plistlib
import subprocess

import pytest


@pytest.fixture
def make_info_plist():
    """Provide a function that writes an info.plist into a directory."""

    def make(directory, **fields):
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "info.plist"
        with open(path, "wb") as f:
            plistlib.dump(fields, f)
        return path

    return make


@pytest.fixture
def make_prefs(tmp_path):
    """Provide a function that writes an Alfred prefs.json.

    The returned function creates the workflows directory it points at and
    returns (prefs_path, workflows_root).
    """

    def make():
        current = tmp_path / "Alfred.alfredpreferences"
        workflows_root = current / "workflows"
        workflows_root.mkdir(parents=True)
        prefs_path = tmp_path / "prefs.json"
        prefs_path.write_text(json.dumps({"current": str(current)}))
        return prefs_path, workflows_root

    return make


@pytest.fixture
def run_git():
    """Provide a function that runs git in a directory with a fixed identity."""

    def run(cwd, *args):
        subprocess.run(
            ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
            cwd=cwd,
            check=True,
            capture_output=True,
        )

    return run
