"""Tests for the sync engine and filesystem probe."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from alfredwf.sync import (
    FileProbe,
    SyncAction,
    SyncOutcome,
    probe,
    run_sync_outcomes,
    sync_outcomes,
)

SECOND = 1_000_000_000


def make_file(directory: Path, name: str, mtime_s: int, content: str = "x") -> Path:
    """Create a file with an exact modification time."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(content)
    os.utime(path, ns=(mtime_s * SECOND, mtime_s * SECOND))
    return path


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def target(tmp_path):
    path = tmp_path / "target"
    path.mkdir()
    return path


class TestProbe:
    """Tests for probe()."""

    def test_absent(self, source):
        assert probe(source, "missing.txt") is None

    def test_missing_directory_is_absent(self, tmp_path):
        assert probe(tmp_path / "nowhere", "a.txt") is None

    def test_file(self, source):
        make_file(source, "a.txt", 100)

        assert probe(source, "a.txt") == FileProbe(is_file=True, mtime_ns=100 * SECOND)

    def test_directory_is_not_a_file(self, source):
        (source / "sub").mkdir()

        result = probe(source, "sub")

        assert result is not None
        assert result.is_file is False

    def test_symlink_to_file_is_not_a_file(self, source):
        make_file(source, "real.txt", 100)
        os.symlink(source / "real.txt", source / "link")

        result = probe(source, "link")

        assert result is not None
        assert result.is_file is False

    def test_dangling_symlink_is_present(self, source):
        os.symlink(source / "nothing", source / "dangling")

        result = probe(source, "dangling")

        assert result is not None
        assert result.is_file is False

    def test_other_errors_propagate(self, source):
        with patch(
            "alfredwf.sync.probe.os.lstat", side_effect=PermissionError("denied")
        ):
            with pytest.raises(PermissionError):
                probe(source, "a.txt")


class TestSyncOutcomes:
    """End to end tests for sync_outcomes against real directories."""

    @pytest.mark.asyncio
    async def test_same_timestamp(self, source, target):
        make_file(source, "a.txt", 100)
        make_file(target, "a.txt", 100)

        outcomes = await sync_outcomes(source, target, ["a.txt"])

        assert outcomes == [SyncOutcome("a.txt", SyncAction.NONE)]

    @pytest.mark.asyncio
    async def test_source_newer(self, source, target):
        make_file(source, "a.txt", 200)
        make_file(target, "a.txt", 100)

        outcomes = await sync_outcomes(source, target, ["a.txt"])

        assert outcomes == [SyncOutcome("a.txt", SyncAction.COPY)]

    @pytest.mark.asyncio
    async def test_target_newer(self, source, target):
        make_file(source, "a.txt", 100)
        make_file(target, "a.txt", 200)

        [outcome] = await sync_outcomes(source, target, ["a.txt"])

        assert outcome.name == "a.txt"
        assert outcome.action == SyncAction.FAIL
        assert "newer" in outcome.reason

    @pytest.mark.asyncio
    async def test_source_missing(self, source, target):
        make_file(target, "b.txt", 100)

        outcomes = await sync_outcomes(source, target, ["b.txt"])

        assert outcomes == [SyncOutcome("b.txt", SyncAction.DELETE)]

    @pytest.mark.asyncio
    async def test_both_missing_ignored_is_delete(self, source, target):
        """Absent on both sides is DELETE even when ignored."""
        outcomes = await sync_outcomes(source, target, ["c.txt"], {"c.txt"})

        assert outcomes == [SyncOutcome("c.txt", SyncAction.DELETE)]

    @pytest.mark.asyncio
    async def test_target_missing_ignored(self, source, target):
        make_file(source, "c.txt", 100)

        outcomes = await sync_outcomes(source, target, ["c.txt"], {"c.txt"})

        assert outcomes == [SyncOutcome("c.txt", SyncAction.NONE)]

    @pytest.mark.asyncio
    async def test_target_missing_not_ignored(self, source, target):
        make_file(source, "c.txt", 100)

        outcomes = await sync_outcomes(source, target, ["c.txt"])

        assert outcomes == [SyncOutcome("c.txt", SyncAction.COPY)]

    @pytest.mark.parametrize("side", ["source", "target"])
    @pytest.mark.asyncio
    async def test_symlink_always_fails(self, source, target, side):
        """A symlink on either side fails whatever the other side holds."""
        link_dir = source if side == "source" else target
        other_dir = target if side == "source" else source
        make_file(link_dir, "real.txt", 100)
        os.symlink(link_dir / "real.txt", link_dir / "link")
        make_file(other_dir, "link", 200)

        [outcome] = await sync_outcomes(source, target, ["link"])

        assert outcome.action == SyncAction.FAIL
        assert outcome.reason == f"{link_dir}/link is not a plain file"

    @pytest.mark.asyncio
    async def test_symlink_fails_when_other_side_absent(self, source, target):
        make_file(target, "real.txt", 100)
        os.symlink(target / "real.txt", target / "link")

        [outcome] = await sync_outcomes(source, target, ["link"])

        assert outcome.action == SyncAction.FAIL

    @pytest.mark.asyncio
    async def test_order_and_cardinality_preserved(self, source, target):
        names = ["z.txt", "a.txt", "m.txt", "link", "gone.txt"]
        make_file(source, "z.txt", 300)
        make_file(target, "z.txt", 100)
        make_file(source, "a.txt", 100)
        make_file(source, "m.txt", 100)
        make_file(target, "m.txt", 100)
        (source / "link").mkdir()
        make_file(target, "gone.txt", 100)

        outcomes = await sync_outcomes(source, target, names)

        assert [o.name for o in outcomes] == names
        assert [o.action for o in outcomes] == [
            SyncAction.COPY,
            SyncAction.COPY,
            SyncAction.NONE,
            SyncAction.FAIL,
            SyncAction.DELETE,
        ]

    @pytest.mark.asyncio
    async def test_reason_only_for_failures(self, source, target):
        make_file(source, "a.txt", 100)
        make_file(target, "b.txt", 200)
        make_file(source, "b.txt", 100)
        (target / "dir").mkdir()

        outcomes = await sync_outcomes(source, target, ["a.txt", "b.txt", "dir"])

        for outcome in outcomes:
            if outcome.action == SyncAction.FAIL:
                assert outcome.reason
            else:
                assert outcome.reason is None

    @pytest.mark.asyncio
    async def test_empty_names(self, source, target):
        assert await sync_outcomes(source, target, []) == []

    @pytest.mark.asyncio
    async def test_probe_error_fails_whole_call(self, source, target):
        make_file(source, "a.txt", 100)

        with patch(
            "alfredwf.sync.probe.os.lstat", side_effect=PermissionError("denied")
        ):
            with pytest.raises(PermissionError):
                await sync_outcomes(source, target, ["a.txt", "b.txt"])

    def test_blocking_wrapper(self, source, target):
        make_file(source, "a.txt", 100)

        outcomes = run_sync_outcomes(str(source), str(target), ["a.txt"])

        assert outcomes == [SyncOutcome("a.txt", SyncAction.COPY)]
