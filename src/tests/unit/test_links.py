"""Tests for directory link creation and reconciliation."""

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

import repovault.core.links as links
from repovault.core.links import (
    JunctionLinker,
    LinkReconciler,
    SymlinkLinker,
    select_linker,
)
from repovault.core.types import LinkOutcome


@pytest.fixture
def target(source_root, make_repo):
    """A repository to link to."""
    return make_repo(source_root, "group/project")


@pytest.fixture
def mock_subprocess_run(monkeypatch):
    """Stub subprocess.run used by the junction linker."""
    mock_run = MagicMock()
    monkeypatch.setattr(links.subprocess, "run", mock_run)
    return mock_run


class TestSelectLinker:
    """Tests for platform linker selection."""

    def test_windows_uses_junctions(self):
        """win32 selects junctions."""
        assert isinstance(select_linker("win32"), JunctionLinker)

    @pytest.mark.parametrize("platform", ["linux", "darwin", "freebsd14"])
    def test_other_platforms_use_symlinks(self, platform):
        """Everything else selects symlinks."""
        assert isinstance(select_linker(platform), SymlinkLinker)

    def test_kinds(self):
        """Linkers name their primitive for user messages."""
        assert select_linker("win32").kind == "junction"
        assert select_linker("linux").kind == "symlink"


class TestLinkReconcilerEnsure:
    """Tests for LinkReconciler.ensure with real symlinks."""

    def test_creates_link_and_parents(self, reconciler, vault_root, target):
        """Missing parents are created and the link resolves to the target."""
        link = vault_root / "group" / "project"

        outcome = reconciler.ensure(link, target)

        assert outcome is LinkOutcome.CREATED
        assert link.is_symlink()
        assert link.resolve() == target.resolve()
        assert (link / ".git").is_dir()

    def test_second_call_is_noop(self, reconciler, vault_root, target):
        """Reconciling twice reports created, then already-present."""
        link = vault_root / "project"

        assert reconciler.ensure(link, target) is LinkOutcome.CREATED
        assert reconciler.ensure(link, target) is LinkOutcome.ALREADY_PRESENT
        assert link.resolve() == target.resolve()

    def test_existing_entry_is_not_touched(self, vault_root, target):
        """An existing entry is reported present and the linker is never called."""
        link = vault_root / "project"
        link.mkdir()
        marker = link / "keep.txt"
        marker.write_text("original")
        mtime = link.stat().st_mtime_ns
        linker = MagicMock(spec=SymlinkLinker)
        linker.kind = "symlink"

        outcome = LinkReconciler(linker).ensure(link, target)

        assert outcome is LinkOutcome.ALREADY_PRESENT
        linker.create.assert_not_called()
        assert not link.is_symlink()
        assert marker.read_text() == "original"
        assert link.stat().st_mtime_ns == mtime

    def test_existing_non_link_logs_warning(self, reconciler, vault_root, target, caplog):
        """A plain directory at the link path is flagged in the log."""
        link = vault_root / "project"
        link.mkdir()

        reconciler.ensure(link, target)

        assert "not a directory link" in caplog.text

    def test_dangling_link_counts_as_present(self, reconciler, vault_root, tmp_path):
        """A broken link is an existing entry, not a missing one."""
        link = vault_root / "stale"
        os.symlink(tmp_path / "gone", link, target_is_directory=True)

        assert reconciler.ensure(link, tmp_path / "gone") is LinkOutcome.ALREADY_PRESENT

    def test_failure_reports_failed(self, vault_root, target):
        """An OSError from the linker becomes a failed outcome."""
        linker = MagicMock(spec=SymlinkLinker)
        linker.kind = "symlink"
        linker.create.side_effect = PermissionError("denied")

        outcome = LinkReconciler(linker).ensure(vault_root / "project", target)

        assert outcome is LinkOutcome.FAILED

    def test_parent_creation_failure_reports_failed(self, reconciler, vault_root, target):
        """A file blocking the parent directory yields failed, not an exception."""
        (vault_root / "group").write_text("not a directory")

        outcome = reconciler.ensure(vault_root / "group" / "project", target)

        assert outcome is LinkOutcome.FAILED


class TestLinkReconcilerExists:
    """Tests for LinkReconciler.exists."""

    def test_missing(self, reconciler, vault_root):
        """Nothing at the path."""
        assert reconciler.exists(vault_root / "nope") is False

    def test_present(self, reconciler, vault_root, target):
        """A created link exists."""
        link = vault_root / "project"
        reconciler.ensure(link, target)

        assert reconciler.exists(link) is True


class TestJunctionLinker:
    """Tests for the Windows junction linker."""

    def test_runs_mklink_with_argument_vector(self, mock_subprocess_run):
        """mklink /J is invoked without a shell string."""
        mock_subprocess_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        link = Path("C:/vault/group/project")
        target = Path("C:/src/group/project")

        JunctionLinker().create(link, target)

        args, kwargs = mock_subprocess_run.call_args
        assert args[0] == ["cmd", "/c", "mklink", "/J", str(link), str(target)]
        assert "shell" not in kwargs

    def test_nonzero_exit_raises_oserror(self, mock_subprocess_run):
        """A failing mklink surfaces as OSError."""
        mock_subprocess_run.return_value = MagicMock(
            returncode=1, stdout="", stderr="Access is denied."
        )

        with pytest.raises(OSError, match="Access is denied"):
            JunctionLinker().create(Path("C:/vault/x"), Path("C:/src/x"))

    def test_reconciler_reports_junction_failure(self, mock_subprocess_run, vault_root, target):
        """The reconciler turns a failing mklink into a failed outcome."""
        mock_subprocess_run.return_value = MagicMock(returncode=1, stdout="", stderr="boom")

        outcome = LinkReconciler(JunctionLinker()).ensure(vault_root / "x", target)

        assert outcome is LinkOutcome.FAILED

    def test_manual_command(self):
        """Recovery instructions use mklink /J."""
        command = JunctionLinker().manual_command(Path("C:/vault/p"), Path("C:/src/p"))

        assert command.startswith("mklink /J ")


class TestSymlinkLinker:
    """Tests for the symlink linker."""

    def test_manual_command(self):
        """Recovery instructions use ln -s with target first."""
        command = SymlinkLinker().manual_command(Path("/vault/p"), Path("/src/p"))

        assert command == 'ln -s "/src/p" "/vault/p"'
