"""Shared test fixtures and configuration."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from repovault.core.config import VaultSettings
from repovault.core.git import GitClient
from repovault.core.links import LinkReconciler, SymlinkLinker
from repovault.core.types import GitResult


@pytest.fixture
def vault_root(tmp_path):
    """Provide an empty vault directory."""
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
def source_root(tmp_path):
    """Provide an empty source directory."""
    path = tmp_path / "sources"
    path.mkdir()
    return path


@pytest.fixture
def make_repo():
    """Factory that creates a fake git working copy below a root."""

    def _make_repo(root: Path, relative: str) -> Path:
        repo = root / relative
        (repo / ".git").mkdir(parents=True)
        return repo

    return _make_repo


@pytest.fixture
def settings(vault_root, source_root):
    """Settings with one source root."""
    return VaultSettings(vault_root=vault_root, sources=(source_root,))


@pytest.fixture
def mock_git():
    """Git collaborator stub; clone creates a fake working copy."""
    git = MagicMock(spec=GitClient)
    git.synchronize.return_value = GitResult(ok=True, output="Already up to date.")

    def _clone(url: str, destination: Path) -> GitResult:
        (Path(destination) / ".git").mkdir(parents=True)
        return GitResult(ok=True, output=f"Cloning into '{destination}'...")

    git.clone.side_effect = _clone
    return git


@pytest.fixture
def reconciler():
    """Reconciler using real symlinks."""
    return LinkReconciler(SymlinkLinker())


@pytest.fixture
def progress():
    """Collects progress lines."""
    return []


@pytest.fixture
def write_env(vault_root):
    """Factory that writes a .env file into the vault root."""

    def _write_env(content: str) -> Path:
        env_file = vault_root / ".env"
        env_file.write_text(content)
        return env_file

    return _write_env
