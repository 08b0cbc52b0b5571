"""Directory link creation and reconciliation.

Windows gets NTFS junctions (no elevation needed); every other platform gets
directory symlinks. The linker is picked once with ``select_linker`` and the
rest of the code only sees the ``DirectoryLinker`` interface.
"""

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Protocol

from repovault.core.types import LinkOutcome

logger = logging.getLogger(__name__)


class DirectoryLinker(Protocol):
    """Platform capability for creating a directory link."""

    kind: str

    def create(self, link_path: Path, target: Path) -> None:
        """Create ``link_path`` pointing at ``target``. Raises OSError on failure."""
        ...

    def manual_command(self, link_path: Path, target: Path) -> str:
        """Shell command a user can run to create the link by hand."""
        ...


class SymlinkLinker:
    """Directory symlinks for POSIX platforms."""

    kind = "symlink"

    def create(self, link_path: Path, target: Path) -> None:
        os.symlink(target, link_path, target_is_directory=True)

    def manual_command(self, link_path: Path, target: Path) -> str:
        return f'ln -s "{target}" "{link_path}"'


class JunctionLinker:
    """NTFS junctions created through ``mklink /J``."""

    kind = "junction"

    def create(self, link_path: Path, target: Path) -> None:
        # mklink is a cmd.exe builtin; arguments still go through as a vector
        result = subprocess.run(
            ["cmd", "/c", "mklink", "/J", str(link_path), str(target)],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise OSError(
                result.returncode,
                (result.stderr or result.stdout).strip() or "mklink failed",
                str(link_path),
            )

    def manual_command(self, link_path: Path, target: Path) -> str:
        return f'mklink /J "{link_path}" "{target}"'


def select_linker(platform: str | None = None) -> DirectoryLinker:
    """
    Pick the link primitive for a platform.

    Args:
        platform: ``sys.platform`` value (defaults to the running platform)

    Returns:
        JunctionLinker on Windows, SymlinkLinker elsewhere
    """
    platform = platform or sys.platform
    if platform == "win32":
        return JunctionLinker()
    return SymlinkLinker()


def is_directory_link(path: Path) -> bool:
    """Check whether a path is a symlink or junction (without following it)."""
    return path.is_symlink() or path.is_junction()


class LinkReconciler:
    """Ensures a directory link exists, creating it only when absent."""

    def __init__(self, linker: DirectoryLinker | None = None):
        """
        Initialize reconciler.

        Args:
            linker: Link primitive (defaults to the running platform's)
        """
        self.linker = linker or select_linker()

    @property
    def kind(self) -> str:
        return self.linker.kind

    def exists(self, link_path: Path) -> bool:
        """Check for any entry at the link path, including dangling links."""
        return os.path.lexists(link_path)

    def ensure(self, link_path: Path, target: Path) -> LinkOutcome:
        """
        Make sure ``link_path`` exists, creating a link to ``target`` if not.

        An existing entry of any kind counts as present and is left alone.

        Returns:
            LinkOutcome.ALREADY_PRESENT, CREATED or FAILED
        """
        link_path = Path(link_path)
        if self.exists(link_path):
            if not is_directory_link(link_path):
                logger.warning(f"{link_path} exists but is not a directory link")
            return LinkOutcome.ALREADY_PRESENT

        try:
            link_path.parent.mkdir(parents=True, exist_ok=True)
            self.linker.create(link_path, Path(target))
        except OSError as e:
            logger.warning(f"Could not create {self.kind} {link_path} -> {target}: {e}")
            return LinkOutcome.FAILED

        logger.debug(f"Created {self.kind} {link_path} -> {target}")
        return LinkOutcome.CREATED

    def manual_command(self, link_path: Path, target: Path) -> str:
        return self.linker.manual_command(link_path, target)
