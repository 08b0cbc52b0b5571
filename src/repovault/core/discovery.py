"""Repository discovery under a source root.

The walk stops at the first directory that holds a ``.git`` marker, so a
repository is never searched for nested repositories. Hidden directories and
``node_modules`` are skipped, as are directory symlinks and junctions.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

GIT_MARKER = ".git"
EXCLUDED_DIRS = frozenset({"node_modules"})


def is_git_repo(path: Path) -> bool:
    """Check whether a directory has a git marker as a direct child."""
    return (path / GIT_MARKER).exists()


def _should_descend(entry: os.DirEntry) -> bool:
    if entry.name.startswith(".") or entry.name in EXCLUDED_DIRS:
        return False
    try:
        return entry.is_dir(follow_symlinks=False) and not entry.is_junction()
    except OSError:
        return False


def find_git_repos(root: Path | str) -> list[Path]:
    """
    Recursively find all git repositories below a root directory.

    Args:
        root: Directory to search. A missing directory yields no results.

    Returns:
        Absolute paths of repository roots, including ``root`` itself when
        it is a repository. No result is an ancestor of another.
    """
    root = Path(root).expanduser().absolute()
    repos: list[Path] = []
    if not root.is_dir():
        logger.debug(f"Source root does not exist: {root}")
        return repos

    def walk(directory: Path) -> None:
        if is_git_repo(directory):
            repos.append(directory)
            return

        try:
            with os.scandir(directory) as it:
                children = sorted(
                    (entry for entry in it if _should_descend(entry)),
                    key=lambda entry: entry.name,
                )
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            return

        for entry in children:
            walk(directory / entry.name)

    walk(root)
    return repos


def relative_mapping(source_root: Path, repo_path: Path) -> Path:
    """
    Get a repository's path relative to the source root it was found under.

    The same relative path is used for its link under the vault root.
    """
    return Path(os.path.relpath(repo_path, source_root))
