"""Git collaborator.

Only two operations are needed: pull an existing working copy and clone a new
one. Commands are always passed as argument vectors, never through a shell.
"""

import logging
import shutil
import subprocess
from pathlib import Path

from repovault.core.types import GitResult

logger = logging.getLogger(__name__)


class GitClient:
    """Runs git as an external process."""

    def __init__(self, executable: str = "git", stream: bool = True):
        """
        Initialize git client.

        Args:
            executable: git binary name or path
            stream: Pass git's stdout straight through to the terminal.
                stderr is always captured for diagnostics.
        """
        self.executable = executable
        self.stream = stream

    def _run(self, *args: str) -> GitResult:
        command = [self.executable, *args]
        logger.debug(f"Running: {command}")
        try:
            result = subprocess.run(
                command,
                stdout=None if self.stream else subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
            )
        except OSError as e:
            logger.debug(f"git could not be started: {e}")
            return GitResult(ok=False, output=str(e))

        output = "\n".join(
            part.strip() for part in (result.stdout, result.stderr) if part and part.strip()
        )
        logger.debug(f"git exited {result.returncode}: {output[:200] or 'no output'}")
        return GitResult(ok=result.returncode == 0, output=output)

    def is_available(self) -> bool:
        """Check that the git executable is on PATH."""
        return shutil.which(self.executable) is not None

    def synchronize(self, working_copy: Path) -> GitResult:
        """Pull the latest changes into an existing working copy."""
        return self._run("-C", str(working_copy), "pull")

    def clone(self, url: str, destination: Path) -> GitResult:
        """Clone ``url`` into ``destination``."""
        return self._run("clone", "--", url, str(destination))
