"""Errors raised by the vault core.

Per-repository problems (a failed pull, an unreadable directory, a link that
could not be created during pull) are reported through return values, not
exceptions. Only conditions that abort the whole command are raised here.
"""

from pathlib import Path


class VaultError(Exception):
    """Base class for fatal vault errors."""

    pass


class ConfigurationMissing(VaultError):
    """Raised when the .env file or a required key is absent."""

    pass


class MalformedIdentifier(VaultError):
    """Raised when a remote URL matches neither the SSH nor the HTTP(S) shape."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Cannot parse URL: {url}\n"
            "Expected: git@host:path.git or https://host/path.git"
        )


class CloneFailed(VaultError):
    """Raised when a fresh clone fails during add."""

    def __init__(self, url: str, destination: Path, output: str = ""):
        self.url = url
        self.destination = destination
        self.output = output
        message = f"Clone failed: {url} -> {destination}"
        if output:
            message += f"\n{output}"
        super().__init__(message)


class LinkFailed(VaultError):
    """Raised when a directory link cannot be created during add."""

    def __init__(self, link_path: Path, target: Path, kind: str, manual_command: str):
        self.link_path = link_path
        self.target = target
        self.kind = kind
        self.manual_command = manual_command
        super().__init__(
            f"{kind} failed! Create manually:\n  {manual_command}"
        )


class InvalidLinkPath(VaultError):
    """Raised when a requested link path would land outside the vault root."""

    def __init__(self, link_path: str, vault_root: Path):
        self.link_path = link_path
        self.vault_root = vault_root
        super().__init__(
            f"Link path must be relative and inside the vault: {link_path}\n"
            f"Vault root: {vault_root}"
        )
