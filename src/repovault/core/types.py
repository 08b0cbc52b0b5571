"""Shared types and data structures for RepoVault."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Protocol


class OnProgress(Protocol):
    """Callback signature for per-item status lines."""

    def __call__(self, message: str) -> None:
        pass


class LinkOutcome(StrEnum):
    """Result of reconciling one directory link."""

    ALREADY_PRESENT = "exists"
    CREATED = "created"
    FAILED = "failed"


@dataclass(frozen=True)
class ParsedRemote:
    """Organization and project path extracted from a remote URL."""

    organization: str
    project_path: str


@dataclass(frozen=True)
class GitResult:
    """Outcome of a single git invocation."""

    ok: bool
    output: str = ""

    @property
    def summary(self) -> str:
        """Last non-empty line of output, for one-line status reporting."""
        lines = [line for line in self.output.splitlines() if line.strip()]
        return lines[-1].strip() if lines else ""


@dataclass(frozen=True)
class RepoLink:
    """A discovered repository and where its vault link lives."""

    source_root: Path
    repo_path: Path
    relative: Path
    link_path: Path
    linked: bool = False


@dataclass(frozen=True)
class PullSummary:
    """Counts reported at the end of pull-all."""

    processed: int = 0
    created: int = 0
    sync_failures: list[Path] = field(default_factory=list)
    link_failures: list[Path] = field(default_factory=list)
    vault_synced: bool = True


@dataclass(frozen=True)
class AddResult:
    """Everything add-one decided and did."""

    url: str
    remote: ParsedRemote
    clone_path: Path
    link_path: Path
    cloned: bool
    outcome: LinkOutcome


@dataclass(frozen=True)
class StatusReport:
    """Read-only view of which discovered repositories are linked."""

    sources: tuple[Path, ...]
    entries: list[RepoLink] = field(default_factory=list)

    @property
    def linked(self) -> int:
        return sum(1 for entry in self.entries if entry.linked)

    @property
    def missing(self) -> int:
        return len(self.entries) - self.linked

    @property
    def total(self) -> int:
        return len(self.entries)
