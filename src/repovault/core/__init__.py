"""Core vault logic: discovery, link reconciliation and orchestration."""

from repovault.core.config import VaultSettings, load_settings
from repovault.core.discovery import find_git_repos, relative_mapping
from repovault.core.errors import (
    CloneFailed,
    ConfigurationMissing,
    InvalidLinkPath,
    LinkFailed,
    MalformedIdentifier,
    VaultError,
)
from repovault.core.git import GitClient
from repovault.core.links import LinkReconciler, select_linker
from repovault.core.orchestrator import VaultOrchestrator
from repovault.core.remote import parse_remote_url
from repovault.core.types import LinkOutcome, ParsedRemote

__all__ = [
    "CloneFailed",
    "ConfigurationMissing",
    "GitClient",
    "InvalidLinkPath",
    "LinkFailed",
    "LinkOutcome",
    "LinkReconciler",
    "MalformedIdentifier",
    "ParsedRemote",
    "VaultError",
    "VaultOrchestrator",
    "VaultSettings",
    "find_git_repos",
    "load_settings",
    "parse_remote_url",
    "relative_mapping",
    "select_linker",
]
