"""Vault orchestration: pull-all, add-one and status-report.

The orchestrator composes discovery, link reconciliation and the git
collaborator. Per-repository failures are collected into the returned
summaries; only add-one raises, and only for problems that leave nothing to
link.
"""

import logging
import os
from pathlib import Path

from repovault.core.config import VaultSettings
from repovault.core.discovery import find_git_repos, relative_mapping
from repovault.core.errors import CloneFailed, InvalidLinkPath, LinkFailed
from repovault.core.git import GitClient
from repovault.core.links import LinkReconciler
from repovault.core.remote import parse_remote_url
from repovault.core.types import (
    AddResult,
    LinkOutcome,
    OnProgress,
    PullSummary,
    RepoLink,
    StatusReport,
)

logger = logging.getLogger(__name__)

GITIGNORE_FILENAME = ".gitignore"


def _silent(message: str) -> None:
    pass


class VaultOrchestrator:
    """Runs the user-facing vault operations against one set of settings."""

    def __init__(
        self,
        settings: VaultSettings,
        git: GitClient | None = None,
        reconciler: LinkReconciler | None = None,
        on_progress: OnProgress | None = None,
    ):
        """
        Initialize orchestrator.

        Args:
            settings: Frozen settings for this run
            git: Git collaborator (defaults to the ``git`` executable)
            reconciler: Link reconciler (defaults to the platform linker)
            on_progress: Receives one human-readable line per step
        """
        self.settings = settings
        self.git = git or GitClient()
        self.reconciler = reconciler or LinkReconciler()
        self.on_progress = on_progress or _silent

    @property
    def link_kind(self) -> str:
        return self.reconciler.kind

    def discover(self) -> list[RepoLink]:
        """Discover repositories under every source root, in configuration order."""
        found = []
        for source_root in self.settings.sources:
            for repo_path in find_git_repos(source_root):
                relative = relative_mapping(source_root, repo_path)
                found.append(
                    RepoLink(
                        source_root=source_root,
                        repo_path=repo_path,
                        relative=relative,
                        link_path=self.settings.vault_root / relative,
                    )
                )
        logger.debug(f"Discovered {len(found)} repositories")
        return found

    def ignore_link(self, link_path: Path) -> bool:
        """
        Add a link's vault-relative path to the vault's .gitignore.

        Entries are written without a trailing slash: git sees a symlink as a
        file, and ``dir/`` patterns only match real directories. Entries
        already listed in either form are left alone. Problems reading or
        writing the file are logged and never abort the caller.

        Returns:
            True if the entry was appended, False if it was already listed,
            the link does not live below the vault root, or the file could
            not be updated
        """
        vault_root = self.settings.vault_root
        try:
            relative = Path(link_path).relative_to(vault_root)
        except ValueError:
            return False
        if relative == Path("."):
            return False

        entry = f"/{relative.as_posix()}"
        gitignore = vault_root / GITIGNORE_FILENAME
        try:
            text = gitignore.read_text(encoding="utf-8") if gitignore.exists() else ""
            listed = {line.strip() for line in text.splitlines()}
            if entry in listed or f"{entry}/" in listed:
                return False

            prefix = "\n" if text and not text.endswith("\n") else ""
            with open(gitignore, "a", encoding="utf-8") as f:
                f.write(f"{prefix}{entry}\n")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not add {entry} to {gitignore}: {e}")
            return False

        logger.debug(f"Added {entry} to {gitignore}")
        return True

    def _link_path(self, relative: str) -> Path:
        """Join a user-supplied relative path onto the vault root, refusing escapes."""
        vault_root = self.settings.vault_root
        candidate = Path(relative)
        if candidate.is_absolute() or candidate.anchor:
            raise InvalidLinkPath(relative, vault_root)
        link_path = Path(os.path.normpath(vault_root / candidate))
        if link_path == vault_root or vault_root not in link_path.parents:
            raise InvalidLinkPath(relative, vault_root)
        return link_path

    def pull_all(self) -> PullSummary:
        """
        Pull the vault and every discovered repository, linking each one.

        Never aborts on a single repository's failure.
        """
        vault_root = self.settings.vault_root
        self.on_progress("=== Pulling vault ===")
        vault_result = self.git.synchronize(vault_root)
        if not vault_result.ok:
            logger.info(f"Vault pull failed: {vault_result.output}")
            self.on_progress(f"  Vault pull failed. {vault_result.summary}".rstrip())

        repos = self.discover()
        if not repos:
            sources = ", ".join(str(s) for s in self.settings.sources)
            self.on_progress(f"No repos found under: {sources}")
            return PullSummary(vault_synced=vault_result.ok)

        created = 0
        sync_failures: list[Path] = []
        link_failures: list[Path] = []
        for repo in repos:
            status = []
            result = self.git.synchronize(repo.repo_path)
            if not result.ok:
                logger.info(f"Pull failed for {repo.repo_path}: {result.output}")
                sync_failures.append(repo.repo_path)
                status.append("pull failed")
            else:
                status.append(result.summary or "pulled")

            outcome = self.reconciler.ensure(repo.link_path, repo.repo_path)
            if outcome is LinkOutcome.CREATED:
                created += 1
                status.append(f"{self.link_kind} created")
            elif outcome is LinkOutcome.FAILED:
                link_failures.append(repo.link_path)
                status.append(f"{self.link_kind} failed")

            if outcome is not LinkOutcome.FAILED:
                self.ignore_link(repo.link_path)

            self.on_progress(f"  {repo.relative.as_posix()} ... {', '.join(status)}")

        return PullSummary(
            processed=len(repos),
            created=created,
            sync_failures=sync_failures,
            link_failures=link_failures,
            vault_synced=vault_result.ok,
        )

    def add_one(self, url: str, link_override: str | None = None) -> AddResult:
        """
        Clone (or pull) a remote repository and link it into the vault.

        Args:
            url: SSH or HTTP(S) remote URL
            link_override: Vault-relative link path instead of the project path

        Raises:
            MalformedIdentifier: If the URL cannot be parsed.
            InvalidLinkPath: If the link path is absolute or leaves the vault.
            CloneFailed: If a fresh clone fails.
            LinkFailed: If the link cannot be created.
        """
        remote = parse_remote_url(url)
        # Single-segment URLs (git@host:org.git) fall back to the organization
        project_path = remote.project_path or remote.organization
        clone_path = self.settings.clone_root / project_path
        link_path = self._link_path(link_override or project_path)
        link_relative = link_path.relative_to(self.settings.vault_root)

        self.on_progress(f"  Git URL:     {url}")
        self.on_progress(f"  Project:     {project_path}")
        self.on_progress(f"  Clone to:    {clone_path}")
        self.on_progress(f"  Vault link:  {link_relative.as_posix()}")

        cloned = False
        if clone_path.exists():
            self.on_progress("Repo exists, pulling...")
            result = self.git.synchronize(clone_path)
            if not result.ok:
                logger.info(f"Pull failed for {clone_path}: {result.output}")
                self.on_progress(f"Pull failed. {result.summary}".rstrip())
        else:
            self.on_progress("Cloning...")
            try:
                clone_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise CloneFailed(url, clone_path, str(e)) from e
            result = self.git.clone(url, clone_path)
            if not result.ok:
                raise CloneFailed(url, clone_path, result.output)
            cloned = True

        outcome = self.reconciler.ensure(link_path, clone_path)
        if outcome is LinkOutcome.FAILED:
            raise LinkFailed(
                link_path,
                clone_path,
                self.link_kind,
                self.reconciler.manual_command(link_path, clone_path),
            )

        if outcome is LinkOutcome.CREATED:
            self.on_progress(f"{self.link_kind} created.")
        else:
            self.on_progress(f"{self.link_kind} already exists.")
        self.ignore_link(link_path)

        return AddResult(
            url=url,
            remote=remote,
            clone_path=clone_path,
            link_path=link_path,
            cloned=cloned,
            outcome=outcome,
        )

    def status_report(self) -> StatusReport:
        """Report which discovered repositories have a vault link. Read-only."""
        entries = [
            RepoLink(
                source_root=repo.source_root,
                repo_path=repo.repo_path,
                relative=repo.relative,
                link_path=repo.link_path,
                linked=self.reconciler.exists(repo.link_path),
            )
            for repo in self.discover()
        ]
        return StatusReport(sources=self.settings.sources, entries=entries)
