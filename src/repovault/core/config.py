"""Configuration management for RepoVault.

Settings come from the ``.env`` file in the vault root:

    SOURCES=C:\\path\\to\\repos,~/code   Comma-separated source roots (required)
    TEMPLATES=path/to/templates          Passed through, unused by the core
    ASSETS=path/to/assets                Passed through, unused by the core

Relative paths are resolved against the vault root.
"""

import logging
import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict

from repovault.core.errors import ConfigurationMissing

ENV_FILENAME = ".env"
ENV_KEYS = {
    "SOURCES": "C:\\path\\to\\repos",
    "TEMPLATES": "path/to/templates",
    "ASSETS": "path/to/assets",
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_env(key: str, default: str | None = None) -> str | None:
    """Get process environment variable with optional default."""
    return os.getenv(key, default)


class VaultSettings(BaseModel):
    """Frozen settings for one run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    vault_root: Path
    sources: tuple[Path, ...]
    templates: Path | None = None
    assets: Path | None = None

    @property
    def clone_root(self) -> Path:
        """Source root that new clones go into."""
        return self.sources[0]

    @property
    def env_file(self) -> Path:
        return self.vault_root / ENV_FILENAME


def _resolve(value: str, vault_root: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = vault_root / path
    return Path(os.path.normpath(path))


def parse_sources(raw: str | None, vault_root: Path) -> tuple[Path, ...]:
    """Split a comma-separated SOURCES value into resolved paths."""
    if not raw:
        return ()
    return tuple(
        _resolve(item.strip(), vault_root) for item in raw.split(",") if item.strip()
    )


def load_settings(vault_root: Path | str) -> VaultSettings:
    """
    Load settings from ``<vault_root>/.env``.

    Args:
        vault_root: Directory holding the vault and its .env file

    Returns:
        VaultSettings

    Raises:
        ConfigurationMissing: If .env is absent or SOURCES is empty.
    """
    root = Path(vault_root).expanduser().resolve()
    env_file = root / ENV_FILENAME
    if not env_file.is_file():
        raise ConfigurationMissing(
            f".env not found: {env_file}\n"
            "Copy .env.example to .env and adjust the paths."
        )

    values = dotenv_values(env_file)
    sources = parse_sources(values.get("SOURCES"), root)
    if not sources:
        raise ConfigurationMissing(f"SOURCES not defined in {env_file}.")

    templates = values.get("TEMPLATES")
    assets = values.get("ASSETS")
    return VaultSettings(
        vault_root=root,
        sources=sources,
        templates=_resolve(templates, root) if templates else None,
        assets=_resolve(assets, root) if assets else None,
    )


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure and return logger."""
    level = level or get_env("LOG_LEVEL", "WARNING") or "WARNING"
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, level.upper(), logging.WARNING),
    )
    return logging.getLogger(__name__)
