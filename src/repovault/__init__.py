"""RepoVault - aggregate scattered git repositories into one linked vault tree."""

__version__ = "0.1.0"
