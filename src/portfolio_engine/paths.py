"""Vault path resolution.

Resolves canonical paths to portfolio data sources. Uses environment
variables when available, falls back to conventional defaults.

Environment variables:
    PORTFOLIO_VAULT_DIR — vault root (default: current directory)
    PORTFOLIO_CONTENT_DIR — content tree (default: <vault>/app/public/content)
    PORTFOLIO_DATA_DIR — generated data (default: <vault>/app/public/_data)
    PORTFOLIO_GIT_TIMEOUT — seconds allowed per git invocation (default: 120)
"""

from __future__ import annotations

import os
from pathlib import Path

_DEFAULT_CONTENT_SUBPATH = "app/public/content"
_DEFAULT_DATA_SUBPATH = "app/public/_data"
_DEFAULT_GIT_TIMEOUT = 120.0


def vault_root() -> Path:
    """Return the vault root directory."""
    return Path(os.environ.get("PORTFOLIO_VAULT_DIR", str(Path.cwd())))


def content_dir(vault: Path | str | None = None) -> Path:
    """Return the content tree holding manifest.json and projects/."""
    env = os.environ.get("PORTFOLIO_CONTENT_DIR")
    if env and vault is None:
        return Path(env)
    return Path(vault or vault_root()) / _DEFAULT_CONTENT_SUBPATH


def data_dir(vault: Path | str | None = None) -> Path:
    """Return the generated-data directory."""
    env = os.environ.get("PORTFOLIO_DATA_DIR")
    if env and vault is None:
        return Path(env)
    return Path(vault or vault_root()) / _DEFAULT_DATA_SUBPATH


def manifest_path(vault: Path | str | None = None) -> Path:
    """Return the path to manifest.json."""
    return content_dir(vault) / "manifest.json"


def commits_cache_path(vault: Path | str | None = None) -> Path:
    """Return the path to commits-cache.json."""
    return data_dir(vault) / "commits-cache.json"


def git_timeout() -> float:
    """Seconds a single working-tree command may run before it is killed."""
    raw = os.environ.get("PORTFOLIO_GIT_TIMEOUT")
    if not raw:
        return _DEFAULT_GIT_TIMEOUT
    return float(raw)


def github_token() -> str | None:
    """Return the GitHub API token, if one is configured."""
    return os.environ.get("GITHUB_TOKEN") or None
