"""Regenerate the commits cache from GitHub and the curation overlay.

The cache document (commits-cache.json) maps project slug to that
project's latest commits. A refresh rebuilds the whole document: each
syncing project gets a fresh entry, and projects that no longer sync
drop out. The only state carried forward is the per-commit ``hidden``
flag, through :class:`~portfolio_engine.commits.curation.CurationStore`.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator

import yaml

from portfolio_engine import store
from portfolio_engine.commits.curation import CurationStore
from portfolio_engine.commits.models import (
    CacheEntry,
    CommitRecord,
    cache_from_dict,
    cache_to_dict,
    now_iso,
)
from portfolio_engine.errors import InvalidRepoReference, NetworkError
from portfolio_engine.github.repo_ref import parse_repo_ref
from portfolio_engine.paths import commits_cache_path
from portfolio_engine.project.config import config_path_for, load_project_config
from portfolio_engine.registry.query import ProjectDescriptor

logger = logging.getLogger(__name__)

# One lock per cache file, shared by every store instance in the process
_LOCKS: dict[Path, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = path.resolve()
    with _LOCKS_GUARD:
        return _LOCKS.setdefault(key, threading.RLock())


class CommitsCacheStore:
    """Single-writer handle on commits-cache.json.

    Reads and writes of the same file are serialised through one lock, and
    each save replaces the document atomically.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else commits_cache_path()
        self._lock = _lock_for(self.path)

    @contextmanager
    def transaction(self) -> Iterator[dict[str, CacheEntry]]:
        """Hold the write lock across a read-modify-write cycle.

        Yields the current cache; callers write it back with :meth:`save`.
        """
        with self._lock:
            yield self.load()

    def load(self) -> dict[str, CacheEntry]:
        """Return the cached entries; a missing or unreadable document is empty."""
        with self._lock:
            try:
                data = store.read_json(self.path)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("Ignoring unreadable commits cache %s: %s", self.path, e)
                return {}
            if not isinstance(data, dict):
                if data is not None:
                    logger.warning("Ignoring commits cache %s: not a JSON object", self.path)
                return {}
            return cache_from_dict(data)

    def save(self, cache: dict[str, CacheEntry]) -> None:
        """Replace the whole document with ``cache``."""
        with self._lock:
            store.write_json(self.path, cache_to_dict(cache))


@dataclass
class RefreshResult:
    """Outcome of a batch refresh."""

    cache: dict[str, CacheEntry] = field(default_factory=dict)
    refreshed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        return (
            f"{len(self.refreshed)} refreshed, {len(self.skipped)} skipped, "
            f"{len(self.failures)} failed"
        )


def _unique_by_sha(commits: Iterable[CommitRecord]) -> list[CommitRecord]:
    seen: set[str] = set()
    unique = []
    for commit in commits:
        if commit.sha in seen:
            continue
        seen.add(commit.sha)
        unique.append(commit)
    return unique


def refresh_commits(
    projects: Iterable[ProjectDescriptor],
    existing_cache: dict[str, CacheEntry],
    client,
    content: Path | None = None,
    now: Callable[[], str] = now_iso,
) -> RefreshResult:
    """Build a new cache for ``projects``, one project at a time.

    A project is skipped without complaint when it has no config or its
    config names no repo. An unparseable repo, an unreadable config, or a
    failed API call is recorded in ``failures`` and the batch moves on.

    Args:
        projects: Projects to refresh, in order.
        existing_cache: The previous cache; only its hidden flags are used.
        client: Anything with ``list_commits(ref, limit)``, usually a
            :class:`~portfolio_engine.github.client.GitHubClient`.
        content: Content tree the config paths resolve against.
        now: Timestamp source for ``lastFetched``.

    Returns:
        RefreshResult holding the new cache and the per-project outcome.
    """
    result = RefreshResult()

    for project in projects:
        slug = project.slug
        config_file = config_path_for(project, content)
        try:
            config = load_project_config(config_file)
        except (ValueError, yaml.YAMLError) as e:
            logger.warning("%s: unreadable config %s: %s", slug, config_file, e)
            result.failures[slug] = f"Unreadable config {config_file}: {e}"
            continue

        if config is None or not config.repo:
            logger.info("%s: no repo configured, skipping", slug)
            result.skipped.append(slug)
            continue

        try:
            ref = parse_repo_ref(config.repo)
            logger.info("%s: fetching up to %d commits from %s", slug, config.limit, ref)
            fetched = client.list_commits(ref, config.limit)
        except (InvalidRepoReference, NetworkError) as e:
            logger.warning("%s: %s", slug, e)
            result.failures[slug] = str(e)
            continue

        overlay = CurationStore.for_project(config, existing_cache.get(slug))
        commits = overlay.apply(_unique_by_sha(fetched)[: config.limit])
        result.cache[slug] = CacheEntry(repo=config.repo, last_fetched=now(), commits=commits)
        result.refreshed.append(slug)

    logger.info("Commit refresh finished: %s", result.summary())
    return result


def refresh_cache(
    projects: Iterable[ProjectDescriptor],
    client,
    cache_store: CommitsCacheStore | None = None,
    content: Path | None = None,
) -> RefreshResult:
    """Refresh every project and persist the new cache in one write."""
    cache_store = cache_store or CommitsCacheStore()
    with cache_store.transaction() as existing:
        result = refresh_commits(projects, existing, client, content=content)
        cache_store.save(result.cache)
    return result
