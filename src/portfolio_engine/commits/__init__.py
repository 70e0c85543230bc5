"""Commits module — cache refresh and the curation overlay."""

from portfolio_engine.commits.cache import (
    CommitsCacheStore,
    RefreshResult,
    refresh_cache,
    refresh_commits,
)
from portfolio_engine.commits.curation import CurationStore, curated_commits, set_hidden
from portfolio_engine.commits.models import CacheEntry, CommitRecord

__all__ = [
    "CommitsCacheStore",
    "RefreshResult",
    "refresh_cache",
    "refresh_commits",
    "CurationStore",
    "curated_commits",
    "set_hidden",
    "CacheEntry",
    "CommitRecord",
]
