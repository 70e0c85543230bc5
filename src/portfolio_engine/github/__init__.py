"""GitHub module — repo references, the REST client, and README sync."""

from portfolio_engine.github.repo_ref import RepoRef, parse_repo_ref

__all__ = [
    "RepoRef",
    "parse_repo_ref",
]
