"""Curation overlay — which cached commits are hidden from public display.

Two sources decide it: the ``hidden`` flags carried in the project's
previous cache entry, and the ``hiddenCommits`` list in its config.yaml.
A commit is hidden when either source says so. :class:`CurationStore` is
the one place that union is computed; both the refresh path and the
display path go through it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from portfolio_engine.commits.models import CacheEntry, CommitRecord
from portfolio_engine.errors import InvalidRepoReference, MissingConfig
from portfolio_engine.github.repo_ref import parse_repo_ref
from portfolio_engine.project.config import (
    ProjectConfig,
    config_path_for,
    load_project_config,
    save_project_config,
)
from portfolio_engine.registry.query import ProjectDescriptor

logger = logging.getLogger(__name__)


def same_repo(a: str, b: str) -> bool:
    """Whether two repo references point at the same owner/name."""
    try:
        return parse_repo_ref(a) == parse_repo_ref(b)
    except InvalidRepoReference:
        return a.strip() == b.strip()


class CurationStore:
    """Resolve a commit's hidden state for one project."""

    def __init__(
        self,
        config_hidden: Iterable[str] = (),
        carried_hidden: Iterable[str] = (),
    ) -> None:
        self.config_hidden = frozenset(config_hidden)
        self.carried_hidden = frozenset(carried_hidden)

    @classmethod
    def for_project(
        cls,
        config: ProjectConfig | None,
        prior: CacheEntry | None,
    ) -> CurationStore:
        """Build the overlay from a project's config and its previous cache entry.

        Flags from ``prior`` carry over unless both sides name a repo and
        those repos differ; a changed repo starts fresh. An entry that
        records no repo, or a config that names none, keeps its flags.
        """
        config_hidden = config.hidden_commits if config else []
        carried: set[str] = set()
        if prior is not None:
            current = config.repo if config else None
            if prior.repo and current and not same_repo(prior.repo, current):
                logger.info(
                    "Repo changed from %s to %s; dropping %d carried hidden flag(s)",
                    prior.repo, current, len(prior.hidden_shas),
                )
            else:
                carried = prior.hidden_shas
        return cls(config_hidden=config_hidden, carried_hidden=carried)

    @property
    def hidden(self) -> frozenset[str]:
        return self.config_hidden | self.carried_hidden

    def resolve(self, sha: str) -> bool:
        """True when ``sha`` is hidden by either source."""
        return sha in self.config_hidden or sha in self.carried_hidden

    def apply(self, commits: Iterable[CommitRecord]) -> list[CommitRecord]:
        """Return the commits with ``hidden`` recomputed, order unchanged."""
        return [c.with_hidden(self.resolve(c.sha)) for c in commits]


def curated_commits(
    entry: CacheEntry | None,
    config: ProjectConfig | None,
    include_hidden: bool = False,
) -> list[CommitRecord]:
    """Commits as a reader should see them, against the live config.

    Consults the config as it is now, so a toggle made with
    :func:`set_hidden` shows up without waiting for the next refresh.
    """
    if entry is None:
        return []
    commits = CurationStore.for_project(config, entry).apply(entry.commits)
    if include_hidden:
        return commits
    return [c for c in commits if not c.hidden]


def set_hidden(
    project: ProjectDescriptor,
    sha: str,
    hidden: bool,
    content: Path | None = None,
) -> ProjectConfig:
    """Add ``sha`` to, or remove it from, the project's ``hiddenCommits``.

    Only the config document is written; the commits cache is reconciled
    on the next refresh.

    Raises:
        MissingConfig: If the project has no config document.
    """
    path = config_path_for(project, content)
    config = load_project_config(path)
    if config is None:
        raise MissingConfig(project.slug, path)

    current = list(dict.fromkeys(config.hidden_commits))
    if hidden and sha not in current:
        current.append(sha)
    elif not hidden:
        current = [s for s in current if s != sha]
    config.hidden_commits = current
    save_project_config(path, config)
    logger.info("%s: commit %s %s", project.slug, sha[:8], "hidden" if hidden else "shown")
    return config
