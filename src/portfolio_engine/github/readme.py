"""Mirror a repository README into the project's index.md."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import yaml

from portfolio_engine import store
from portfolio_engine.errors import InvalidRepoReference, MissingConfig, NetworkError
from portfolio_engine.github.repo_ref import parse_repo_ref
from portfolio_engine.project.config import config_path_for, index_path_for, load_project_config
from portfolio_engine.registry.query import ProjectDescriptor

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r"\A---\r?\n.*?\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


def replace_body(document: str, body: str) -> str:
    """Swap the markdown body of ``document`` for ``body``.

    A leading ``---`` front-matter block is kept byte for byte.
    """
    match = FRONTMATTER_PATTERN.match(document)
    if not match:
        return body
    frontmatter = match.group(0)
    if not frontmatter.endswith("\n"):
        frontmatter += "\n"
    return frontmatter + "\n" + body


def sync_readme(
    project: ProjectDescriptor,
    client,
    content: Path | None = None,
) -> bool:
    """Replace the project's index.md body with its repo's README.

    Returns:
        True if index.md was rewritten, False if the repo has no README.

    Raises:
        MissingConfig: If the project has no config or no repo.
        InvalidRepoReference: If the configured repo cannot be parsed.
        NetworkError: If the API call fails.
        FileNotFoundError: If the project's index.md does not exist.
    """
    config_file = config_path_for(project, content)
    config = load_project_config(config_file)
    if config is None:
        raise MissingConfig(project.slug, config_file)
    if not config.repo:
        raise MissingConfig(project.slug, config_file, reason="no repo configured")

    index_file = index_path_for(project, content)
    existing = store.read_text(index_file)
    if existing is None:
        raise FileNotFoundError(f"No index.md for project '{project.slug}': {index_file}")

    ref = parse_repo_ref(config.repo)
    readme = client.fetch_readme(ref)
    if readme is None:
        logger.info("%s: %s has no README", project.slug, ref)
        return False

    store.write_text(index_file, replace_body(existing, readme))
    logger.info("%s: index.md updated from %s", project.slug, ref)
    return True


@dataclass
class ReadmeSyncResult:
    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)


def sync_all_readmes(
    projects: Iterable[ProjectDescriptor],
    client,
    content: Path | None = None,
) -> ReadmeSyncResult:
    """Run :func:`sync_readme` for each project; one failure never stops the batch."""
    result = ReadmeSyncResult()
    for project in projects:
        try:
            if sync_readme(project, client, content):
                result.updated.append(project.slug)
            else:
                result.skipped.append(project.slug)
        except MissingConfig:
            result.skipped.append(project.slug)
        except (InvalidRepoReference, NetworkError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
            logger.warning("%s: README sync failed: %s", project.slug, e)
            result.failures[project.slug] = str(e)
    return result
