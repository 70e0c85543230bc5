"""Parse and write per-project config.yaml files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from portfolio_engine import store
from portfolio_engine.paths import content_dir
from portfolio_engine.registry.query import ProjectDescriptor

DEFAULT_COMMITS_LIMIT = 20

# Manifest paths are written relative to the site root, e.g. /content/projects/x/config.yaml
_CONTENT_PREFIX = "/content/"


@dataclass
class ProjectConfig:
    """The curation-relevant part of a project's config.yaml.

    Keys this class does not model are kept in ``extra`` and written back
    untouched by :func:`save_project_config`.
    """

    repo: str | None = None
    commits_limit: int | None = None
    hidden_commits: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> ProjectConfig:
        extra = {k: v for k, v in data.items() if k not in ("repo", "commitsLimit", "hiddenCommits")}
        limit = data.get("commitsLimit")
        return cls(
            repo=str(data["repo"]).strip() if data.get("repo") else None,
            commits_limit=int(limit) if limit else None,
            hidden_commits=[str(sha) for sha in data.get("hiddenCommits") or []],
            extra=extra,
        )

    @property
    def limit(self) -> int:
        """Number of commits to fetch; falls back to the default."""
        return self.commits_limit or DEFAULT_COMMITS_LIMIT

    def to_dict(self) -> dict:
        data: dict[str, Any] = {}
        if self.repo:
            data["repo"] = self.repo
        if self.commits_limit is not None:
            data["commitsLimit"] = self.commits_limit
        if self.hidden_commits:
            data["hiddenCommits"] = list(self.hidden_commits)
        data.update(self.extra)
        return data


def _rebase(manifest_path: str, content: Path) -> Path:
    if manifest_path.startswith(_CONTENT_PREFIX):
        manifest_path = manifest_path[len(_CONTENT_PREFIX):]
    return content / manifest_path.lstrip("/")


def config_path_for(project: ProjectDescriptor, content: Path | None = None) -> Path:
    """Resolve where a project's config.yaml lives on disk."""
    root = content or content_dir()
    if project.config_path:
        return _rebase(project.config_path, root)
    return root / "projects" / project.slug / "config.yaml"


def index_path_for(project: ProjectDescriptor, content: Path | None = None) -> Path:
    """Resolve where a project's index.md lives on disk."""
    root = content or content_dir()
    if project.index_path:
        return _rebase(project.index_path, root)
    return root / "projects" / project.slug / "index.md"


def load_project_config(path: Path | str) -> ProjectConfig | None:
    """Read a project config.

    Returns:
        The parsed config, or None when the file does not exist.

    Raises:
        ValueError: If the file is not a YAML mapping.
        yaml.YAMLError: If the YAML is malformed.
    """
    data = store.read_yaml(path)
    if data is None:
        return None
    return ProjectConfig.from_dict(data)


def save_project_config(path: Path | str, config: ProjectConfig) -> None:
    store.write_yaml(path, config.to_dict())
