"""Per-project config.yaml documents."""

from portfolio_engine.project.config import (
    DEFAULT_COMMITS_LIMIT,
    ProjectConfig,
    config_path_for,
    index_path_for,
    load_project_config,
    save_project_config,
)

__all__ = [
    "DEFAULT_COMMITS_LIMIT",
    "ProjectConfig",
    "config_path_for",
    "index_path_for",
    "load_project_config",
    "save_project_config",
]
