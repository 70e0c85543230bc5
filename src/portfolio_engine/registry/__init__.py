"""Registry module — read the vault's project manifest."""

from portfolio_engine.registry.loader import load_manifest
from portfolio_engine.registry.query import ProjectDescriptor, all_projects, find_project

__all__ = [
    "load_manifest",
    "ProjectDescriptor",
    "all_projects",
    "find_project",
]
