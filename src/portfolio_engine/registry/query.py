"""Query operations on the manifest."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProjectDescriptor:
    """One entry of the manifest's ``projects`` list."""

    slug: str
    index_path: str
    config_path: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ProjectDescriptor:
        return cls(
            slug=data["slug"],
            index_path=data.get("indexPath", ""),
            config_path=data.get("configPath") or None,
        )


def all_projects(manifest: dict) -> list[ProjectDescriptor]:
    """Return every project in manifest order, skipping entries without a slug."""
    return [
        ProjectDescriptor.from_dict(entry)
        for entry in manifest.get("projects", []) or []
        if isinstance(entry, dict) and entry.get("slug")
    ]


def find_project(manifest: dict, slug: str) -> ProjectDescriptor | None:
    """Find a project by slug.

    Returns:
        The descriptor, or None if not found.
    """
    for project in all_projects(manifest):
        if project.slug == slug:
            return project
    return None
