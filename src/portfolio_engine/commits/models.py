"""Commit cache records and their JSON shape."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone


@dataclass(frozen=True)
class CommitRecord:
    sha: str
    message: str
    date: str
    author: str
    url: str
    hidden: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> CommitRecord:
        return cls(
            sha=data["sha"],
            message=data.get("message", ""),
            date=data.get("date", ""),
            author=data.get("author", ""),
            url=data.get("url", ""),
            hidden=bool(data.get("hidden", False)),
        )

    def to_dict(self) -> dict:
        return {
            "sha": self.sha,
            "message": self.message,
            "date": self.date,
            "author": self.author,
            "url": self.url,
            "hidden": self.hidden,
        }

    def with_hidden(self, hidden: bool) -> CommitRecord:
        return replace(self, hidden=hidden)

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.splitlines()[0] if self.message else ""


@dataclass
class CacheEntry:
    """One project's cached commit history, newest first."""

    repo: str
    last_fetched: str
    commits: list[CommitRecord] = field(default_factory=list)

    @property
    def latest_sha(self) -> str | None:
        return self.commits[0].sha if self.commits else None

    @property
    def hidden_shas(self) -> set[str]:
        return {c.sha for c in self.commits if c.hidden}

    @classmethod
    def from_dict(cls, data: dict) -> CacheEntry:
        return cls(
            repo=data.get("repo", ""),
            last_fetched=data.get("lastFetched", ""),
            commits=[
                CommitRecord.from_dict(c)
                for c in data.get("commits", []) or []
                if isinstance(c, dict) and c.get("sha")
            ],
        )

    def to_dict(self) -> dict:
        data: dict = {"repo": self.repo, "lastFetched": self.last_fetched}
        if self.latest_sha:
            data["latestSha"] = self.latest_sha
        data["commits"] = [c.to_dict() for c in self.commits]
        return data


def cache_from_dict(data: dict | None) -> dict[str, CacheEntry]:
    """Build a slug -> CacheEntry mapping from the persisted document."""
    if not data:
        return {}
    return {slug: CacheEntry.from_dict(entry) for slug, entry in data.items() if isinstance(entry, dict)}


def cache_to_dict(cache: dict[str, CacheEntry]) -> dict:
    return {slug: entry.to_dict() for slug, entry in cache.items()}


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
