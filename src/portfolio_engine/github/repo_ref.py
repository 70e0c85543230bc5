"""Normalise repository references into owner/name pairs."""

from __future__ import annotations

import re
from dataclasses import dataclass

from portfolio_engine.errors import InvalidRepoReference

_URL_PATTERN = re.compile(
    r"^(?:https?|ssh|git)://(?:[^@/]+@)?[^/]+/(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)
_SCP_PATTERN = re.compile(r"^[\w.-]+@[^:/]+:(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$")
_SHORTHAND_PATTERN = re.compile(r"^(?P<owner>[\w.-]+)/(?P<name>[\w.-]+?)(?:\.git)?$")


@dataclass(frozen=True)
class RepoRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


def parse_repo_ref(reference: str) -> RepoRef:
    """Parse a repository reference.

    Accepts ``https://host/owner/name``, the same with a ``.git`` suffix,
    scp-style ``user@host:owner/name.git``, and bare ``owner/name``.

    Raises:
        InvalidRepoReference: If no accepted form matches.
    """
    text = (reference or "").strip()
    for pattern in (_URL_PATTERN, _SCP_PATTERN, _SHORTHAND_PATTERN):
        match = pattern.match(text)
        if match:
            return RepoRef(owner=match.group("owner"), name=match.group("name"))
    raise InvalidRepoReference(reference)
