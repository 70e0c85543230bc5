"""Thin GitHub REST client for commit listings and raw file content."""

from __future__ import annotations

import logging

import httpx

from portfolio_engine.commits.models import CommitRecord, now_iso
from portfolio_engine.errors import NetworkError
from portfolio_engine.github.repo_ref import RepoRef

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
MAX_PER_PAGE = 100
RAW_MEDIA_TYPE = "application/vnd.github.raw"


class GitHubClient:
    """Authenticated (or anonymous) access to the GitHub REST API.

    Anonymous clients work for public repositories only.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str = GITHUB_API_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "portfolio-engine",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.Client(
            base_url=base_url, headers=headers, timeout=timeout, transport=transport,
        )

    def _get(self, url: str, params: dict | None = None, accept: str | None = None) -> httpx.Response:
        headers = {"Accept": accept} if accept else None
        logger.debug("GET %s %s", url, params or "")
        try:
            response = self.client.get(url, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise NetworkError(f"GitHub API error {status} for {url}", status_code=status) from e
        except httpx.RequestError as e:
            raise NetworkError(f"Failed to reach GitHub for {url}: {e}") from e
        return response

    def list_commits(self, ref: RepoRef, limit: int = 20) -> list[CommitRecord]:
        """Return up to ``limit`` commits of the default branch, newest first.

        The API's order is kept as-is.
        """
        commits: list[CommitRecord] = []
        per_page = max(1, min(limit, MAX_PER_PAGE))
        page = 1
        while len(commits) < limit:
            response = self._get(
                f"/repos/{ref.owner}/{ref.name}/commits",
                params={"per_page": per_page, "page": page},
            )
            try:
                batch = response.json()
            except ValueError as e:
                raise NetworkError(f"Malformed commit listing for {ref}: {e}") from e
            if not isinstance(batch, list):
                raise NetworkError(f"Unexpected commit listing for {ref}")
            commits.extend(_commit_from_api(item) for item in batch)
            if len(batch) < per_page:
                break
            page += 1
        return commits[:limit]

    def fetch_file(self, ref: RepoRef, path: str) -> bytes | None:
        """Return a file's raw bytes, or None if the repo has no such file."""
        try:
            response = self._get(
                f"/repos/{ref.owner}/{ref.name}/contents/{path.lstrip('/')}",
                accept=RAW_MEDIA_TYPE,
            )
        except NetworkError as e:
            if e.status_code == 404:
                return None
            raise
        return response.content

    def fetch_readme(self, ref: RepoRef) -> str | None:
        """Return the repo's README as raw text, or None if it has none."""
        try:
            response = self._get(f"/repos/{ref.owner}/{ref.name}/readme", accept=RAW_MEDIA_TYPE)
        except NetworkError as e:
            if e.status_code == 404:
                return None
            raise
        return response.text

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _commit_from_api(item) -> CommitRecord:
    sha = item.get("sha") if isinstance(item, dict) else None
    if not sha or not isinstance(sha, str):
        raise NetworkError(f"Malformed commit in API response: {item!r:.80}")
    commit = item.get("commit") if isinstance(item.get("commit"), dict) else {}
    git_author = commit.get("author") if isinstance(commit.get("author"), dict) else {}
    account = item.get("author") if isinstance(item.get("author"), dict) else {}
    return CommitRecord(
        sha=sha,
        message=commit.get("message", ""),
        date=git_author.get("date") or now_iso(),
        author=account.get("login") or git_author.get("name") or "unknown",
        url=item.get("html_url", ""),
    )
