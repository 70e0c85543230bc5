"""Shared test fixtures for portfolio-engine."""

import json
import os
import subprocess
from pathlib import Path

import pytest
import yaml

from portfolio_engine.commits.models import CommitRecord
from portfolio_engine.errors import NetworkError

GIT_ENV = {
    "GIT_AUTHOR_NAME": "test", "GIT_AUTHOR_EMAIL": "t@t",
    "GIT_COMMITTER_NAME": "test", "GIT_COMMITTER_EMAIL": "t@t",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def make_commit(sha: str, hidden: bool = False) -> CommitRecord:
    return CommitRecord(
        sha=sha,
        message=f"commit {sha}\n\nbody",
        date="2024-05-01T12:00:00Z",
        author="octocat",
        url=f"https://github.com/o/r/commit/{sha}",
        hidden=hidden,
    )


class FakeGitHub:
    """Stand-in for GitHubClient keyed by ``owner/name``."""

    def __init__(self, commits=None, readmes=None, failing=()):
        self.commits = commits or {}
        self.readmes = readmes or {}
        self.failing = set(failing)
        self.calls = []

    def list_commits(self, ref, limit=20):
        self.calls.append((ref.full_name, limit))
        if ref.full_name in self.failing:
            raise NetworkError(f"GitHub API error 500 for {ref}", status_code=500)
        return [make_commit(sha) for sha in self.commits.get(ref.full_name, [])][:limit]

    def fetch_readme(self, ref):
        self.calls.append((ref.full_name, "readme"))
        if ref.full_name in self.failing:
            raise NetworkError(f"GitHub API error 500 for {ref}", status_code=500)
        return self.readmes.get(ref.full_name)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None


def write_project(content: Path, slug: str, config: dict | None, index: str = "---\ntitle: X\n---\n\nold body\n"):
    project_dir = content / "projects" / slug
    project_dir.mkdir(parents=True, exist_ok=True)
    (project_dir / "index.md").write_text(index)
    if config is not None:
        (project_dir / "config.yaml").write_text(yaml.safe_dump(config))


@pytest.fixture
def vault(tmp_path, monkeypatch):
    """A vault with three projects: alpha and beta sync, gamma has no config."""
    for var in ("PORTFOLIO_CONTENT_DIR", "PORTFOLIO_DATA_DIR", "GITHUB_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("PORTFOLIO_VAULT_DIR", str(tmp_path))

    content = tmp_path / "app" / "public" / "content"
    content.mkdir(parents=True)
    write_project(content, "alpha", {"repo": "https://github.com/o/alpha", "commitsLimit": 5})
    write_project(content, "beta", {"repo": "git@github.com:o/beta.git", "hiddenCommits": ["b2"]})
    write_project(content, "gamma", None)

    manifest = {
        "projects": [
            {"slug": "alpha", "indexPath": "/content/projects/alpha/index.md",
             "configPath": "/content/projects/alpha/config.yaml"},
            {"slug": "beta", "indexPath": "/content/projects/beta/index.md",
             "configPath": "/content/projects/beta/config.yaml"},
            {"slug": "gamma", "indexPath": "/content/projects/gamma/index.md"},
        ],
        "blog": [],
        "pages": [],
    }
    (content / "manifest.json").write_text(json.dumps(manifest, indent=2))
    return tmp_path


@pytest.fixture
def content(vault):
    return vault / "app" / "public" / "content"


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """An initialised git repo with one commit on main."""
    for key, value in GIT_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("HOME", str(tmp_path))

    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init", "-b", "main"], cwd=repo, capture_output=True, check=True)
    (repo / "tracked.txt").write_text("one\n")
    subprocess.run(["git", "add", "."], cwd=repo, capture_output=True, check=True)
    subprocess.run(
        ["git", "commit", "-m", "init"], cwd=repo, capture_output=True, check=True,
        env={**os.environ, **GIT_ENV},
    )
    return repo
