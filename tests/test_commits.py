"""Tests for commit cache refresh and the curation overlay."""

import json

import httpx
import pytest
import yaml

from portfolio_engine.commits.cache import CommitsCacheStore, refresh_cache, refresh_commits
from portfolio_engine.commits.curation import CurationStore, curated_commits, set_hidden
from portfolio_engine.commits.models import CacheEntry, cache_from_dict
from portfolio_engine.errors import MissingConfig
from portfolio_engine.github.client import GitHubClient
from portfolio_engine.project.config import ProjectConfig
from portfolio_engine.registry.loader import load_manifest
from portfolio_engine.registry.query import ProjectDescriptor, all_projects, find_project

from conftest import FakeGitHub, make_commit, write_project


def fixed_clock():
    return "2024-06-01T00:00:00.000Z"


@pytest.fixture
def projects(content):
    return all_projects(load_manifest(content / "manifest.json"))


@pytest.fixture
def github():
    return FakeGitHub(commits={
        "o/alpha": ["a3", "a2", "a1"],
        "o/beta": ["b3", "b2", "b1"],
    })


class TestRefresh:
    def test_builds_entries_for_syncing_projects(self, projects, content, github):
        result = refresh_commits(projects, {}, github, content=content, now=fixed_clock)

        assert result.refreshed == ["alpha", "beta"]
        assert result.skipped == ["gamma"]
        assert result.failures == {}
        assert set(result.cache) == {"alpha", "beta"}

        alpha = result.cache["alpha"]
        assert alpha.repo == "https://github.com/o/alpha"
        assert alpha.last_fetched == "2024-06-01T00:00:00.000Z"
        assert [c.sha for c in alpha.commits] == ["a3", "a2", "a1"]
        assert alpha.latest_sha == "a3"

    def test_requests_configured_limit(self, projects, content, github):
        refresh_commits(projects, {}, github, content=content)
        assert ("o/alpha", 5) in github.calls
        assert ("o/beta", 20) in github.calls

    def test_config_hidden_commits_applied(self, projects, content, github):
        result = refresh_commits(projects, {}, github, content=content)
        hidden = {c.sha: c.hidden for c in result.cache["beta"].commits}
        assert hidden == {"b3": False, "b2": True, "b1": False}

    def test_hidden_flag_carried_from_previous_cache(self, projects, content, github):
        previous = {
            "alpha": CacheEntry(
                repo="https://github.com/o/alpha",
                last_fetched="2024-01-01T00:00:00.000Z",
                commits=[make_commit("a1", hidden=True)],
            ),
        }
        result = refresh_commits(projects, previous, github, content=content)
        hidden = {c.sha: c.hidden for c in result.cache["alpha"].commits}
        assert hidden == {"a3": False, "a2": False, "a1": True}

    def test_carry_over_survives_removal_from_config(self, projects, content, github):
        first = refresh_commits(projects, {}, github, content=content)
        write_project(content, "beta", {"repo": "git@github.com:o/beta.git"})

        second = refresh_commits(projects, first.cache, github, content=content)
        assert {c.sha for c in second.cache["beta"].commits if c.hidden} == {"b2"}

    def test_equivalent_repo_spelling_keeps_flags(self, projects, content, github):
        previous = {"alpha": CacheEntry(
            repo="o/alpha", last_fetched="x", commits=[make_commit("a2", hidden=True)],
        )}
        result = refresh_commits(projects, previous, github, content=content)
        assert {c.sha for c in result.cache["alpha"].commits if c.hidden} == {"a2"}

    def test_changed_repo_starts_fresh(self, projects, content, github):
        github.commits["o/alpha-v2"] = ["a2", "x1"]
        write_project(content, "alpha", {"repo": "o/alpha-v2"})
        previous = {"alpha": CacheEntry(
            repo="https://github.com/o/alpha", last_fetched="x",
            commits=[make_commit("a2", hidden=True)],
        )}
        result = refresh_commits(projects, previous, github, content=content)
        assert all(not c.hidden for c in result.cache["alpha"].commits)

    def test_empty_fetch_still_produces_entry(self, projects, content):
        result = refresh_commits(projects, {}, FakeGitHub(), content=content)
        entry = result.cache["alpha"]
        assert entry.commits == []
        assert entry.latest_sha is None
        assert "latestSha" not in entry.to_dict()

    def test_stale_projects_dropped(self, projects, content, github):
        previous = {"retired": CacheEntry(repo="o/retired", last_fetched="x")}
        result = refresh_commits(projects, previous, github, content=content)
        assert "retired" not in result.cache

    def test_duplicate_shas_collapsed(self, projects, content):
        github = FakeGitHub(commits={"o/alpha": ["a1", "a1", "a0"]})
        result = refresh_commits(projects, {}, github, content=content)
        assert [c.sha for c in result.cache["alpha"].commits] == ["a1", "a0"]

    def test_idempotent_apart_from_timestamp(self, projects, content, github):
        first = refresh_commits(projects, {}, github, content=content, now=lambda: "t1")
        second = refresh_commits(projects, first.cache, github, content=content, now=lambda: "t2")

        def strip(cache):
            data = {slug: entry.to_dict() for slug, entry in cache.items()}
            for entry in data.values():
                entry.pop("lastFetched")
            return data

        assert strip(first.cache) == strip(second.cache)
        assert second.cache["alpha"].last_fetched == "t2"


class TestRefreshFailures:
    def test_malformed_repo_does_not_abort_batch(self, projects, content, github):
        write_project(content, "gamma", {"repo": "not-a-repo"})

        result = refresh_commits(projects, {}, github, content=content)

        assert set(result.cache) == {"alpha", "beta"}
        assert list(result.failures) == ["gamma"]
        assert "not-a-repo" in result.failures["gamma"]
        assert not result.ok

    def test_network_failure_isolated(self, projects, content):
        github = FakeGitHub(commits={"o/beta": ["b1"]}, failing={"o/alpha"})
        result = refresh_commits(projects, {}, github, content=content)
        assert set(result.cache) == {"beta"}
        assert "alpha" in result.failures

    def test_unreadable_config_isolated(self, projects, content, github):
        (content / "projects" / "alpha" / "config.yaml").write_text("- just\n- a list\n")
        result = refresh_commits(projects, {}, github, content=content)
        assert "alpha" in result.failures
        assert "beta" in result.cache

    def test_config_without_repo_skipped_silently(self, projects, content, github):
        write_project(content, "gamma", {"commitsLimit": 3})
        result = refresh_commits(projects, {}, github, content=content)
        assert "gamma" in result.skipped
        assert "gamma" not in result.failures

    def test_malformed_api_response_isolated(self, tmp_path):
        content = tmp_path / "content"
        write_project(content, "bad", {"repo": "o/bad"})
        write_project(content, "good", {"repo": "o/good"})
        projects = [ProjectDescriptor(slug="bad", index_path=""), ProjectDescriptor(slug="good", index_path="")]

        def handler(request):
            if request.url.path.startswith("/repos/o/bad/"):
                return httpx.Response(200, text="<html>proxy</html>")
            return httpx.Response(200, json=[{"sha": "g1", "commit": {"message": "first"}}])

        with GitHubClient(transport=httpx.MockTransport(handler)) as client:
            result = refresh_commits(projects, {}, client, content=content)

        assert list(result.failures) == ["bad"]
        assert [c.sha for c in result.cache["good"].commits] == ["g1"]

    def test_failures_logged(self, projects, content, github, caplog):
        write_project(content, "gamma", {"repo": "not-a-repo"})
        with caplog.at_level("WARNING", logger="portfolio_engine.commits.cache"):
            refresh_commits(projects, {}, github, content=content)
        assert any("gamma" in r.getMessage() for r in caplog.records)


class TestEndToEnd:
    def test_union_of_previous_cache_and_config(self, tmp_path):
        content = tmp_path / "content"
        write_project(content, "p", {"repo": "o/p", "hiddenCommits": ["b"]})
        project = ProjectDescriptor(slug="p", index_path="")
        previous = cache_from_dict({"p": {
            "repo": "o/p", "lastFetched": "x",
            "commits": [{"sha": "a", "hidden": True}],
        }})
        github = FakeGitHub(commits={"o/p": ["a", "b", "c"]})

        result = refresh_commits([project], previous, github, content=content)

        hidden = {c.sha: c.hidden for c in result.cache["p"].commits}
        assert hidden == {"a": True, "b": True, "c": False}

    def test_prior_entry_without_repo_keeps_flags(self, tmp_path):
        content = tmp_path / "content"
        write_project(content, "p", {"repo": "o/p", "hiddenCommits": ["b"]})
        project = ProjectDescriptor(slug="p", index_path="")
        previous = cache_from_dict({"p": {"commits": [{"sha": "a", "hidden": True}]}})
        github = FakeGitHub(commits={"o/p": ["a", "b", "c"]})

        result = refresh_commits([project], previous, github, content=content)

        hidden = {c.sha: c.hidden for c in result.cache["p"].commits}
        assert hidden == {"a": True, "b": True, "c": False}

    def test_refresh_cache_persists_whole_document(self, vault, projects, content, github):
        cache_file = vault / "app" / "public" / "_data" / "commits-cache.json"
        cache_file.parent.mkdir(parents=True)
        cache_file.write_text(json.dumps({"retired": {"repo": "o/x", "lastFetched": "x", "commits": []}}))

        result = refresh_cache(projects, github, CommitsCacheStore(cache_file), content=content)

        data = json.loads(cache_file.read_text())
        assert set(data) == {"alpha", "beta"}
        assert data["alpha"]["latestSha"] == "a3"
        assert data["beta"]["commits"][1] == {
            "sha": "b2",
            "message": "commit b2\n\nbody",
            "date": "2024-05-01T12:00:00Z",
            "author": "octocat",
            "url": "https://github.com/o/r/commit/b2",
            "hidden": True,
        }
        assert result.summary() == "2 refreshed, 1 skipped, 0 failed"


class TestCommitsCacheStore:
    def test_missing_file_is_empty(self, tmp_path):
        assert CommitsCacheStore(tmp_path / "none.json").load() == {}

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{not json")
        assert CommitsCacheStore(path).load() == {}

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "cache.json"
        store = CommitsCacheStore(path)
        store.save({"p": CacheEntry(repo="o/p", last_fetched="t", commits=[make_commit("a", hidden=True)])})

        loaded = CommitsCacheStore(path).load()
        assert loaded["p"].hidden_shas == {"a"}
        assert not list(path.parent.glob("*.tmp"))

    def test_instances_share_lock(self, tmp_path):
        a = CommitsCacheStore(tmp_path / "cache.json")
        b = CommitsCacheStore(tmp_path / "cache.json")
        assert a._lock is b._lock


class TestCurationStore:
    def test_resolve_union(self):
        overlay = CurationStore(config_hidden=["b"], carried_hidden=["a"])
        assert overlay.resolve("a")
        assert overlay.resolve("b")
        assert not overlay.resolve("c")
        assert overlay.hidden == {"a", "b"}

    def test_for_project_without_config_keeps_cached_flags(self):
        prior = CacheEntry(repo="o/p", last_fetched="x", commits=[make_commit("a", hidden=True)])
        assert CurationStore.for_project(None, prior).resolve("a")
        assert CurationStore.for_project(ProjectConfig(repo=None), prior).resolve("a")

    def test_for_project_changed_repo_drops_cached_flags(self):
        prior = CacheEntry(repo="o/old", last_fetched="x", commits=[make_commit("a", hidden=True)])
        config = ProjectConfig(repo="o/new", hidden_commits=["b"])
        assert CurationStore.for_project(config, prior).hidden == {"b"}


class TestSetHidden:
    def test_hide_adds_sha_once(self, content, vault):
        project = find_project(load_manifest(content / "manifest.json"), "alpha")
        set_hidden(project, "a2", True, content=content)
        set_hidden(project, "a2", True, content=content)

        config = yaml.safe_load((content / "projects" / "alpha" / "config.yaml").read_text())
        assert config["hiddenCommits"] == ["a2"]
        assert config["repo"] == "https://github.com/o/alpha"
        assert config["commitsLimit"] == 5

    def test_unhide_removes_sha(self, content, vault):
        project = find_project(load_manifest(content / "manifest.json"), "beta")
        set_hidden(project, "b2", False, content=content)
        config = yaml.safe_load((content / "projects" / "beta" / "config.yaml").read_text())
        assert "hiddenCommits" not in config
        assert "commitsLimit" not in config

    def test_does_not_touch_cache(self, content, vault):
        cache_file = vault / "app" / "public" / "_data" / "commits-cache.json"
        project = find_project(load_manifest(content / "manifest.json"), "alpha")
        set_hidden(project, "a2", True, content=content)
        assert not cache_file.exists()

    def test_missing_config_raises(self, content, vault):
        project = find_project(load_manifest(content / "manifest.json"), "gamma")
        with pytest.raises(MissingConfig):
            set_hidden(project, "x", True, content=content)

    def test_unknown_keys_preserved(self, content, vault):
        write_project(content, "alpha", {"repo": "o/alpha", "theme": "dark"})
        project = find_project(load_manifest(content / "manifest.json"), "alpha")
        set_hidden(project, "a1", True, content=content)
        config = yaml.safe_load((content / "projects" / "alpha" / "config.yaml").read_text())
        assert config["theme"] == "dark"


class TestCuratedCommits:
    def test_toggle_visible_before_refresh(self, projects, content, github, vault):
        result = refresh_commits(projects, {}, github, content=content)
        alpha = find_project(load_manifest(content / "manifest.json"), "alpha")

        config = set_hidden(alpha, "a2", True, content=content)

        visible = curated_commits(result.cache["alpha"], config)
        assert [c.sha for c in visible] == ["a3", "a1"]
        everything = curated_commits(result.cache["alpha"], config, include_hidden=True)
        assert [c.sha for c in everything if c.hidden] == ["a2"]

    def test_never_fetched(self):
        assert curated_commits(None, None) == []

    def test_cached_hidden_flag_survives_repo_removal(self):
        entry = CacheEntry(repo="o/p", last_fetched="x", commits=[make_commit("a", hidden=True), make_commit("b")])
        assert [c.sha for c in curated_commits(entry, ProjectConfig(repo=None))] == ["b"]
