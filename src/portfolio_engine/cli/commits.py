"""Commit cache CLI commands."""

import argparse

from portfolio_engine.commits.cache import CommitsCacheStore, refresh_cache
from portfolio_engine.commits.curation import curated_commits, set_hidden
from portfolio_engine.errors import MissingConfig
from portfolio_engine.github.client import GitHubClient
from portfolio_engine.paths import commits_cache_path, content_dir, github_token, manifest_path
from portfolio_engine.project.config import config_path_for, load_project_config
from portfolio_engine.registry.loader import load_manifest
from portfolio_engine.registry.query import all_projects, find_project


def _vault(args: argparse.Namespace):
    return getattr(args, "vault", None)


def cmd_commits_refresh(args: argparse.Namespace) -> int:
    vault = _vault(args)
    manifest = load_manifest(manifest_path(vault))
    projects = all_projects(manifest)

    token = github_token()
    if not token:
        print("  Warning: GITHUB_TOKEN is not set; private repos will fail.")

    with GitHubClient(token=token) as client:
        result = refresh_cache(
            projects,
            client,
            cache_store=CommitsCacheStore(commits_cache_path(vault)),
            content=content_dir(vault),
        )

    for slug in result.refreshed:
        entry = result.cache[slug]
        hidden = sum(1 for c in entry.commits if c.hidden)
        print(f"  {slug:<30} {len(entry.commits):>4} commits ({hidden} hidden)")
    for slug in result.skipped:
        print(f"  {slug:<30} skipped (no repo)")
    for slug, error in result.failures.items():
        print(f"  {slug:<30} FAILED: {error}")
    print(f"\n  {result.summary()}")
    return 0


def cmd_commits_list(args: argparse.Namespace) -> int:
    vault = _vault(args)
    project = find_project(load_manifest(manifest_path(vault)), args.project)
    if not project:
        print(f"ERROR: Project '{args.project}' not found in manifest")
        return 1

    entry = CommitsCacheStore(commits_cache_path(vault)).load().get(project.slug)
    if entry is None:
        print(f"  {project.slug}: never fetched. Run 'portfolio commits refresh'.")
        return 0

    config = load_project_config(config_path_for(project, content_dir(vault)))
    commits = curated_commits(entry, config, include_hidden=args.all)
    print(f"\n  {project.slug} — {entry.repo} (fetched {entry.last_fetched})")
    print(f"  {'─' * 72}")
    for commit in commits:
        marker = "x" if commit.hidden else " "
        print(f"  [{marker}] {commit.sha[:8]}  {commit.date[:10]}  {commit.author:<16} {commit.summary[:40]}")
    print(f"\n  {len(commits)} commit(s)")
    return 0


def _toggle(args: argparse.Namespace, hidden: bool) -> int:
    vault = _vault(args)
    project = find_project(load_manifest(manifest_path(vault)), args.project)
    if not project:
        print(f"ERROR: Project '{args.project}' not found in manifest")
        return 1
    try:
        set_hidden(project, args.sha, hidden, content=content_dir(vault))
    except MissingConfig as e:
        print(f"ERROR: {e}")
        return 1
    print(f"  {project.slug}: {args.sha[:8]} {'hidden' if hidden else 'visible'}")
    return 0


def cmd_commits_hide(args: argparse.Namespace) -> int:
    return _toggle(args, hidden=True)


def cmd_commits_unhide(args: argparse.Namespace) -> int:
    return _toggle(args, hidden=False)
