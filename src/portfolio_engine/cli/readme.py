"""README sync CLI commands."""

import argparse

from portfolio_engine.errors import PortfolioError
from portfolio_engine.github.client import GitHubClient
from portfolio_engine.github.readme import sync_all_readmes, sync_readme
from portfolio_engine.paths import content_dir, github_token, manifest_path
from portfolio_engine.registry.loader import load_manifest
from portfolio_engine.registry.query import all_projects, find_project


def cmd_readme_sync(args: argparse.Namespace) -> int:
    vault = getattr(args, "vault", None)
    manifest = load_manifest(manifest_path(vault))
    content = content_dir(vault)

    with GitHubClient(token=github_token()) as client:
        if args.project:
            project = find_project(manifest, args.project)
            if not project:
                print(f"ERROR: Project '{args.project}' not found in manifest")
                return 1
            try:
                updated = sync_readme(project, client, content)
            except (PortfolioError, FileNotFoundError) as e:
                print(f"ERROR: {e}")
                return 1
            print(f"  {project.slug}: {'updated' if updated else 'no README found'}")
            return 0

        result = sync_all_readmes(all_projects(manifest), client, content)

    for slug in result.updated:
        print(f"  {slug:<30} updated")
    for slug in result.skipped:
        print(f"  {slug:<30} skipped")
    for slug, error in result.failures.items():
        print(f"  {slug:<30} FAILED: {error}")
    print(f"\n  Done: {len(result.updated)} updated, {len(result.skipped)} skipped")
    return 0
