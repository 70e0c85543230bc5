"""Unified CLI for portfolio-engine.

Usage:
    portfolio commits refresh
    portfolio commits list <project> [--all]
    portfolio commits hide <project> <sha>
    portfolio commits unhide <project> <sha>
    portfolio readme sync [<project>]
    portfolio tree status [--path <dir>]
    portfolio tree stage <file>
    portfolio tree unstage <file>
    portfolio tree stage-all
    portfolio tree unstage-all
    portfolio tree commit -m "message"
    portfolio tree push
    portfolio tree pull
"""

import argparse
import logging
import sys

from portfolio_engine.cli.commits import (
    cmd_commits_hide,
    cmd_commits_list,
    cmd_commits_refresh,
    cmd_commits_unhide,
)
from portfolio_engine.cli.readme import cmd_readme_sync
from portfolio_engine.cli.tree import (
    cmd_tree_commit,
    cmd_tree_pull,
    cmd_tree_push,
    cmd_tree_stage,
    cmd_tree_stage_all,
    cmd_tree_status,
    cmd_tree_unstage,
    cmd_tree_unstage_all,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio",
        description="Commit curation and working-tree tools for a portfolio vault",
    )
    parser.add_argument(
        "--vault", default=None,
        help="Vault root directory (default: $PORTFOLIO_VAULT_DIR or cwd)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log debug output to stderr",
    )
    sub = parser.add_subparsers(dest="command")

    # commits
    com = sub.add_parser("commits", help="Commit cache and curation")
    com_sub = com.add_subparsers(dest="subcommand")
    com_sub.add_parser("refresh", help="Fetch commits for every project")

    ls = com_sub.add_parser("list", help="List a project's cached commits")
    ls.add_argument("project", help="Project slug")
    ls.add_argument(
        "--all", action="store_true",
        help="Include hidden commits",
    )

    hide = com_sub.add_parser("hide", help="Hide a commit from display")
    hide.add_argument("project", help="Project slug")
    hide.add_argument("sha", help="Commit sha")

    unhide = com_sub.add_parser("unhide", help="Stop hiding a commit")
    unhide.add_argument("project", help="Project slug")
    unhide.add_argument("sha", help="Commit sha")

    # readme
    rd = sub.add_parser("readme", help="README mirroring")
    rd_sub = rd.add_subparsers(dest="subcommand")
    rd_sync = rd_sub.add_parser(
        "sync", help="Replace project index.md bodies with repo READMEs",
    )
    rd_sync.add_argument(
        "project", nargs="?", default=None,
        help="Project slug (default: all projects)",
    )

    # tree
    tree = sub.add_parser("tree", help="Local git working tree")
    tree.add_argument(
        "--path", default=None,
        help="Working tree root (default: the vault root)",
    )
    tree_sub = tree.add_subparsers(dest="subcommand")
    tree_sub.add_parser("status", help="Show branch and changed files")

    stage = tree_sub.add_parser("stage", help="Stage one file")
    stage.add_argument("file")
    unstage = tree_sub.add_parser("unstage", help="Unstage one file")
    unstage.add_argument("file")

    tree_sub.add_parser("stage-all", help="Stage every change")
    tree_sub.add_parser("unstage-all", help="Unstage every change")

    commit = tree_sub.add_parser("commit", help="Commit staged changes")
    commit.add_argument("-m", "--message", required=True, help="Commit message")

    tree_sub.add_parser("push", help="Push to the upstream branch")
    tree_sub.add_parser("pull", help="Pull from the upstream branch")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    dispatch = {
        ("commits", "refresh"): cmd_commits_refresh,
        ("commits", "list"): cmd_commits_list,
        ("commits", "hide"): cmd_commits_hide,
        ("commits", "unhide"): cmd_commits_unhide,
        ("readme", "sync"): cmd_readme_sync,
        ("tree", "status"): cmd_tree_status,
        ("tree", "stage"): cmd_tree_stage,
        ("tree", "unstage"): cmd_tree_unstage,
        ("tree", "stage-all"): cmd_tree_stage_all,
        ("tree", "unstage-all"): cmd_tree_unstage_all,
        ("tree", "commit"): cmd_tree_commit,
        ("tree", "push"): cmd_tree_push,
        ("tree", "pull"): cmd_tree_pull,
    }

    subcommand: str | None = getattr(args, "subcommand", None)
    handler = dispatch.get((args.command, subcommand or ""))
    if handler:
        return handler(args)

    parser.parse_args([args.command, "--help"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
