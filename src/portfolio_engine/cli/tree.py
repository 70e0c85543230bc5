"""Working-tree CLI commands."""

import argparse
from pathlib import Path

from portfolio_engine.errors import PortfolioError
from portfolio_engine.paths import vault_root
from portfolio_engine.worktree.bridge import WorkingTree


def _tree(args: argparse.Namespace) -> WorkingTree:
    path = getattr(args, "path", None) or getattr(args, "vault", None) or vault_root()
    return WorkingTree(Path(path))


def cmd_tree_status(args: argparse.Namespace) -> int:
    try:
        status = _tree(args).get_status()
    except PortfolioError as e:
        print(f"ERROR: {e}")
        return 1

    print(f"  On branch {status.branch or '(detached)'}", end="")
    if status.ahead or status.behind:
        print(f"  [ahead {status.ahead}, behind {status.behind}]", end="")
    print()
    if status.clean:
        print("  Nothing to commit, working tree clean.")
        return 0
    for title, changes in (
        ("Staged", status.staged),
        ("Unstaged", status.unstaged),
        ("Untracked", status.untracked),
    ):
        if not changes:
            continue
        print(f"\n  {title}:")
        for change in changes:
            print(f"    {change.status.value:<10} {change.path}")
    return 0


def _run(action, done: str) -> int:
    try:
        action()
    except PortfolioError as e:
        print(f"ERROR: {e}")
        return 1
    print(f"  {done}")
    return 0


def cmd_tree_stage(args: argparse.Namespace) -> int:
    return _run(lambda: _tree(args).stage_file(args.file), f"Staged {args.file}")


def cmd_tree_unstage(args: argparse.Namespace) -> int:
    return _run(lambda: _tree(args).unstage_file(args.file), f"Unstaged {args.file}")


def cmd_tree_stage_all(args: argparse.Namespace) -> int:
    return _run(lambda: _tree(args).stage_all(), "Staged all changes")


def cmd_tree_unstage_all(args: argparse.Namespace) -> int:
    return _run(lambda: _tree(args).unstage_all(), "Unstaged all changes")


def cmd_tree_commit(args: argparse.Namespace) -> int:
    if not args.message.strip():
        print("ERROR: Commit message must not be empty")
        return 1
    return _run(lambda: _tree(args).commit(args.message), "Committed")


def cmd_tree_push(args: argparse.Namespace) -> int:
    return _run(lambda: _tree(args).push(), "Pushed")


def cmd_tree_pull(args: argparse.Namespace) -> int:
    return _run(lambda: _tree(args).pull(), "Pulled")
