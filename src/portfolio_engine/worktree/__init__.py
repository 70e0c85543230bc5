"""Worktree module — git status and stage/commit/push/pull for a local checkout."""

from portfolio_engine.worktree.bridge import WorkingTree
from portfolio_engine.worktree.runner import CommandResult, CommandRunner
from portfolio_engine.worktree.status import (
    ChangeStatus,
    FileChange,
    GitStatusSnapshot,
    parse_porcelain,
)

__all__ = [
    "WorkingTree",
    "CommandResult",
    "CommandRunner",
    "ChangeStatus",
    "FileChange",
    "GitStatusSnapshot",
    "parse_porcelain",
]
