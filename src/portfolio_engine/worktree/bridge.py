"""Query and drive a local git working tree.

Nothing is remembered between calls: every method asks git afresh.
Mutating methods raise :class:`~portfolio_engine.errors.ShellCommandError`
carrying git's own output when git exits non-zero, and never retry.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from portfolio_engine.errors import NoUpstreamError, ShellCommandError
from portfolio_engine.paths import git_timeout
from portfolio_engine.worktree.runner import CommandRunner
from portfolio_engine.worktree.status import GitStatusSnapshot, parse_porcelain

logger = logging.getLogger(__name__)


class WorkingTree:
    """A git working tree rooted at ``path``."""

    def __init__(
        self,
        path: Path | str,
        runner: CommandRunner | None = None,
        timeout: float | None = None,
    ) -> None:
        self.path = Path(path)
        self.runner = runner or CommandRunner(
            self.path, timeout=git_timeout() if timeout is None else timeout,
        )

    def _git(self, *args: str, cancel: threading.Event | None = None) -> str:
        result = self.runner.run(["git", *args], cancel=cancel)
        return result.stdout

    # -- queries --------------------------------------------------------

    def current_branch(self) -> str:
        """Current branch name; empty when HEAD is detached."""
        return self._git("branch", "--show-current").strip()

    def ahead_behind(self) -> tuple[int, int]:
        """Commits (ahead, behind) relative to the upstream branch.

        Raises:
            NoUpstreamError: If no upstream is configured or git cannot count.
        """
        try:
            output = self._git("rev-list", "--left-right", "--count", "@{upstream}...HEAD")
        except ShellCommandError as e:
            raise NoUpstreamError(str(e).strip()) from e
        parts = output.split()
        if len(parts) != 2:
            raise NoUpstreamError(f"Unexpected rev-list output: {output!r}")
        behind, ahead = (int(p) for p in parts)
        return ahead, behind

    def get_status(self) -> GitStatusSnapshot:
        """Branch, upstream distance and per-file changes."""
        branch = self.current_branch()
        try:
            ahead, behind = self.ahead_behind()
        except NoUpstreamError as e:
            logger.debug("No upstream for %s: %s", self.path, e)
            ahead, behind = 0, 0
        staged, unstaged, untracked = parse_porcelain(
            self._git("-c", "core.quotePath=false", "status", "--porcelain")
        )
        return GitStatusSnapshot(
            branch=branch,
            ahead=ahead,
            behind=behind,
            staged=staged,
            unstaged=unstaged,
            untracked=untracked,
        )

    # -- mutations ------------------------------------------------------

    def stage_file(self, path: str) -> None:
        self._git("add", "--", path)

    def unstage_file(self, path: str) -> None:
        self._git("reset", "-q", "HEAD", "--", path)

    def stage_all(self) -> None:
        self._git("add", "-A")

    def unstage_all(self) -> None:
        self._git("reset", "-q", "HEAD")

    def commit(self, message: str) -> None:
        """Commit the index with ``message`` passed verbatim as one argument."""
        if not message.strip():
            raise ValueError("Commit message must not be empty")
        self._git("commit", "-m", message)

    def push(self, cancel: threading.Event | None = None) -> None:
        self._git("push", cancel=cancel)

    def pull(self, cancel: threading.Event | None = None) -> None:
        self._git("pull", cancel=cancel)
