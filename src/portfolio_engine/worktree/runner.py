"""Run external commands as argument lists, with a deadline and cancellation."""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path

from portfolio_engine.errors import (
    CommandCancelledError,
    CommandTimeoutError,
    ShellCommandError,
)

logger = logging.getLogger(__name__)

# How often a waiting call wakes up to look at its cancel token
POLL_INTERVAL = 0.1


@dataclass(frozen=True)
class CommandResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner:
    """Execute commands in one working directory.

    Commands are argument lists handed straight to the OS; nothing passes
    through a shell, so arguments need no quoting.
    """

    def __init__(self, cwd: Path | str, timeout: float | None = None) -> None:
        self.cwd = Path(cwd)
        self.timeout = timeout

    def run(
        self,
        args: list[str],
        check: bool = True,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> CommandResult:
        """Run ``args`` to completion.

        Args:
            args: Program and arguments.
            check: Raise on a non-zero exit status.
            timeout: Seconds before the process is killed. Defaults to the
                runner's timeout; None waits indefinitely.
            cancel: Setting this event kills the process.

        Raises:
            ShellCommandError: If ``check`` and the exit status is non-zero.
            CommandTimeoutError: If the deadline passed.
            CommandCancelledError: If ``cancel`` was set.
        """
        limit = self.timeout if timeout is None else timeout
        logger.debug("run %s (cwd=%s)", args, self.cwd)

        if cancel is not None and cancel.is_set():
            raise CommandCancelledError(args)

        proc = subprocess.Popen(
            args,
            cwd=self.cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
        deadline = time.monotonic() + limit if limit is not None else None

        while True:
            wait = POLL_INTERVAL if cancel is not None else None
            if deadline is not None:
                remaining = max(0.0, deadline - time.monotonic())
                wait = remaining if wait is None else min(wait, remaining)
            try:
                stdout, stderr = proc.communicate(timeout=wait)
                break
            except subprocess.TimeoutExpired:
                if cancel is not None and cancel.is_set():
                    _kill(proc)
                    raise CommandCancelledError(args) from None
                if deadline is not None and time.monotonic() >= deadline:
                    _kill(proc)
                    raise CommandTimeoutError(args, limit) from None

        result = CommandResult(args=list(args), returncode=proc.returncode, stdout=stdout, stderr=stderr)
        if check and result.returncode != 0:
            raise ShellCommandError(args, result.returncode, stdout, stderr)
        return result


def _kill(proc: subprocess.Popen) -> None:
    proc.kill()
    proc.communicate()
