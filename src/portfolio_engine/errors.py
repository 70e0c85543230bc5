"""Domain-specific error types for portfolio-engine operations."""

from __future__ import annotations

from pathlib import Path


class PortfolioError(Exception):
    """Base class for every error raised by portfolio-engine."""


class InvalidRepoReference(PortfolioError, ValueError):
    """A repository reference string matched none of the accepted forms."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Could not parse repository reference: {reference!r}")
        self.reference = reference


class MissingConfig(PortfolioError):
    """A project has no config document, or its config names no repo."""

    def __init__(self, slug: str, path: Path | None = None, reason: str = "") -> None:
        detail = reason or (f"no config at {path}" if path else "no config")
        super().__init__(f"Project '{slug}': {detail}")
        self.slug = slug
        self.path = path


class NetworkError(PortfolioError):
    """A GitHub API call failed in transport or returned a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoUpstreamError(PortfolioError):
    """The current branch has no upstream to count ahead/behind against."""


class ShellCommandError(PortfolioError):
    """An external command exited non-zero.

    ``str(err)`` is the tool's own error text, unmodified: stderr when the
    tool wrote any, stdout otherwise.
    """

    def __init__(
        self,
        args: list[str],
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(stderr or stdout or f"{' '.join(args)} exited with {exit_code}")
        self.command = list(args)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class CommandTimeoutError(PortfolioError):
    """An external command ran past its deadline and was killed."""

    def __init__(self, args: list[str], timeout: float) -> None:
        super().__init__(f"{' '.join(args)} timed out after {timeout:g}s")
        self.command = list(args)
        self.timeout = timeout


class CommandCancelledError(PortfolioError):
    """An external command was cancelled by its caller and was killed."""

    def __init__(self, args: list[str]) -> None:
        super().__init__(f"{' '.join(args)} was cancelled")
        self.command = list(args)


class StatusParseError(PortfolioError, ValueError):
    """A porcelain status line carried a code outside the known change kinds."""

    def __init__(self, line: str, code: str) -> None:
        super().__init__(f"Unrecognised status code {code!r} in line {line!r}")
        self.line = line
        self.code = code
