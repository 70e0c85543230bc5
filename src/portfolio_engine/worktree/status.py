"""Structured view of ``git status --porcelain`` output."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from portfolio_engine.errors import StatusParseError

UNTRACKED = "?"


class ChangeStatus(str, Enum):
    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    RENAMED = "renamed"


STATUS_CODES = {
    "M": ChangeStatus.MODIFIED,
    "A": ChangeStatus.ADDED,
    "D": ChangeStatus.DELETED,
    "R": ChangeStatus.RENAMED,
    # copies, type changes and unmerged paths are reported as edits
    "C": ChangeStatus.MODIFIED,
    "T": ChangeStatus.MODIFIED,
    "U": ChangeStatus.MODIFIED,
}

# C-style escapes git uses inside quoted paths
_ESCAPES = {
    "a": "\a", "b": "\b", "t": "\t", "n": "\n", "v": "\v",
    "f": "\f", "r": "\r", '"': '"', "\\": "\\",
}
_OCTAL = "01234567"


@dataclass(frozen=True)
class FileChange:
    path: str
    status: ChangeStatus

    def to_dict(self) -> dict:
        return {"path": self.path, "status": self.status.value}


@dataclass
class GitStatusSnapshot:
    """Working-tree state at the moment it was queried. Never persisted."""

    branch: str = ""
    ahead: int = 0
    behind: int = 0
    staged: list[FileChange] = field(default_factory=list)
    unstaged: list[FileChange] = field(default_factory=list)
    untracked: list[FileChange] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked)

    def to_dict(self) -> dict:
        return {
            "branch": self.branch,
            "ahead": self.ahead,
            "behind": self.behind,
            "staged": [c.to_dict() for c in self.staged],
            "unstaged": [c.to_dict() for c in self.unstaged],
            "untracked": [c.to_dict() for c in self.untracked],
        }


def _unquote(path: str) -> str:
    """Undo git's quoting of paths with special characters.

    Octal escapes are raw bytes of the UTF-8 encoded name.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    body = path[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            octal = body[i + 1:i + 4]
            if len(octal) == 3 and all(c in _OCTAL for c in octal):
                out.append(int(octal, 8) & 0xFF)
                i += 4
                continue
            out += _ESCAPES.get(nxt, nxt).encode("utf-8")
            i += 2
            continue
        out += ch.encode("utf-8")
        i += 1
    return out.decode("utf-8", errors="replace")


def _status_for(code: str, line: str) -> ChangeStatus:
    try:
        return STATUS_CODES[code]
    except KeyError:
        raise StatusParseError(line, code) from None


def parse_porcelain(
    output: str,
) -> tuple[list[FileChange], list[FileChange], list[FileChange]]:
    """Classify porcelain v1 lines into staged, unstaged and untracked changes.

    The first column is the index, the second the work tree. A path with
    both columns set (a partially staged edit) lands in both lists. For
    renames the path reported is the new name.

    Raises:
        StatusParseError: On a status code outside :data:`STATUS_CODES`.
    """
    staged: list[FileChange] = []
    unstaged: list[FileChange] = []
    untracked: list[FileChange] = []
    seen: set[tuple[str, str]] = set()

    def _add(target: list[FileChange], kind: str, change: FileChange) -> None:
        if (kind, change.path) not in seen:
            seen.add((kind, change.path))
            target.append(change)

    for line in output.splitlines():
        if not line.strip():
            continue
        if len(line) < 4 or line[2] != " ":
            raise StatusParseError(line, line[:2])

        index_code, tree_code = line[0], line[1]
        path = line[3:]
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        path = _unquote(path)

        if index_code == UNTRACKED and tree_code == UNTRACKED:
            _add(untracked, "untracked", FileChange(path, ChangeStatus.ADDED))
            continue
        if index_code not in (" ", UNTRACKED):
            _add(staged, "staged", FileChange(path, _status_for(index_code, line)))
        if tree_code not in (" ", UNTRACKED):
            _add(unstaged, "unstaged", FileChange(path, _status_for(tree_code, line)))

    return staged, unstaged, untracked
