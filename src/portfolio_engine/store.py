"""Read and write the vault's JSON, YAML and text documents.

Every write lands in a temporary sibling first and is renamed over the
target, so a reader sees either the old document or the new one.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_text(path: Path | str) -> str | None:
    """Return the file's text, or None when it does not exist."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def write_text(path: Path | str, content: str) -> None:
    _atomic_write(Path(path), content)


def read_json(path: Path | str) -> Any:
    """Parse a JSON document. Returns None when the file does not exist."""
    raw = read_text(path)
    if raw is None:
        return None
    return json.loads(raw)


def write_json(path: Path | str, data: Any) -> None:
    """Write JSON with two-space indentation and a trailing newline."""
    _atomic_write(Path(path), json.dumps(data, indent=2) + "\n")


def read_yaml(path: Path | str) -> dict | None:
    """Parse a YAML mapping document.

    Returns:
        The mapping, an empty dict for an empty document, or None when the
        file does not exist.

    Raises:
        ValueError: If the document is not a YAML mapping.
        yaml.YAMLError: If the YAML is malformed.
    """
    raw = read_text(path)
    if raw is None:
        return None
    data = yaml.safe_load(raw)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} is not a YAML mapping")
    return data


def write_yaml(path: Path | str, data: dict) -> None:
    _atomic_write(Path(path), yaml.safe_dump(data, sort_keys=False, allow_unicode=True))
