"""Load manifest.json."""

from pathlib import Path

from portfolio_engine import store
from portfolio_engine.paths import manifest_path


def load_manifest(path: Path | str | None = None) -> dict:
    """Load manifest.json from disk.

    Args:
        path: Path to the manifest. Defaults to the vault's content tree.

    Returns:
        Parsed manifest dict.

    Raises:
        FileNotFoundError: If the manifest does not exist.
        ValueError: If the document is not a JSON object.
    """
    manifest_file = Path(path) if path else manifest_path()
    data = store.read_json(manifest_file)
    if data is None:
        raise FileNotFoundError(f"Manifest not found: {manifest_file}")
    if not isinstance(data, dict):
        raise ValueError(f"Manifest at {manifest_file} is not a JSON object")
    return data
