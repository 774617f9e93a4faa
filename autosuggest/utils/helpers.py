"""Filesystem helpers."""

from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Get the autosuggest data directory (~/.autosuggest)."""
    return ensure_dir(Path.home() / ".autosuggest")
