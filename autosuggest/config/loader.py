"""Configuration loading utilities."""

import json
from pathlib import Path

from loguru import logger

from autosuggest.config.schema import Config


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".autosuggest" / "config.json"


def get_data_dir() -> Path:
    """Get the autosuggest data directory."""
    from autosuggest.utils.helpers import get_data_path
    return get_data_path()


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            data = _migrate_config(data)
            config = Config.model_validate(data)
            logger.info("Loaded configuration from {}", path)
            return config
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Failed to load config from {}: {}", path, e)
            logger.warning("Using default configuration.")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(by_alias=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _migrate_config(data: dict) -> dict:
    """Migrate old config formats to current."""
    autocomplete_cfg = data.setdefault("autocomplete", {})

    # Move legacy top-level panel options -> autocomplete.*
    for key in ("bestArticle", "hitsPerPage", "keyboardShortcut", "inputSelector"):
        if key in data:
            value = data.pop(key)
            autocomplete_cfg.setdefault(key, value)

    # Move legacy recentSearches.limit -> autocomplete.recentSearchLimit
    legacy_recent = data.pop("recentSearches", None)
    if isinstance(legacy_recent, dict) and "limit" in legacy_recent:
        autocomplete_cfg.setdefault("recentSearchLimit", legacy_recent["limit"])

    # Older configs stored the base URL without a trailing slash
    base_url = data.get("baseUrl")
    if isinstance(base_url, str) and base_url and not base_url.endswith("/"):
        data["baseUrl"] = f"{base_url}/"

    return data
