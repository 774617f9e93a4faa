"""Configuration module for autosuggest."""

from autosuggest.config.loader import get_config_path, load_config
from autosuggest.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
