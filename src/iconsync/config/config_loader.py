"""
Configuration loader for the icon sync pipeline.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..core.exceptions import ConfigError


logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "iconsync" / "settings.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "github": {
        "api_url": "https://api.github.com",
        "branch": None,
        "manifest_path": "figma-icons-manifest.json",
        "commit_message_template": "feat: Update icons manifest - {count} icons",
        "timeout": 30,
        "user_agent": "iconsync/1.0",
    },
    "extraction": {
        "icon_size": 24,
        "include_empty_groups": True,
    },
    "settings": {
        "cache_path": str(DEFAULT_SETTINGS_PATH),
    },
    "logging": {
        "level": "INFO",
        "structured": False,
    },
}

# Environment variable -> (section, key, converter)
ENV_OVERRIDES = {
    "ICONSYNC_GITHUB_API_URL": ("github", "api_url", str),
    "ICONSYNC_GITHUB_BRANCH": ("github", "branch", str),
    "ICONSYNC_TIMEOUT": ("github", "timeout", float),
    "ICONSYNC_SETTINGS_PATH": ("settings", "cache_path", str),
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class SyncConfig:
    """
    Configuration for the icon sync pipeline.

    Loads an optional YAML file over built-in defaults, then applies
    environment variable overrides.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (optional)
        """
        self.config_path = Path(config_path) if config_path else None
        loaded = self._load_config() if self.config_path else {}
        self.config = _deep_merge(DEFAULT_CONFIG, loaded)
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise ConfigError(f"Config file not found: {self.config_path}")

        logger.info(f"Loading config from: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {self.config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigError(f"Config file {self.config_path} must contain a mapping")

        for section in DEFAULT_CONFIG:
            if section not in config:
                continue
            if config[section] is None:
                # An empty section keeps its defaults
                del config[section]
            elif not isinstance(config[section], dict):
                raise ConfigError(f"Config section '{section}' in {self.config_path} must be a mapping")
        return config

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded config."""
        for env_var, (section, key, convert) in ENV_OVERRIDES.items():
            raw = os.environ.get(env_var)
            if raw is None or raw.strip() == "":
                continue
            try:
                value = convert(raw.strip())
            except ValueError as e:
                raise ConfigError(f"Invalid value for {env_var}: {raw!r}") from e
            self.config.setdefault(section, {})[key] = value
            logger.debug(f"Config override from {env_var}: {section}.{key}")

    def get_github_config(self) -> Dict[str, Any]:
        """Get remote publishing configuration."""
        return self.config.get("github", {})

    def get_extraction_config(self) -> Dict[str, Any]:
        """Get extraction configuration."""
        return self.config.get("extraction", {})

    def get_settings_cache_path(self) -> Path:
        """Get the path of the cached sync settings file."""
        return Path(self.config.get("settings", {}).get("cache_path", DEFAULT_SETTINGS_PATH)).expanduser()

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self.config.get("logging", {})

    @staticmethod
    def get_env_repository() -> Optional[str]:
        """Repository coordinate from ICONSYNC_GITHUB_REPO, if set."""
        return os.environ.get("ICONSYNC_GITHUB_REPO") or None

    @staticmethod
    def get_env_token() -> Optional[str]:
        """Access token from ICONSYNC_GITHUB_TOKEN, if set."""
        return os.environ.get("ICONSYNC_GITHUB_TOKEN") or None
