"""
Configuration management for Flamenode.

This module handles loading and accessing configuration values from config.yaml.
It provides a centralized way to manage connection settings, sourcing toggles
and media handling without changing code.
"""

import copy
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

from pydantic import BaseModel, Field

from .exceptions import ConfigurationError


class ConfigManager:
    """
    Manages configuration loading and access for Flamenode.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file, merged over the defaults."""
        self._config = self._get_default_config()

        if not self.config_path.exists():
            logging.info(f"Configuration file not found: {self.config_path}, using defaults")
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load configuration: {e}")
            return

        if not isinstance(loaded, dict):
            logging.error(f"Configuration in {self.config_path} is not a mapping, using defaults")
            return

        self._config = _deep_merge(self._config, loaded)
        logging.info(f"Configuration loaded from {self.config_path}")

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "firebase": {
                "database_url": None,
                "storage_bucket": None,
                "auth_token": None,
                "timeout": 30.0
            },
            "flamelink": {
                "environment": "production",
                "locales": None,
                "content": True,
                "navigation": True,
                "globals": True,
                "populate": True
            },
            "media": {
                "download": True,
                "cache_dir": ".flamenode/media",
                "supported_image_types": ["png", "jpg", "jpeg"],
                "timeout": 30.0
            },
            "database": {
                "filename": "flamenode.db"
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "paths": {
                "log_file": "flamenode.log",
                "output_file": None
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "flamelink.environment")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("flamelink.environment")  # Returns "production"
            config.get("media.cache_dir")  # Returns ".flamenode/media"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def environment(self) -> str:
        """Get the Flamelink environment."""
        return self.get("flamelink.environment", "production")

    @property
    def database_filename(self) -> str:
        """Get database filename."""
        return self.get("database.filename", "flamenode.db")

    @property
    def media_cache_dir(self) -> str:
        """Get the directory downloaded media is stored in."""
        return self.get("media.cache_dir", ".flamenode/media")

    @property
    def supported_image_types(self) -> List[str]:
        """Get the image subtypes that are downloaded."""
        return self.get("media.supported_image_types", ["png", "jpg", "jpeg"])

    @property
    def download_media(self) -> bool:
        """Whether images are downloaded and linked to local files."""
        return bool(self.get("media.download", True))

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "flamenode.log")

    def source_options(self) -> "SourceOptions":
        """Build the sourcing options from the `flamelink` section."""
        return SourceOptions.model_validate(self.get_section("flamelink"))


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


ContentFilter = Union[bool, List[Union[str, Dict[str, Dict[str, Any]]]]]


class SourceOptions(BaseModel):
    """
    What to source from the CMS and how.
    """

    environment: str = Field(
        "production",
        description="Flamelink environment to read from"
    )

    locales: Optional[List[str]] = Field(
        None,
        description="Locales to process; all locales of the CMS when None"
    )

    content: ContentFilter = Field(
        True,
        description="True/False, or a list of schema ids (optionally {id: {options}})"
    )

    navigation: Union[bool, List[str]] = Field(
        True,
        description="True/False, or a list of navigation keys"
    )

    globals: bool = Field(
        True,
        description="Whether to source the globals record"
    )

    populate: bool = Field(
        True,
        description="Expand relational fields before normalization"
    )

    def content_options(self, schema_id: str) -> Optional[Dict[str, Any]]:
        """
        Per-schema fetch options, or None when the schema is filtered out.

        Returns:
            Options mapping with at least `populate`
        """
        if self.content is False:
            return None
        if self.content is True:
            return {"populate": self.populate}

        for item in self.content:
            if isinstance(item, str) and item == schema_id:
                return {"populate": self.populate}
            if isinstance(item, dict) and schema_id in item:
                return {"populate": self.populate, **(item[schema_id] or {})}
        return None


def validate_firebase_config(config: ConfigManager) -> Dict[str, Any]:
    """
    Check the remote-connection settings before anything is fetched.

    Returns:
        The `firebase` section

    Raises:
        ConfigurationError: If a required setting is missing
    """
    firebase = config.get_section("firebase")

    if not firebase.get("database_url") or not firebase.get("storage_bucket"):
        raise ConfigurationError(
            'Make sure you always specify the "database_url" and "storage_bucket" '
            'options in the firebase section of the configuration'
        )

    if not firebase.get("auth_token"):
        raise ConfigurationError(
            'An "auth_token" (database secret or ID token) is required in the firebase '
            'section of the configuration'
        )

    return firebase


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
