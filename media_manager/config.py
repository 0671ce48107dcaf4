"""
Configuration module for Media Manager.
"""

import os
from typing import Any, Dict, Optional

import yaml


class Config:
    """Configuration manager for the media manager."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration.

        Args:
            config_path: Path to YAML configuration file. If None, uses default.
        """
        self._config: Dict[str, Any] = {}
        self._config_path = config_path

        if config_path and os.path.exists(config_path):
            self.load_from_file(config_path)
        else:
            self._load_defaults()

    def _load_defaults(self) -> None:
        """Load default configuration values."""
        default_config = os.path.join(
            os.path.dirname(__file__), "..", "config", "config.yaml"
        )
        if os.path.exists(default_config):
            self.load_from_file(default_config)
        else:
            self._config = self._get_builtin_defaults()

    def _get_builtin_defaults(self) -> Dict[str, Any]:
        """Return built-in default configuration."""
        return {
            "library": {
                "supported_formats": ["mp3", "flac", "wav", "m4a", "ogg", "opus", "aiff"],
            },
            "storage": {
                "data_dir": ".media_manager",
                "manifest_filename": "files.parquet",
                "analysis_filename": "analysis.parquet",
            },
            "analysis": {
                "sample_rate": 22050,
                "duration_limit": 60,
                "n_mfcc": 20,
            },
            "recommender": {
                "metric": "cosine",
                "normalization": "standard",
                "default_num": 10,
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        }

    def load_from_file(self, config_path: str) -> None:
        """Load configuration from YAML file.

        Values missing from the file fall back to the built-in defaults.

        Args:
            config_path: Path to YAML configuration file.
        """
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}

        self._config = self._get_builtin_defaults()
        for section, values in loaded.items():
            if isinstance(values, dict) and isinstance(self._config.get(section), dict):
                self._config[section].update(values)
            else:
                self._config[section] = values

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-separated key.

        Args:
            key: Dot-separated configuration key (e.g., "storage.data_dir")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value by dot-separated key.

        Args:
            key: Dot-separated configuration key
            value: Value to set
        """
        keys = key.split(".")
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    @property
    def library(self) -> Dict[str, Any]:
        """Get library scanning configuration."""
        return self._config.get("library", {})

    @property
    def storage(self) -> Dict[str, Any]:
        """Get storage configuration."""
        return self._config.get("storage", {})

    @property
    def analysis(self) -> Dict[str, Any]:
        """Get feature extraction configuration."""
        return self._config.get("analysis", {})

    @property
    def recommender(self) -> Dict[str, Any]:
        """Get recommender configuration."""
        return self._config.get("recommender", {})

    @property
    def logging(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self._config.get("logging", {})

    @property
    def supported_formats(self) -> list:
        """Get audio file extensions picked up when scanning."""
        formats = self.get(
            "library.supported_formats", ["mp3", "flac", "wav", "m4a"]
        )
        return [f.lower().lstrip(".") for f in formats]

    @property
    def default_num(self) -> int:
        """Get default number of recommendations."""
        return self.get("recommender.default_num", 10)

    def data_dir(self, library_root: str) -> str:
        """Get the store directory for a library.

        Relative directories are resolved against the library root.

        Args:
            library_root: Canonical library root directory.

        Returns:
            Absolute store directory.
        """
        data_dir = self.get("storage.data_dir", ".media_manager")
        if not os.path.isabs(data_dir):
            data_dir = os.path.join(library_root, data_dir)
        return data_dir

    def save(self, path: str) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path to save configuration.
        """
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w') as f:
            yaml.dump(self._config, f, default_flow_style=False)


# Global config instance
_config_instance: Optional[Config] = None


def get_config(config_path: Optional[str] = None) -> Config:
    """Get global configuration instance.

    Args:
        config_path: Optional path to configuration file.

    Returns:
        Configuration instance.
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config(config_path)
    return _config_instance


def set_config(config: Config) -> None:
    """Set global configuration instance.

    Args:
        config: Configuration instance.
    """
    global _config_instance
    _config_instance = config
