"""
Configuration management for VoiceNav.
Loads settings from config.json and provides access to configuration values.
"""

import copy
import json
import os
import logging
from typing import Dict, Any, List, Optional


DEFAULT_CONFIG: Dict[str, Any] = {
    "language": "en",
    "fallback_language": "en",
    "ai": False,
    "api": {
        "base_url": "http://127.0.0.1:35248",
        "timeout": 10.0,
        "legacy": False,
    },
    "search": {
        "types": ["lexical"],
        "limit": 5,
    },
    "speech": {
        "listen_timeout": 8.0,
        "rate": 150,
        "volume": 0.9,
    },
    "stt": {
        "model_size": "base",
        "device": "cpu",
        "compute_type": "int8",
        "phrase_seconds": 4.0,
    },
    "audio_cues": True,
    "locales_path": "data/locales/",
    "logs_path": "data/logs/",
}


class Config:
    """
    Configuration manager for VoiceNav.
    Loads settings from config.json and provides typed access.
    """

    def __init__(self, config_path: str = "config.json"):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration JSON file
        """
        self.logger = logging.getLogger("voicenav.config")
        self.config_path = config_path
        self.config: Dict[str, Any] = {}
        self.load()

    def load(self) -> bool:
        """
        Load configuration from JSON file.
        Creates default config if file doesn't exist.

        Missing keys are filled in from the defaults, so a partial file
        only overrides what it names.

        Returns:
            True if loaded successfully, False otherwise
        """
        try:
            if os.path.exists(self.config_path):
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                if not isinstance(loaded, dict):
                    raise ValueError("top-level JSON value must be an object")
                self.config = _merge(copy.deepcopy(DEFAULT_CONFIG), loaded)
                self.logger.info(f"Configuration loaded from {self.config_path}")
                return True
            else:
                self.logger.warning(f"Config file not found: {self.config_path}, using defaults")
                self._create_default_config()
                return False
        except Exception as e:
            self.logger.error(f"Error loading configuration: {e}", exc_info=True)
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return False

    def _create_default_config(self):
        """Create default configuration."""
        self.config = copy.deepcopy(DEFAULT_CONFIG)
        self.save()
        self.logger.info("Created default configuration file")

    def save(self) -> bool:
        """
        Save current configuration to file.

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            directory = os.path.dirname(self.config_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2, ensure_ascii=False)
            self.logger.info(f"Configuration saved to {self.config_path}")
            return True
        except Exception as e:
            self.logger.error(f"Error saving configuration: {e}", exc_info=True)
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation (e.g., "api.base_url").

        Args:
            key: Configuration key (supports dot notation for nested keys)
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> bool:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key (supports dot notation for nested keys)
            value: Value to set

        Returns:
            True if set successfully, False otherwise
        """
        try:
            keys = key.split('.')
            config = self.config

            # Navigate to parent dict
            for k in keys[:-1]:
                if k not in config:
                    config[k] = {}
                config = config[k]

            config[keys[-1]] = value
            return True
        except Exception as e:
            self.logger.error(f"Error setting configuration: {e}", exc_info=True)
            return False

    # Convenience properties
    @property
    def language(self) -> str:
        return self.get("language", "en")

    @property
    def fallback_language(self) -> str:
        return self.get("fallback_language", "en")

    @property
    def api_base_url(self) -> str:
        return self.get("api.base_url", DEFAULT_CONFIG["api"]["base_url"])

    @property
    def api_timeout(self) -> float:
        return float(self.get("api.timeout", 10.0))

    @property
    def api_legacy(self) -> bool:
        return bool(self.get("api.legacy", False))

    @property
    def search_types(self) -> List[str]:
        """Search types to submit; semantic search is added when AI is enabled."""
        types = list(self.get("search.types", ["lexical"]))
        if self.get("ai", False) and "semantic" not in types:
            types.append("semantic")
        return types

    @property
    def search_limit(self) -> int:
        return int(self.get("search.limit", 5))

    @property
    def listen_timeout(self) -> Optional[float]:
        value = self.get("speech.listen_timeout", 8.0)
        return None if value is None else float(value)

    @property
    def audio_cues(self) -> bool:
        return bool(self.get("audio_cues", True))

    @property
    def locales_path(self) -> str:
        return self.get("locales_path", "data/locales/")

    @property
    def logs_path(self) -> str:
        return self.get("logs_path", "data/logs/")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base
