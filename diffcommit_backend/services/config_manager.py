"""
Configuration Manager - Handle backend settings persistence
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manage configuration persistence"""

    _instance = None
    _config_file = None

    def __init__(self):
        # 1st choice: environment variable, 2nd: ~/.diffcommit
        config_dir = os.environ.get("DIFFCOMMIT_CONFIG_DIR") or os.path.expanduser("~/.diffcommit")

        try:
            config_path = Path(config_dir)
            config_path.mkdir(parents=True, exist_ok=True)
            self._config_file = config_path / "config.json"
        except OSError as e:
            logger.warning("[ConfigManager] Cannot write to %s: %s", config_dir, e)
            self._config_file = None

        # Last resort: temp directory
        if not self._config_file:
            tmp_dir = Path(tempfile.gettempdir()) / "diffcommit"
            tmp_dir.mkdir(parents=True, exist_ok=True)
            self._config_file = tmp_dir / "config.json"
            logger.warning("[ConfigManager] Using temporary config path: %s", self._config_file)

        self._config = self._load_config()

    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = ConfigManager()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the singleton so the next call re-reads the environment"""
        cls._instance = None

    @property
    def config_file(self) -> Path:
        return self._config_file

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file, filling in missing defaults"""
        config = self._default_config()
        if not self._config_file.exists():
            return config

        try:
            with open(self._config_file) as f:
                stored = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("[ConfigManager] Error loading config: %s", e)
            return config

        for key, value in stored.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key] = {**config[key], **value}
            else:
                config[key] = value
        return config

    def _default_config(self) -> dict[str, Any]:
        """Get default configuration"""
        return {
            "provider": "gemini",
            "gemini": {"apiKey": "", "model": "gemini-2.5-flash"},
            "openai": {"apiKey": "", "model": "gpt-4"},
            "openrouter": {"apiKey": "", "model": "openai/gpt-4o-mini", "siteName": "Diff & Commit"},
            "vllm": {
                "endpoint": "http://localhost:8000",
                "apiKey": "",
                "model": "meta-llama/Llama-2-7b-chat-hf",
            },
            "editing": {
                "defaultMode": "polish",
                "maxRangeChars": 2000,
                "temperature": 0.3,
                "timeoutSeconds": 60,
                "maxRetries": 3,
                "retryBaseSeconds": 1.0,
            },
            "server": {"host": "127.0.0.1", "port": 8000},
        }

    def get_config(self) -> dict[str, Any]:
        """Get current configuration"""
        # Reload config from file to ensure we have the latest
        self._config = self._load_config()
        return self._config.copy()

    def save_config(self, config: dict[str, Any]):
        """Save configuration to file"""
        # Merge with existing config
        self._config.update(config)

        # Ensure config directory exists
        self._config_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self._config_file, "w") as f:
                json.dump(self._config, f, indent=2)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}")

    def get(self, key: str, default=None):
        """Get specific config value"""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set specific config value"""
        self._config[key] = value
        self.save_config(self._config)
