"""
Configuration Manager - Load and persist assistant settings

Loaded once by the application entry point; the resulting objects are passed
to the components that need them.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from models.config import DEFAULT_ENDPOINT, DEFAULT_MODEL, OllamaConfig, WorkspaceConfig

CONFIG_DIR_ENV = "LLM_ASSISTANT_CONFIG_DIR"
ENDPOINT_ENV = "OLLAMA_ENDPOINT"
MODEL_ENV = "OLLAMA_MODEL"


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Manage configuration persistence"""

    def __init__(self, config_dir: str | os.PathLike | None = None):
        self._config_file = self._resolve_config_file(config_dir)
        self._config = self._load_config()

    @staticmethod
    def _resolve_config_file(config_dir: str | os.PathLike | None) -> Path:
        # Explicit argument, then environment, then the home directory
        candidates = [config_dir, os.environ.get(CONFIG_DIR_ENV), os.path.expanduser("~/.llm_code_assistant")]
        for candidate in candidates:
            if not candidate:
                continue
            config_path = Path(candidate)
            try:
                config_path.mkdir(parents=True, exist_ok=True)
                return config_path / "config.json"
            except OSError as e:
                print(f"[ConfigManager] Cannot write to {config_path}: {e}")

        tmp_dir = Path(tempfile.gettempdir()) / "llm_code_assistant"
        tmp_dir.mkdir(parents=True, exist_ok=True)
        print(f"[ConfigManager] Using temporary config path: {tmp_dir / 'config.json'}")
        return tmp_dir / "config.json"

    @property
    def config_file(self) -> Path:
        return self._config_file

    def _default_config(self) -> dict[str, Any]:
        """Get default configuration"""
        return {
            "ollama": {
                "endpoint": DEFAULT_ENDPOINT,
                "model": DEFAULT_MODEL,
                "temperature": 0.2,
                "topP": 0.95,
                "numPredict": 4000,
                "timeoutSeconds": 120,
                "maxRetries": 2,
            },
            "workspace": {"root": "."},
            "server": {"host": "127.0.0.1", "port": 8000},
        }

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file, layered over the defaults"""
        defaults = self._default_config()
        if not self._config_file.exists():
            return defaults

        try:
            with open(self._config_file, encoding="utf-8") as f:
                stored = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            print(f"[ConfigManager] Error loading config: {e}")
            return defaults

        if not isinstance(stored, dict):
            print("[ConfigManager] Ignoring config file without a JSON object")
            return defaults
        return _deep_merge(defaults, stored)

    def get_config(self) -> dict[str, Any]:
        """Get current configuration"""
        return copy.deepcopy(self._config)

    def save_config(self, config: dict[str, Any]) -> None:
        """Merge ``config`` into the current settings and write them to disk"""
        self._config = _deep_merge(self._config, config)
        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self._config_file, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}")

    def get(self, key: str, default=None):
        """Get specific config value"""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set specific config value"""
        self.save_config({key: value})

    def ollama_config(self) -> OllamaConfig:
        """Typed Ollama settings; OLLAMA_ENDPOINT / OLLAMA_MODEL win over the file"""
        values = dict(self._config.get("ollama", {}))
        if os.environ.get(ENDPOINT_ENV):
            values["endpoint"] = os.environ[ENDPOINT_ENV]
        if os.environ.get(MODEL_ENV):
            values["model"] = os.environ[MODEL_ENV]
        return OllamaConfig.model_validate(values)

    def workspace_config(self) -> WorkspaceConfig:
        return WorkspaceConfig.model_validate(self._config.get("workspace", {}))
