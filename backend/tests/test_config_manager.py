"""Tests for ConfigManager"""

import json

from models.config import DEFAULT_ENDPOINT, DEFAULT_MODEL
from services.config_manager import ConfigManager


def test_defaults_without_config_file(tmp_path):
    manager = ConfigManager(tmp_path)
    ollama = manager.ollama_config()

    assert ollama.endpoint == DEFAULT_ENDPOINT == "http://localhost:11434"
    assert ollama.model == DEFAULT_MODEL == "codellama:34b"
    assert ollama.timeout_seconds == 120
    assert manager.workspace_config().root == "."


def test_env_dir_is_used(tmp_path, monkeypatch):
    monkeypatch.setenv("LLM_ASSISTANT_CONFIG_DIR", str(tmp_path / "from-env"))
    assert ConfigManager().config_file == tmp_path / "from-env" / "config.json"


def test_file_values_layer_over_defaults(tmp_path):
    (tmp_path / "config.json").write_text(json.dumps({"ollama": {"model": "deepseek-coder:6.7b"}}))
    ollama = ConfigManager(tmp_path).ollama_config()

    assert ollama.model == "deepseek-coder:6.7b"
    assert ollama.endpoint == DEFAULT_ENDPOINT


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    (tmp_path / "config.json").write_text("{not json")
    assert ConfigManager(tmp_path).ollama_config().model == DEFAULT_MODEL


def test_environment_overrides_file(tmp_path, monkeypatch):
    (tmp_path / "config.json").write_text(json.dumps({"ollama": {"model": "from-file"}}))
    monkeypatch.setenv("OLLAMA_ENDPOINT", "http://gpu-box:11434")
    monkeypatch.setenv("OLLAMA_MODEL", "codellama:13b")

    ollama = ConfigManager(tmp_path).ollama_config()

    assert ollama.endpoint == "http://gpu-box:11434"
    assert ollama.model == "codellama:13b"


def test_save_merges_and_persists(tmp_path):
    manager = ConfigManager(tmp_path)
    manager.save_config({"ollama": {"model": "codellama:7b"}})

    stored = json.loads((tmp_path / "config.json").read_text())
    assert stored["ollama"]["model"] == "codellama:7b"
    assert stored["ollama"]["endpoint"] == DEFAULT_ENDPOINT
    assert ConfigManager(tmp_path).ollama_config().model == "codellama:7b"


def test_get_and_set(tmp_path):
    manager = ConfigManager(tmp_path)
    manager.set("workspace", {"root": "/srv/project"})
    assert manager.get("workspace") == {"root": "/srv/project"}
    assert ConfigManager(tmp_path).workspace_config().root == "/srv/project"
