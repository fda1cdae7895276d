import sys
from pathlib import Path

import pytest

BACKEND = Path(__file__).resolve().parents[1]
backend_str = str(BACKEND)
if backend_str not in sys.path:
    sys.path.insert(0, backend_str)

from fakes import RecordingSink  # noqa: E402
from services.workspace import EditorDocument  # noqa: E402


@pytest.fixture
def document():
    doc = EditorDocument()
    doc.open("src/app.py", "def add(a, b):\n    return a - b\n")
    return doc


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.llm_code_assistant and Ollama env"""
    monkeypatch.setenv("LLM_ASSISTANT_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("OLLAMA_ENDPOINT", raising=False)
    monkeypatch.delenv("OLLAMA_MODEL", raising=False)
