"""Tests for the HTTP surface"""

import json

import pytest
from fastapi.testclient import TestClient

import main
from fakes import FakeTransport, RecordingSink
from routers.assistant import StateFeed
from services.llm_service import TransportError
from services.orchestrator import NEED_ANALYSIS, AssistantOrchestrator
from services.workspace import EditorDocument


@pytest.fixture
def client(tmp_path):
    with TestClient(main.app) as test_client:
        yield test_client


def _install(client, *replies, sink=None):
    """Swap the live orchestrator for one backed by scripted replies"""
    state = client.app.state
    orchestrator = AssistantOrchestrator(
        transport=FakeTransport(*replies),
        document=state.document,
        files=sink if sink is not None else RecordingSink(),
        model_name="codellama:34b",
    )
    state.orchestrator = orchestrator
    return orchestrator


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_state_and_mode(client):
    assert client.get("/api/assistant/state").json()["mode"] == "analysis"
    response = client.put("/api/assistant/mode", json={"mode": "generate"})
    assert response.status_code == 200
    assert response.json()["mode"] == "generate"


def test_document_round_trip(client):
    assert client.get("/api/assistant/document").status_code == 404

    pushed = client.put("/api/assistant/document", json={"path": "lib/calc.py", "content": "x = 1\n"})
    assert pushed.json()["language"] == "python"

    assert client.get("/api/assistant/document").json()["content"] == "x = 1\n"


def test_analyze_fix_apply_flow(client):
    _install(client, "## Critical Issues\nwrong sign", "```python\ndef sub(a, b):\n    return a - b\n```")
    client.put("/api/assistant/document", json={"path": "calc.py", "content": "def sub(a, b):\n    return a + b\n"})

    analysis = client.post("/api/assistant/analyze").json()
    assert analysis["message"].startswith("Analysis of calc.py:")

    fix = client.post("/api/assistant/fix", json={"apply": False}).json()
    assert fix["state"]["fixed_code"] == "def sub(a, b):\n    return a - b"

    applied = client.post("/api/assistant/apply-fix").json()
    assert applied["message"] == "Fixes applied successfully."
    assert applied["outcomes"][0]["diff"]["snapshot"] == "def sub(a, b):\n    return a + b\n"
    assert client.get("/api/assistant/document").json()["content"] == "def sub(a, b):\n    return a - b"


def test_fix_without_analysis(client):
    orchestrator = _install(client)
    response = client.post("/api/assistant/fix", json={})
    assert response.json()["message"] == NEED_ANALYSIS
    assert orchestrator.chat_session.transport.calls == []


def test_generate_creates_files(client):
    sink = RecordingSink()
    _install(client, "web/index.html\n```html\n<h1>Hi</h1>\n```\n", sink=sink)

    response = client.post("/api/assistant/generate", json={"description": "landing page", "language": "html"})

    assert response.status_code == 200
    assert response.json()["outcomes"][0]["message"] == "Created file: web/index.html"
    assert sink.created == {"web/index.html": "<h1>Hi</h1>"}


def test_generate_requires_description(client):
    assert client.post("/api/assistant/generate", json={"description": "  "}).status_code == 400


def test_chat_failure_is_a_normal_response(client):
    _install(client, TransportError("connection refused"))

    response = client.post("/api/assistant/chat", json={"message": "hi"})

    assert response.status_code == 200
    body = response.json()
    assert body["failed"] is True
    assert [m["sender"] for m in body["transcript"]].count("System") == 1
    assert client.get("/api/assistant/state").json()["is_processing"] is False


def test_chat_requires_message(client):
    assert client.post("/api/assistant/chat", json={"message": ""}).status_code == 400


def test_config_update_reaches_running_services(client):
    response = client.put("/api/config", json={"ollama": {"model": "codellama:7b"}})
    assert response.status_code == 200

    assert client.get("/api/config").json()["ollama"]["model"] == "codellama:7b"
    assert client.app.state.llm_service.config.model == "codellama:7b"
    assert client.get("/api/assistant/state").json()["model_name"] == "codellama:7b"


def test_workspace_update_moves_generated_files(client, tmp_path):
    new_root = tmp_path / "newroot"
    response = client.put("/api/config", json={"workspace": {"root": str(new_root)}})
    assert response.status_code == 200

    orchestrator = client.app.state.orchestrator
    assert client.app.state.workspace.root == new_root.resolve()
    assert orchestrator.workspace is client.app.state.workspace
    assert orchestrator.applier.files is client.app.state.workspace

    orchestrator.chat_session.transport = FakeTransport("pkg/mod.py\n```python\nX = 1\n```\n")
    orchestrator.task_session.transport = orchestrator.chat_session.transport
    generated = client.post("/api/assistant/generate", json={"description": "a module"})

    assert generated.json()["message"] == "Created 1 of 1 file(s)."
    assert (new_root / "pkg" / "mod.py").read_text() == "X = 1"


def test_config_update_rejects_bad_values(client):
    response = client.put("/api/config", json={"ollama": {"timeoutSeconds": "soon"}})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_state_feed_merges_repeated_fields():
    orchestrator = AssistantOrchestrator(
        transport=FakeTransport(),
        document=EditorDocument(),
        files=RecordingSink(),
        model_name="codellama:34b",
    )
    feed = StateFeed(orchestrator)

    for mode in ("fix", "generate", "analysis", "fix"):
        orchestrator.set_mode(mode)
    orchestrator.set_model_name("codellama:7b")

    assert feed.queue.qsize() == 2
    first = json.loads((await feed.next())["data"])
    assert first["field"] == "mode"
    assert first["state"]["mode"] == "fix"

    orchestrator.set_mode("generate")
    assert feed.queue.qsize() == 2

    feed.close()
    orchestrator.set_mode("analysis")
    assert feed.queue.qsize() == 2
