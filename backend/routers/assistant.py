"""Assistant API endpoints"""

from __future__ import annotations

import asyncio
import json

from fastapi import APIRouter, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from models.assistant import (
    ActionResponse,
    AssistantState,
    ConnectionStatus,
    DocumentRequest,
    DocumentResponse,
    FileStructureRequest,
    FixRequest,
    GenerateRequest,
    ModeRequest,
)
from models.chat import ChatRequest, ChatResponse
from services.orchestrator import AssistantOrchestrator

router = APIRouter()


def get_orchestrator(request: Request) -> AssistantOrchestrator:
    return request.app.state.orchestrator


def _action_response(orchestrator: AssistantOrchestrator, message: str, outcomes=None) -> ActionResponse:
    return ActionResponse(message=message, outcomes=outcomes or [], state=orchestrator.state)


@router.get("/state", response_model=AssistantState)
async def get_state(request: Request) -> AssistantState:
    """Current mode, processing flag, results and transcript"""
    return get_orchestrator(request).state


@router.put("/mode", response_model=AssistantState)
async def set_mode(body: ModeRequest, request: Request) -> AssistantState:
    orchestrator = get_orchestrator(request)
    orchestrator.set_mode(body.mode)
    return orchestrator.state


@router.put("/document", response_model=DocumentResponse)
async def open_document(body: DocumentRequest, request: Request) -> DocumentResponse:
    """Editor plugin pushes the active document"""
    if not body.path.strip():
        raise HTTPException(status_code=400, detail="Document path is required")
    document = request.app.state.document
    document.open(body.path, body.content, body.language)
    return DocumentResponse(path=document.path, content=document.content, language=document.language)


@router.get("/document", response_model=DocumentResponse)
async def read_document(request: Request) -> DocumentResponse:
    """Editor plugin reads the active document back, e.g. after fixes were applied"""
    document = request.app.state.document
    if not document.get_path():
        raise HTTPException(status_code=404, detail="No active document")
    return DocumentResponse(path=document.path, content=document.content, language=document.language)


@router.post("/analyze", response_model=ActionResponse)
async def analyze(request: Request) -> ActionResponse:
    orchestrator = get_orchestrator(request)
    report = await orchestrator.analyze()
    return _action_response(orchestrator, report)


@router.post("/analyze-workspace", response_model=ActionResponse)
async def analyze_workspace(request: Request) -> ActionResponse:
    orchestrator = get_orchestrator(request)
    report = await orchestrator.analyze_workspace()
    return _action_response(orchestrator, report)


@router.post("/fix", response_model=ActionResponse)
async def fix(body: FixRequest, request: Request) -> ActionResponse:
    orchestrator = get_orchestrator(request)
    message = await orchestrator.fix(apply=body.apply)
    return _action_response(orchestrator, message)


@router.post("/apply-fix", response_model=ActionResponse)
async def apply_fix(request: Request) -> ActionResponse:
    orchestrator = get_orchestrator(request)
    outcomes = await orchestrator.apply_fixes()
    return _action_response(orchestrator, orchestrator.state.status_message, outcomes)


@router.post("/generate", response_model=ActionResponse)
async def generate(body: GenerateRequest, request: Request) -> ActionResponse:
    if not body.description.strip():
        raise HTTPException(status_code=400, detail="Description is required")
    orchestrator = get_orchestrator(request)
    message, outcomes = await orchestrator.generate(body.description, body.language)
    return _action_response(orchestrator, message, outcomes)


@router.post("/file-structure", response_model=ActionResponse)
async def file_structure(body: FileStructureRequest, request: Request) -> ActionResponse:
    if not body.description.strip():
        raise HTTPException(status_code=400, detail="Description is required")
    orchestrator = get_orchestrator(request)
    layout = await orchestrator.generate_file_structure(body.description)
    return _action_response(orchestrator, layout)


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, request: Request) -> ChatResponse:
    """Send a chat message; code requests also create the announced files"""
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")
    orchestrator = get_orchestrator(request)
    reply = await orchestrator.start(orchestrator.send_chat_message, body.message)
    return ChatResponse(reply=reply.content, failed=reply.failed, transcript=orchestrator.state.transcript)


@router.post("/cancel")
async def cancel(request: Request) -> dict:
    orchestrator = get_orchestrator(request)
    orchestrator.cancel()
    return {"status": "cancelling" if orchestrator.state.is_processing else "idle"}


@router.get("/status", response_model=ConnectionStatus)
async def connection_status(request: Request) -> ConnectionStatus:
    """Is the model server reachable and the model installed"""
    orchestrator = get_orchestrator(request)
    config = request.app.state.llm_service.config
    ok, message = await orchestrator.check_connection()
    return ConnectionStatus(ok=ok, message=message, endpoint=config.endpoint, model=config.model)


class StateFeed:
    """Changed field names waiting to be sent to one SSE client

    A field already waiting is not queued again, so the queue never holds
    more than one entry per state field however slowly the client reads.
    """

    def __init__(self, orchestrator: AssistantOrchestrator):
        self.orchestrator = orchestrator
        self.queue: asyncio.Queue[str] = asyncio.Queue(maxsize=len(AssistantState.model_fields))
        self._pending: set[str] = set()
        self._unsubscribe = orchestrator.subscribe(self.push)

    def push(self, field: str, _state: AssistantState) -> None:
        if field in self._pending:
            return
        self._pending.add(field)
        self.queue.put_nowait(field)

    async def next(self) -> dict[str, str]:
        field = await self.queue.get()
        self._pending.discard(field)
        payload = {"field": field, "state": self.orchestrator.state.model_dump(mode="json")}
        return {"event": "state", "data": json.dumps(payload)}

    def close(self) -> None:
        self._unsubscribe()


@router.get("/events")
async def events(request: Request):
    """Stream state changes (SSE) to the editor plugin"""
    feed = StateFeed(get_orchestrator(request))

    async def event_generator():
        try:
            while True:
                yield await feed.next()
        finally:
            feed.close()

    return EventSourceResponse(event_generator())
