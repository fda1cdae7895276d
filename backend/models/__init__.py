"""Models module - Pydantic data models"""

from .chat import ChatMessage, ChatRequest, ChatResponse, ChatRole, ChatTurn, ModelReply
from .artifact import ApplyOutcome, Artifact, ArtifactKind, ExtractionResult
from .assistant import (
    ActionResponse,
    AssistantMode,
    AssistantState,
    ConnectionStatus,
    DocumentRequest,
    DocumentResponse,
    FileStructureRequest,
    FixRequest,
    GenerateRequest,
    ModeRequest,
)
from .config import OllamaConfig, WorkspaceConfig
from .diff import DiffHunk, DiffResult

__all__ = [
    # Chat models
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ChatRole",
    "ChatTurn",
    "ModelReply",
    # Artifact models
    "ApplyOutcome",
    "Artifact",
    "ArtifactKind",
    "ExtractionResult",
    # Assistant models
    "ActionResponse",
    "AssistantMode",
    "AssistantState",
    "ConnectionStatus",
    "DocumentRequest",
    "DocumentResponse",
    "FileStructureRequest",
    "FixRequest",
    "GenerateRequest",
    "ModeRequest",
    # Config models
    "OllamaConfig",
    "WorkspaceConfig",
    # Diff models
    "DiffHunk",
    "DiffResult",
]
