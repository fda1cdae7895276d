"""Assistant mode data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from .artifact import ApplyOutcome
from .chat import ChatMessage


class AssistantMode(str, Enum):
    """Which task the assistant is set up for"""

    ANALYSIS = "analysis"
    FIX = "fix"
    GENERATE = "generate"


class AssistantState(BaseModel):
    """Observable state exposed to the presentation layer"""

    mode: AssistantMode = AssistantMode.ANALYSIS
    is_processing: bool = False
    status_message: str = "Ready"
    analysis_result: str = ""
    fix_result: str = ""  # Raw model reply for the last fix request
    fixed_code: str = ""  # Code extracted from fix_result
    transcript: list[ChatMessage] = []
    model_name: str = ""


class ModeRequest(BaseModel):
    """Request to switch assistant mode"""

    mode: AssistantMode


class DocumentRequest(BaseModel):
    """Active document pushed by the editor plugin"""

    path: str
    content: str
    language: str | None = None  # Derived from the path when omitted


class DocumentResponse(BaseModel):
    """Active document as currently held by the backend"""

    path: str
    content: str
    language: str


class FixRequest(BaseModel):
    """Request to generate fixes for the last analysis"""

    apply: bool = False


class GenerateRequest(BaseModel):
    """Request to generate files from a description"""

    description: str
    language: str | None = None


class FileStructureRequest(BaseModel):
    """Request for a proposed project layout"""

    description: str


class ActionResponse(BaseModel):
    """Result of a single assistant action"""

    message: str
    outcomes: list[ApplyOutcome] = []
    state: AssistantState


class ConnectionStatus(BaseModel):
    """Model server reachability"""

    ok: bool
    message: str
    endpoint: str
    model: str
