"""Chat mode data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ChatRole(str, Enum):
    """Roles a conversation turn can carry"""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatTurn(BaseModel):
    """A single turn sent to the model"""

    role: ChatRole
    content: str


class ModelReply(BaseModel):
    """Reply text from the model, or a diagnostic when the call failed"""

    content: str
    failed: bool = False


class ChatMessage(BaseModel):
    """Transcript entry shown to the user"""

    sender: str  # "You", "Assistant", "System"
    content: str
    is_user: bool = False


class ChatRequest(BaseModel):
    """Request for chat message"""

    message: str


class ChatResponse(BaseModel):
    """Response for chat message"""

    reply: str
    failed: bool = False
    transcript: list[ChatMessage] = []
