"""Services module - Business logic layer"""

from .llm_service import LLMService, TransportError
from .config_manager import ConfigManager
from .conversation import ConversationSession
from .diff_generator import DiffGenerator
from .orchestrator import AssistantOrchestrator
from .workspace import EditorDocument, LocalWorkspace, WorkspaceApplier

__all__ = [
    "LLMService",
    "TransportError",
    "ConfigManager",
    "ConversationSession",
    "DiffGenerator",
    "AssistantOrchestrator",
    "EditorDocument",
    "LocalWorkspace",
    "WorkspaceApplier",
]
