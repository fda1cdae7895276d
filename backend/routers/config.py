"""Configuration API endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ValidationError

from models.config import OllamaConfig, WorkspaceConfig
from services.llm_service import LLMService
from services.workspace import LocalWorkspace

router = APIRouter()


class ConfigUpdateRequest(BaseModel):
    """Request to update configuration"""

    ollama: dict | None = None
    workspace: dict | None = None


class ConfigResponse(BaseModel):
    """Configuration response"""

    ollama: dict
    workspace: dict


class ValidateResponse(BaseModel):
    """Validation response"""

    valid: bool
    message: str
    model: str


@router.get("", response_model=ConfigResponse)
async def get_config(request: Request) -> ConfigResponse:
    """Get current configuration (environment overrides applied)"""
    config_manager = request.app.state.config_manager
    ollama = config_manager.ollama_config()
    return ConfigResponse(
        ollama=ollama.model_dump(by_alias=True),
        workspace=config_manager.workspace_config().model_dump(),
    )


@router.put("")
async def update_config(body: ConfigUpdateRequest, request: Request) -> dict[str, Any]:
    """Update configuration and point the running services at it"""
    config_manager = request.app.state.config_manager
    current = config_manager.get_config()

    update: dict[str, Any] = {}
    try:
        if body.ollama:
            OllamaConfig.model_validate({**current.get("ollama", {}), **body.ollama})
            update["ollama"] = body.ollama
        if body.workspace:
            WorkspaceConfig.model_validate({**current.get("workspace", {}), **body.workspace})
            update["workspace"] = body.workspace
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid configuration: {e}")

    config_manager.save_config(update)

    ollama = config_manager.ollama_config()
    request.app.state.llm_service.config = ollama
    request.app.state.orchestrator.set_model_name(ollama.model)

    if body.workspace:
        workspace = LocalWorkspace(config_manager.workspace_config().root)
        request.app.state.workspace = workspace
        request.app.state.orchestrator.set_workspace(workspace)
        print(f"[Config] Workspace root is now {workspace.root}")

    return {"status": "success", "message": "Configuration updated"}


@router.post("/validate", response_model=ValidateResponse)
async def validate_config(request: Request) -> ValidateResponse:
    """Validate current configuration by probing the model server"""
    ollama = request.app.state.config_manager.ollama_config()
    valid, message = await LLMService(ollama).verify_connection()
    return ValidateResponse(valid=valid, message=message, model=ollama.model)
