"""
LLM Code Assistant Backend - FastAPI Application Entry Point
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers import assistant, config
from services.config_manager import ConfigManager
from services.llm_service import LLMService
from services.orchestrator import AssistantOrchestrator
from services.workspace import EditorDocument, LocalWorkspace


def init_services(app: FastAPI, config_manager: ConfigManager) -> None:
    """Build the service graph once from loaded configuration"""
    ollama = config_manager.ollama_config()
    workspace = LocalWorkspace(config_manager.workspace_config().root)
    document = EditorDocument()
    llm_service = LLMService(ollama)

    app.state.config_manager = config_manager
    app.state.llm_service = llm_service
    app.state.document = document
    app.state.workspace = workspace
    app.state.orchestrator = AssistantOrchestrator(
        transport=llm_service,
        document=document,
        files=workspace,
        model_name=ollama.model,
        workspace=workspace,
    )
    print(f"[Backend] Using {ollama.model} at {ollama.endpoint}, workspace {workspace.root}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown logic"""
    print("[Backend] Starting LLM Code Assistant Backend...")
    config_manager = ConfigManager()
    print(f"[Backend] Config loaded from {config_manager.config_file}")
    init_services(app, config_manager)

    yield

    print("[Backend] Shutting down LLM Code Assistant Backend...")
    orchestrator = app.state.orchestrator
    orchestrator.cancel()
    await orchestrator.wait_idle()


app = FastAPI(
    title="LLM Code Assistant Backend",
    description="Local-LLM code analysis, fixing and generation backend for editor plugins",
    version="1.0.0",
    lifespan=lifespan,
)

# Editor plugins call from localhost
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(assistant.router, prefix="/api/assistant", tags=["assistant"])
app.include_router(config.router, prefix="/api/config", tags=["config"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "llm-code-assistant-backend"}


def run() -> None:
    import uvicorn

    server = ConfigManager().get("server", {})
    uvicorn.run(app, host=server.get("host", "127.0.0.1"), port=server.get("port", 8000))


if __name__ == "__main__":
    run()
