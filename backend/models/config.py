"""Configuration data models"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ENDPOINT = "http://localhost:11434"
DEFAULT_MODEL = "codellama:34b"


class OllamaConfig(BaseModel):
    """Typed view of the Ollama section of the config file"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    endpoint: str = DEFAULT_ENDPOINT
    model: str = DEFAULT_MODEL
    temperature: float = 0.2
    top_p: float = Field(default=0.95, alias="topP")
    num_predict: int = Field(default=4000, alias="numPredict")
    timeout_seconds: float = Field(default=120, alias="timeoutSeconds")
    max_retries: int = Field(default=2, alias="maxRetries")


class WorkspaceConfig(BaseModel):
    """Where generated files are written"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    root: str = "."
