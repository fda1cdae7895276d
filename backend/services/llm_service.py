"""
LLM Service - Transport to a locally hosted Ollama model server
"""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any, Sequence

import aiohttp

from models.chat import ChatTurn
from models.config import OllamaConfig


class TransportError(Exception):
    """The model server could not produce a reply"""

    def __init__(self, reason: str, status: int | None = None, retryable: bool = False):
        super().__init__(reason)
        self.reason = reason
        self.status = status
        self.retryable = retryable or status == 503


class LLMService:
    """Service for talking to an Ollama server over its chat API"""

    def __init__(self, config: OllamaConfig):
        self.config = config

    @property
    def endpoint(self) -> str:
        return self.config.endpoint.rstrip("/")

    # ========== Payload / Response ==========

    def _build_chat_payload(self, turns: Sequence[ChatTurn]) -> dict[str, Any]:
        """Build Ollama /api/chat request payload"""
        return {
            "model": self.config.model,
            "messages": [{"role": t.role.value, "content": t.content} for t in turns],
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "top_p": self.config.top_p,
                "num_predict": self.config.num_predict,
            },
        }

    def _parse_chat_response(self, data: Any) -> str:
        """Pull message.content out of an Ollama chat response"""
        if isinstance(data, dict):
            message = data.get("message")
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                return message["content"]
            if "error" in data:
                raise TransportError(f"Ollama error: {data['error']}")
        raise TransportError("No valid response from Ollama (missing message.content)")

    # ========== HTTP ==========

    async def _retry_with_backoff(self, operation, max_retries: int | None = None):
        """Retry connection failures and 503s (model still loading) with exponential backoff"""
        attempts = max(1, (self.config.max_retries if max_retries is None else max_retries) + 1)
        for attempt in range(attempts):
            try:
                return await operation()
            except TransportError as e:
                if not e.retryable or attempt == attempts - 1:
                    raise
                wait_time = 2**attempt
                print(
                    f"[LLMService] {e.reason}. Retrying in {wait_time}s... "
                    f"(attempt {attempt + 1}/{attempts})"
                )
                await asyncio.sleep(wait_time)

    @asynccontextmanager
    async def _request(self, method: str, url: str, payload: dict[str, Any] | None = None):
        """HTTP request with session cleanup; connection and status problems become TransportError"""
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, json=payload) as response:
                    if response.status != 200:
                        error_text = await response.text(errors="replace")
                        print(f"[LLMService] Ollama API Error ({response.status}): {error_text}")
                        raise TransportError(
                            f"Ollama API error ({response.status}): {error_text}",
                            status=response.status,
                        )
                    yield response
        except asyncio.TimeoutError as e:
            raise TransportError(f"Request timed out after {self.config.timeout_seconds:g}s") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Cannot reach Ollama at {self.endpoint}: {e}", retryable=True) from e

    async def _request_json(self, method: str, url: str, payload: dict[str, Any] | None = None) -> Any:
        async with self._request(method, url, payload) as response:
            try:
                body = await response.text()
                return json.loads(body)
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                raise TransportError(f"Malformed response from Ollama: {e}") from e

    # ========== Public API ==========

    async def chat(self, turns: Sequence[ChatTurn]) -> str:
        """Send the ordered turns and return the model's reply text"""
        url = f"{self.endpoint}/api/chat"
        payload = self._build_chat_payload(turns)
        print(f"[LLMService] Calling Ollama with model: {self.config.model} ({len(turns)} turns)")

        async def _execute_request():
            data = await self._request_json("POST", url, payload)
            return self._parse_chat_response(data)

        reply = await self._retry_with_backoff(_execute_request)
        print(f"[LLMService] Received response from {self.config.model} (length: {len(reply)} chars)")
        return reply

    async def list_models(self) -> list[str]:
        """Names of the models installed on the server"""
        data = await self._request_json("GET", f"{self.endpoint}/api/tags")
        models = data.get("models", []) if isinstance(data, dict) else []
        return [m.get("name", "") for m in models if isinstance(m, dict)]

    async def verify_connection(self) -> tuple[bool, str]:
        """Check the server is up and the configured model family is installed"""
        try:
            names = await self.list_models()
        except TransportError as e:
            return False, f"Ollama server is not reachable at {self.endpoint}: {e.reason}"

        family = self.config.model.split(":")[0]
        if not any(family in name for name in names):
            return False, (
                f"Model {self.config.model} not found. "
                f"Please install with 'ollama pull {self.config.model}'"
            )
        return True, f"Ollama is running and {self.config.model} is available"
