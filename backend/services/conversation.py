"""
Conversation Session - Ordered chat turns and the model round-trip

The session never raises transport problems to its caller: a failed call
comes back as a ModelReply with ``failed=True`` and readable diagnostic text.
"""

from __future__ import annotations

import asyncio
from typing import Protocol, Sequence

from models.chat import ChatRole, ChatTurn, ModelReply
from services.llm_service import TransportError
from services.prompt_builder import SYSTEM_PROMPT

CANCELLED_MESSAGE = "Request cancelled."

_CANCELLED = object()


class ChatTransport(Protocol):
    """Anything that can turn an ordered turn list into one reply string"""

    async def chat(self, turns: Sequence[ChatTurn]) -> str: ...


def transport_failure_message(reason: str, model: str) -> str:
    return (
        f"Error communicating with local LLM: {reason}\n\n"
        f"Please ensure Ollama is running with the {model} model installed.\n"
        f"You can install it with: ollama pull {model}"
    )


class ConversationSession:
    """Append-only conversation with a single request in flight at a time"""

    def __init__(
        self,
        transport: ChatTransport,
        model_name: str,
        system_prompt: str | None = SYSTEM_PROMPT,
    ):
        self.transport = transport
        self.model_name = model_name
        self.system_prompt = system_prompt
        self._turns: list[ChatTurn] = []
        self._lock = asyncio.Lock()
        self.reset()

    @property
    def turns(self) -> list[ChatTurn]:
        return list(self._turns)

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def reset(self) -> None:
        """Start over with only the system turn"""
        self._turns = []
        if self.system_prompt:
            self._turns.append(ChatTurn(role=ChatRole.SYSTEM, content=self.system_prompt))

    async def append_and_send(
        self,
        content: str,
        role: ChatRole = ChatRole.USER,
        cancel_event: asyncio.Event | None = None,
    ) -> ModelReply:
        """Append a turn, send the whole conversation, record the assistant reply"""
        if role == ChatRole.SYSTEM and self._turns:
            raise ValueError("system turns may only open a conversation")

        async with self._lock:
            self._turns.append(ChatTurn(role=role, content=content))
            reply = await self._send(list(self._turns), cancel_event)
            if not reply.failed:
                self._turns.append(ChatTurn(role=ChatRole.ASSISTANT, content=reply.content))
            return reply

    async def send_one_shot(
        self,
        system_prompt: str,
        user_prompt: str,
        cancel_event: asyncio.Event | None = None,
    ) -> ModelReply:
        """Two-turn exchange that leaves the session's own turns untouched"""
        turns = [
            ChatTurn(role=ChatRole.SYSTEM, content=system_prompt),
            ChatTurn(role=ChatRole.USER, content=user_prompt),
        ]
        return await self._send(turns, cancel_event)

    async def _send(self, turns: list[ChatTurn], cancel_event: asyncio.Event | None) -> ModelReply:
        try:
            if cancel_event is None:
                content = await self.transport.chat(turns)
            else:
                content = await self._send_cancellable(turns, cancel_event)
        except TransportError as e:
            print(f"[ConversationSession] Transport failure: {e.reason}")
            return ModelReply(content=transport_failure_message(e.reason, self.model_name), failed=True)

        if content is _CANCELLED:
            return ModelReply(content=CANCELLED_MESSAGE, failed=True)
        if not content:
            return ModelReply(content="No response from model", failed=True)
        return ModelReply(content=content)

    async def _send_cancellable(self, turns: list[ChatTurn], cancel_event: asyncio.Event) -> object:
        """Race the transport call against the cancel signal"""
        if cancel_event.is_set():
            return _CANCELLED

        request = asyncio.ensure_future(self.transport.chat(turns))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            waiter.cancel()

        if not request.done():
            request.cancel()
            try:
                await request
            except asyncio.CancelledError:
                pass
            print("[ConversationSession] Request cancelled")
            return _CANCELLED

        return request.result()
