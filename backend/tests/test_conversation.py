"""Tests for ConversationSession"""

import asyncio

import pytest

from fakes import FakeTransport
from models.chat import ChatRole
from services.conversation import CANCELLED_MESSAGE, ConversationSession
from services.llm_service import TransportError


def test_new_session_starts_with_system_turn():
    session = ConversationSession(FakeTransport(), "codellama:34b", system_prompt="be helpful")
    assert [t.role for t in session.turns] == [ChatRole.SYSTEM]
    assert session.turns[0].content == "be helpful"


@pytest.mark.asyncio
async def test_append_and_send_records_both_turns():
    transport = FakeTransport("Hi there")
    session = ConversationSession(transport, "codellama:34b", system_prompt="sys")

    reply = await session.append_and_send("hello")

    assert reply.content == "Hi there"
    assert reply.failed is False
    assert [(t.role, t.content) for t in session.turns] == [
        (ChatRole.SYSTEM, "sys"),
        (ChatRole.USER, "hello"),
        (ChatRole.ASSISTANT, "Hi there"),
    ]
    # The transport saw the whole conversation up to the new user turn
    assert [t.content for t in transport.calls[0]] == ["sys", "hello"]


@pytest.mark.asyncio
async def test_history_is_resent_in_order():
    transport = FakeTransport("one", "two")
    session = ConversationSession(transport, "m", system_prompt="sys")

    await session.append_and_send("first")
    await session.append_and_send("second")

    assert [t.content for t in transport.calls[1]] == ["sys", "first", "one", "second"]


@pytest.mark.asyncio
async def test_transport_error_becomes_diagnostic_text():
    transport = FakeTransport(TransportError("connection refused"))
    session = ConversationSession(transport, "codellama:34b", system_prompt="sys")

    reply = await session.append_and_send("hello")

    assert reply.failed is True
    assert "Error communicating with local LLM: connection refused" in reply.content
    assert "ollama pull codellama:34b" in reply.content
    # No assistant turn for a failed exchange
    assert [t.role for t in session.turns] == [ChatRole.SYSTEM, ChatRole.USER]


@pytest.mark.asyncio
async def test_empty_reply_is_reported():
    session = ConversationSession(FakeTransport(""), "m")
    reply = await session.append_and_send("hello")
    assert reply.failed is True
    assert reply.content == "No response from model"


@pytest.mark.asyncio
async def test_one_shot_leaves_session_untouched():
    transport = FakeTransport("analysis")
    session = ConversationSession(transport, "m", system_prompt="sys")

    reply = await session.send_one_shot("reviewer", "review this")

    assert reply.content == "analysis"
    assert [t.content for t in transport.calls[0]] == ["reviewer", "review this"]
    assert [t.role for t in transport.calls[0]] == [ChatRole.SYSTEM, ChatRole.USER]
    assert len(session.turns) == 1


@pytest.mark.asyncio
async def test_system_turn_cannot_be_appended_mid_conversation():
    session = ConversationSession(FakeTransport("x"), "m", system_prompt="sys")
    with pytest.raises(ValueError):
        await session.append_and_send("new rules", role=ChatRole.SYSTEM)


@pytest.mark.asyncio
async def test_reset_keeps_only_system_turn():
    session = ConversationSession(FakeTransport("x"), "m", system_prompt="sys")
    await session.append_and_send("hello")
    session.reset()
    assert [t.role for t in session.turns] == [ChatRole.SYSTEM]


class SlowTransport:
    def __init__(self):
        self.started = asyncio.Event()
        self.cancelled = False

    async def chat(self, turns):
        self.started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return "too late"


@pytest.mark.asyncio
async def test_cancel_signal_aborts_transport_call():
    transport = SlowTransport()
    session = ConversationSession(transport, "m", system_prompt="sys")
    cancel = asyncio.Event()

    pending = asyncio.ensure_future(session.append_and_send("hello", cancel_event=cancel))
    await transport.started.wait()
    cancel.set()
    reply = await asyncio.wait_for(pending, timeout=2)

    assert reply.failed is True
    assert reply.content == CANCELLED_MESSAGE
    assert transport.cancelled is True
    assert not session.busy


@pytest.mark.asyncio
async def test_requests_are_serialized_per_session():
    order = []

    class OrderedTransport:
        async def chat(self, turns):
            order.append(("start", turns[-1].content))
            await asyncio.sleep(0.01)
            order.append(("end", turns[-1].content))
            return "ok"

    session = ConversationSession(OrderedTransport(), "m", system_prompt="sys")
    await asyncio.gather(session.append_and_send("a"), session.append_and_send("b"))

    assert order == [("start", "a"), ("end", "a"), ("start", "b"), ("end", "b")]
