"""Shared fixtures for widget relay tests."""

from collections.abc import Iterable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from widget_relay.core.config import Settings
from widget_relay.integrations.assistant import AssistantClient
from widget_relay.models.chat import RunEvent, RunEventKind, SessionHandle


class FakeRunStream:
    """Scripted stand-in for RunEventStream.

    Yields ``events`` in order, then raises ``error`` if one is given.
    """

    def __init__(self, events: Iterable[RunEvent], error: Exception | None = None) -> None:
        self._events = list(events)
        self._error = error
        self.closed = False
        self.consumed = 0

    def __aiter__(self) -> "FakeRunStream":
        return self

    async def __anext__(self) -> RunEvent:
        if self.closed:
            raise StopAsyncIteration
        if self.consumed < len(self._events):
            event = self._events[self.consumed]
            self.consumed += 1
            return event
        if self._error is not None:
            raise self._error
        raise StopAsyncIteration

    async def aclose(self) -> None:
        self.closed = True


def created(message_id: str = "msg_1", role: str = "assistant") -> RunEvent:
    """Build a thread.message.created event."""
    return RunEvent(kind=RunEventKind.MESSAGE_CREATED.value, role=role, message_id=message_id)


def delta(text: str | None, message_id: str = "msg_1") -> RunEvent:
    """Build a thread.message.delta event."""
    return RunEvent(kind=RunEventKind.MESSAGE_DELTA.value, message_id=message_id, text=text)


def completed(message_id: str = "msg_1", role: str = "assistant") -> RunEvent:
    """Build a thread.message.completed event."""
    return RunEvent(kind=RunEventKind.MESSAGE_COMPLETED.value, role=role, message_id=message_id)


def make_settings(**overrides: Any) -> Settings:
    """Build settings isolated from the process environment and .env files."""
    values: dict[str, Any] = {
        "OPENAI_API_KEY": "sk-test",
        "ASSISTANT_ID": "asst_test",
        "SHOW_SOURCES": True,
        "STRIP_ANNOTATIONS": True,
        "TELEGRAM_NOTIFY_IF_CONTACT": True,
        "TELEGRAM_BOT_TOKEN": "123:abc",
        "TELEGRAM_CHAT_ID": "-100500",
        "HEARTBEAT_INTERVAL_SECONDS": 15.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    """Fully configured settings."""
    return make_settings()


@pytest.fixture
def mock_assistant() -> MagicMock:
    """AssistantClient double with async methods."""
    client = MagicMock(spec=AssistantClient)
    client.create_thread = AsyncMock(return_value=SessionHandle(id="thread_new", created=True))
    client.stream_run = AsyncMock(return_value=FakeRunStream([]))
    client.get_message_file_ids = AsyncMock(return_value=[])
    client.get_file_name = AsyncMock(side_effect=lambda file_id: f"{file_id}.pdf")
    client.list_turns = AsyncMock(return_value=[])
    client.complete = AsyncMock(return_value="- summary")
    client.close = AsyncMock()
    return client
