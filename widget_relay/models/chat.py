"""Chat relay models.

Request bodies for the streaming endpoint, the normalized view of the
upstream assistant API, and the events written to the client stream.
"""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

DONE_FRAME = "data: [DONE]\n\n"


class ChatRequest(BaseModel):
    """Request body for the streaming chat endpoint."""

    message: str | None = Field(None, description="User's message")
    thread_id: str | None = Field(
        None, description="Existing thread ID (the X-Thread-Id header takes precedence)"
    )


# ---------------------------------------------------------------------------
# Upstream view
# ---------------------------------------------------------------------------


class RunEventKind(str, Enum):
    """Upstream run event kinds the relay reacts to."""

    MESSAGE_CREATED = "thread.message.created"
    MESSAGE_DELTA = "thread.message.delta"
    MESSAGE_COMPLETED = "thread.message.completed"


@dataclass(frozen=True)
class RunEvent:
    """One event of a streaming run, reduced to the fields the relay uses.

    ``text`` is only set for message deltas whose first content part is text.
    """

    kind: str
    role: str | None = None
    message_id: str | None = None
    text: str | None = None


@dataclass(frozen=True)
class SessionHandle:
    """Upstream thread the relay is talking to."""

    id: str
    created: bool = False
    created_at: datetime | None = None


@dataclass(frozen=True)
class Turn:
    """A finalized message of a thread."""

    role: Literal["user", "assistant"] | str
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class SourceRef:
    """A knowledge-base file cited by an answer."""

    file_id: str
    filename: str


# ---------------------------------------------------------------------------
# Client stream
# ---------------------------------------------------------------------------


def _data_frame(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False, separators=(',', ':'))}\n\n"


@dataclass(frozen=True)
class InfoEvent:
    """Announces a newly created thread id. Sent at most once, first."""

    session_id: str
    terminal: bool = field(default=False, init=False)

    def to_sse(self) -> str:
        return _data_frame({"info": {"id": self.session_id}})


@dataclass(frozen=True)
class ContentEvent:
    """A non-empty fragment of assistant text."""

    text: str
    terminal: bool = field(default=False, init=False)

    def to_sse(self) -> str:
        return _data_frame({"content": self.text})


@dataclass(frozen=True)
class SourcesEvent:
    """Files cited by the answer. Sent at most once, after all content."""

    sources: tuple[SourceRef, ...]
    terminal: bool = field(default=False, init=False)

    def to_sse(self) -> str:
        return _data_frame(
            {"sources": [{"file_id": s.file_id, "filename": s.filename} for s in self.sources]}
        )


@dataclass(frozen=True)
class DoneEvent:
    """Normal end of the stream."""

    terminal: bool = field(default=True, init=False)

    def to_sse(self) -> str:
        return DONE_FRAME


@dataclass(frozen=True)
class ErrorEvent:
    """Failure before any content; the wire form still ends with [DONE]."""

    message: str
    terminal: bool = field(default=True, init=False)

    def to_sse(self) -> str:
        return _data_frame({"error": self.message}) + DONE_FRAME


OutputEvent = InfoEvent | ContentEvent | SourcesEvent | DoneEvent | ErrorEvent
