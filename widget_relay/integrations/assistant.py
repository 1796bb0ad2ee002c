"""OpenAI Assistants API client.

Wraps the ``openai`` async SDK behind the handful of operations the relay
needs and normalizes SDK objects into the relay's own models, so services
never touch SDK types directly. Every SDK failure is re-raised as a relay
exception.
"""

import logging
from datetime import UTC, datetime
from typing import Any, Literal

import httpx
import openai
from openai import AsyncOpenAI

from widget_relay.core.exceptions import LookupFailure, UpstreamTransientError
from widget_relay.models.chat import RunEvent, RunEventKind, SessionHandle, Turn

logger = logging.getLogger(__name__)


def _timestamp(epoch: Any) -> datetime:
    if isinstance(epoch, int | float):
        return datetime.fromtimestamp(epoch, UTC)
    return datetime.now(UTC)


def _text_parts(content: Any) -> list[str]:
    """Return the values of all text parts of a message's content list."""
    texts: list[str] = []
    for part in content or []:
        if getattr(part, "type", None) != "text":
            continue
        value = getattr(getattr(part, "text", None), "value", None)
        if value:
            texts.append(value)
    return texts


def to_run_event(raw: Any) -> RunEvent:
    """Reduce an SDK stream event to a RunEvent."""
    kind = getattr(raw, "event", "") or ""
    data = getattr(raw, "data", None)

    if kind in (RunEventKind.MESSAGE_CREATED.value, RunEventKind.MESSAGE_COMPLETED.value):
        return RunEvent(
            kind=kind,
            role=getattr(data, "role", None),
            message_id=getattr(data, "id", None),
        )

    if kind == RunEventKind.MESSAGE_DELTA.value:
        delta = getattr(data, "delta", None)
        parts = getattr(delta, "content", None) or []
        text = None
        if parts and getattr(parts[0], "type", None) == "text":
            text = getattr(getattr(parts[0], "text", None), "value", None) or ""
        return RunEvent(
            kind=kind,
            role=getattr(delta, "role", None),
            message_id=getattr(data, "id", None),
            text=text,
        )

    return RunEvent(kind=kind)


class RunEventStream:
    """Async iterator over one streaming run.

    Closing the stream (explicitly via ``aclose`` or by leaving an
    ``aclosing`` block) closes the underlying HTTP response, which is how a
    client disconnect stops upstream consumption.
    """

    def __init__(self, stream: Any, thread_id: str) -> None:
        self._stream = stream
        self._iterator = stream.__aiter__()
        self._thread_id = thread_id
        self.closed = False

    def __aiter__(self) -> "RunEventStream":
        return self

    async def __anext__(self) -> RunEvent:
        if self.closed:
            raise StopAsyncIteration
        try:
            raw = await self._iterator.__anext__()
        except StopAsyncIteration:
            raise
        except (openai.OpenAIError, httpx.HTTPError) as e:
            raise UpstreamTransientError("stream_run", str(e)) from e
        return to_run_event(raw)

    async def aclose(self) -> None:
        """Close the upstream response. Idempotent."""
        if self.closed:
            return
        self.closed = True
        try:
            await self._stream.close()
        except Exception:
            logger.debug("Error closing run stream", extra={"thread_id": self._thread_id})


class AssistantClient:
    """Thin async facade over the OpenAI threads, runs, files and chat APIs."""

    def __init__(self, client: AsyncOpenAI) -> None:
        self._client = client

    @classmethod
    def from_api_key(cls, api_key: str) -> "AssistantClient":
        """Build a client with a fresh SDK instance."""
        return cls(AsyncOpenAI(api_key=api_key))

    async def close(self) -> None:
        """Release the SDK's HTTP connection pool."""
        await self._client.close()

    async def create_thread(self) -> SessionHandle:
        """Create an empty thread.

        Raises:
            UpstreamTransientError: If the API call fails.
        """
        try:
            thread = await self._client.beta.threads.create()
        except openai.OpenAIError as e:
            raise UpstreamTransientError("create_thread", str(e)) from e
        return SessionHandle(
            id=thread.id,
            created=True,
            created_at=_timestamp(getattr(thread, "created_at", None)),
        )

    async def stream_run(self, thread_id: str, assistant_id: str, message: str) -> RunEventStream:
        """Start a streaming run with ``message`` appended as a user turn.

        Raises:
            UpstreamTransientError: If the run cannot be started.
        """
        try:
            stream = await self._client.beta.threads.runs.create(
                thread_id,
                assistant_id=assistant_id,
                additional_messages=[{"role": "user", "content": message}],
                stream=True,
            )
        except openai.OpenAIError as e:
            raise UpstreamTransientError("start_run", str(e)) from e
        return RunEventStream(stream, thread_id)

    async def get_message_file_ids(self, thread_id: str, message_id: str) -> list[str]:
        """Return file ids cited in a message's annotations, in order.

        Raises:
            UpstreamTransientError: If the message cannot be retrieved.
        """
        try:
            message = await self._client.beta.threads.messages.retrieve(
                message_id, thread_id=thread_id
            )
        except openai.OpenAIError as e:
            raise UpstreamTransientError("retrieve_message", str(e)) from e

        file_ids: list[str] = []
        for part in message.content or []:
            if getattr(part, "type", None) != "text":
                continue
            for annotation in getattr(part.text, "annotations", None) or []:
                citation = getattr(annotation, "file_citation", None) or getattr(
                    annotation, "file_path", None
                )
                file_id = getattr(citation, "file_id", None)
                if file_id:
                    file_ids.append(file_id)
        return file_ids

    async def list_turns(
        self,
        thread_id: str,
        order: Literal["asc", "desc"],
        limit: int,
    ) -> list[Turn]:
        """Return up to ``limit`` messages of a thread as turns.

        Messages without text content are skipped; multiple text parts are
        joined with newlines.

        Raises:
            UpstreamTransientError: If the listing fails.
        """
        try:
            page = await self._client.beta.threads.messages.list(
                thread_id, order=order, limit=limit
            )
        except openai.OpenAIError as e:
            raise UpstreamTransientError("list_messages", str(e)) from e

        turns: list[Turn] = []
        for message in page.data:
            texts = _text_parts(message.content)
            if not texts:
                continue
            turns.append(
                Turn(
                    role=message.role or "assistant",
                    content="\n".join(texts),
                    timestamp=_timestamp(getattr(message, "created_at", None)),
                )
            )
        return turns

    async def get_file_name(self, file_id: str) -> str:
        """Look up a file's display name.

        Raises:
            LookupFailure: If the file cannot be retrieved.
        """
        try:
            meta = await self._client.files.retrieve(file_id)
        except openai.OpenAIError as e:
            raise LookupFailure(file_id, str(e)) from e
        return getattr(meta, "filename", None) or file_id

    async def complete(
        self,
        *,
        system: str,
        user: str,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> str | None:
        """Run a single non-streaming chat completion.

        Raises:
            UpstreamTransientError: If the API call fails.
        """
        try:
            completion = await self._client.chat.completions.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            )
        except openai.OpenAIError as e:
            raise UpstreamTransientError("chat_completion", str(e)) from e

        if not completion.choices:
            return None
        return completion.choices[0].message.content or None
