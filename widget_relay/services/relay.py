"""Streaming conversation relay.

Relays one chat turn to an OpenAI assistant run and turns the run's event
stream into client events:

    Idle → SessionReady → Running → Draining → Terminated

``events()`` is the state machine and yields typed OutputEvents.
``stream()`` frames those events as Server-Sent Events and interleaves
keep-alive comments from a heartbeat timer.
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator
from enum import Enum

from widget_relay.core.config import Settings
from widget_relay.core.exceptions import ConfigurationError, sanitize_error
from widget_relay.core.heartbeat import HEARTBEAT_FRAME, Heartbeat
from widget_relay.core.tasks import TaskSupervisor
from widget_relay.integrations.assistant import AssistantClient
from widget_relay.models.chat import (
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    InfoEvent,
    OutputEvent,
    RunEventKind,
    SessionHandle,
    SourcesEvent,
)
from widget_relay.services.citations import CitationResolver, strip_citation_markers
from widget_relay.services.leads import LeadPipeline
from widget_relay.services.sessions import ConversationSessionManager

logger = logging.getLogger(__name__)

_MESSAGE_BOUNDARY_EVENTS = frozenset(
    {RunEventKind.MESSAGE_CREATED.value, RunEventKind.MESSAGE_COMPLETED.value}
)


class RelayState(str, Enum):
    """Lifecycle of one relayed turn."""

    IDLE = "idle"
    SESSION_READY = "session_ready"
    RUNNING = "running"
    DRAINING = "draining"
    TERMINATED = "terminated"


class StreamingRelay:
    """Relays one chat turn; create a new instance per request."""

    def __init__(
        self,
        settings: Settings,
        client: AssistantClient,
        sessions: ConversationSessionManager,
        citations: CitationResolver,
        leads: LeadPipeline,
        supervisor: TaskSupervisor,
    ) -> None:
        self._settings = settings
        self._client = client
        self._sessions = sessions
        self._citations = citations
        self._leads = leads
        self._supervisor = supervisor
        self.state = RelayState.IDLE
        self.heartbeat: Heartbeat | None = None

    async def stream(self, message: str, session_id: str | None = None) -> AsyncIterator[str]:
        """Yield SSE frames for one turn, with heartbeat comments in between.

        Closing this generator (client disconnect) cancels upstream
        consumption and stops the heartbeat.
        """
        queue: asyncio.Queue[str | None] = asyncio.Queue()

        async def beat() -> None:
            await queue.put(HEARTBEAT_FRAME)

        heartbeat = Heartbeat(self._settings.HEARTBEAT_INTERVAL_SECONDS, beat)
        self.heartbeat = heartbeat

        async def pump() -> None:
            try:
                async for event in self.events(message, session_id):
                    if event.terminal:
                        await heartbeat.stop()
                    await queue.put(event.to_sse())
            finally:
                await heartbeat.stop()
                queue.put_nowait(None)

        heartbeat.start()
        producer = asyncio.create_task(pump(), name="relay-pump")
        try:
            while True:
                frame = await queue.get()
                if frame is None:
                    break
                yield frame
        finally:
            await heartbeat.stop()
            if not producer.done():
                producer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await producer
            if self.state != RelayState.TERMINATED:
                logger.info("Client disconnected mid-stream", extra={"state": self.state.value})

    async def events(  # noqa: C901
        self, message: str, session_id: str | None = None
    ) -> AsyncIterator[OutputEvent]:
        """Run the relay state machine for one user turn.

        Yields at most one InfoEvent, any number of ContentEvents, at most
        one SourcesEvent and exactly one terminal DoneEvent or ErrorEvent.
        """
        start = time.perf_counter()

        # --- Idle → SessionReady ---
        if not self._settings.assistant_configured:
            error = ConfigurationError("ASSISTANT_ID")
            logger.error("Cannot start run", extra={"code": error.code})
            self.state = RelayState.TERMINATED
            yield ErrorEvent(sanitize_error(error))
            return

        try:
            session = await self._sessions.ensure_session(session_id)
        except Exception as e:
            logger.exception("Thread creation failed")
            self.state = RelayState.TERMINATED
            yield ErrorEvent(sanitize_error(e))
            return

        self.state = RelayState.SESSION_READY
        if session.created:
            yield InfoEvent(session.id)

        # --- SessionReady → Running ---
        try:
            run = await self._client.stream_run(session.id, self._settings.ASSISTANT_ID, message)
        except Exception as e:
            logger.exception("Run start failed", extra={"thread_id": session.id})
            self.state = RelayState.TERMINATED
            yield ErrorEvent(sanitize_error(e))
            return

        self.state = RelayState.RUNNING
        content_sent = False
        last_assistant_message_id: str | None = None
        failure: Exception | None = None

        async with contextlib.aclosing(run):
            try:
                async for event in run:
                    if event.kind in _MESSAGE_BOUNDARY_EVENTS:
                        if event.role == "assistant" and event.message_id:
                            last_assistant_message_id = event.message_id
                        continue

                    if event.kind != RunEventKind.MESSAGE_DELTA.value or event.text is None:
                        continue

                    chunk = event.text
                    if self._settings.STRIP_ANNOTATIONS:
                        chunk = strip_citation_markers(chunk)
                    if chunk.strip():
                        content_sent = True
                        yield ContentEvent(chunk)
            except Exception as e:
                failure = e
                logger.exception(
                    "Upstream stream failed",
                    extra={"thread_id": session.id, "content_sent": content_sent},
                )

        # --- Running → Draining ---
        self.state = RelayState.DRAINING

        if failure is not None and not content_sent:
            self._trigger_leads(session)
            self.state = RelayState.TERMINATED
            yield ErrorEvent(sanitize_error(failure))
            return

        if self._settings.SHOW_SOURCES and last_assistant_message_id:
            sources_event = await self._sources_event(session, last_assistant_message_id)
            if sources_event is not None:
                yield sources_event

        # --- Draining → Terminated ---
        self._trigger_leads(session)
        self.state = RelayState.TERMINATED
        logger.info(
            "Relay completed",
            extra={
                "thread_id": session.id,
                "content_sent": content_sent,
                "upstream_failed": failure is not None,
                "total_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        yield DoneEvent()

    async def _sources_event(self, session: SessionHandle, message_id: str) -> SourcesEvent | None:
        try:
            sources = await self._citations.sources_for(session.id, message_id)
        except Exception:
            logger.warning(
                "Could not load message citations",
                extra={"thread_id": session.id, "message_id": message_id},
                exc_info=True,
            )
            return None
        return SourcesEvent(tuple(sources)) if sources else None

    def _trigger_leads(self, session: SessionHandle) -> None:
        """Hand the lead pipeline to the supervisor; never awaited here."""
        if not self._settings.TELEGRAM_NOTIFY_IF_CONTACT:
            return
        self._supervisor.spawn(
            self._leads.detect_and_notify(session.id),
            name=f"lead-pipeline:{session.id}",
        )


