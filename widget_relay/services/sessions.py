"""Conversation session (thread) management."""

import logging

from widget_relay.integrations.assistant import AssistantClient
from widget_relay.models.chat import SessionHandle

logger = logging.getLogger(__name__)


class ConversationSessionManager:
    """Creates or resumes upstream threads. Holds no state of its own."""

    def __init__(self, client: AssistantClient) -> None:
        self._client = client

    async def ensure_session(self, existing_id: str | None = None) -> SessionHandle:
        """Return a handle for ``existing_id`` or a freshly created thread.

        A supplied id is trusted as-is; an invalid one only surfaces later
        when the run fails to start.

        Raises:
            UpstreamTransientError: If a new thread cannot be created.
        """
        if existing_id and existing_id.strip():
            return SessionHandle(id=existing_id, created=False)

        session = await self._client.create_thread()
        logger.info("Thread created", extra={"thread_id": session.id})
        return session
