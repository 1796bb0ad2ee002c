"""Read recent turns of a thread for lead scanning and summaries."""

import logging
from typing import Literal

from widget_relay.integrations.assistant import AssistantClient
from widget_relay.models.chat import Turn

logger = logging.getLogger(__name__)

DEFAULT_MAX_EXCERPT_CHARS = 12_000


class TranscriptFetcher:
    """Fetches thread turns from the upstream service."""

    def __init__(
        self,
        client: AssistantClient,
        max_excerpt_chars: int = DEFAULT_MAX_EXCERPT_CHARS,
    ) -> None:
        self._client = client
        self.max_excerpt_chars = max_excerpt_chars

    async def recent_turns(
        self,
        thread_id: str,
        *,
        limit: int,
        order: Literal["asc", "desc"] = "desc",
        role: str | None = None,
    ) -> list[Turn]:
        """Return up to ``limit`` most recent turns in the given order.

        Args:
            thread_id: Thread to read.
            limit: Number of messages requested upstream. The role filter is
                applied afterwards, so fewer turns may come back.
            order: "desc" for newest first, "asc" for oldest first.
            role: Keep only turns with this role.
        """
        # Listing "asc" upstream would return the oldest messages of a long thread
        turns = await self._client.list_turns(thread_id, order="desc", limit=limit)
        if order == "asc":
            turns = turns[::-1]
        if role is not None:
            turns = [turn for turn in turns if turn.role == role]
        return turns

    async def excerpt(self, thread_id: str, *, limit: int) -> str:
        """Concatenate the last ``limit`` turns, oldest first, into one text.

        Each turn is rendered as ``[role]`` on its own line followed by the
        trimmed text. The result is cut to ``max_excerpt_chars``, keeping
        the most recent part of the conversation.
        """
        turns = await self.recent_turns(thread_id, limit=limit, order="asc")
        blocks = [f"[{turn.role}]\n{turn.content.strip()}" for turn in turns if turn.content.strip()]
        text = "\n\n".join(blocks).strip()
        if len(text) > self.max_excerpt_chars:
            text = text[-self.max_excerpt_chars :]
        return text
