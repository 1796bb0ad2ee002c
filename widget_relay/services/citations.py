"""Knowledge-base citations in assistant answers.

Assistant text carries inline markers such as ``【4:0†pricing.pdf】`` that
point at retrieved files. The markers are stripped from streamed text, and
the files they reference are listed once the answer is complete.
"""

import logging
import re

from widget_relay.core.cache import AsyncTTLCache
from widget_relay.core.exceptions import LookupFailure
from widget_relay.integrations.assistant import AssistantClient
from widget_relay.models.chat import SourceRef

logger = logging.getLogger(__name__)

CITATION_MARKER = re.compile(r"【\d+:\d+†[^\s】]+】")


def strip_citation_markers(text: str) -> str:
    """Remove every inline citation marker from ``text``, nothing else."""
    return CITATION_MARKER.sub("", text)


class CitationResolver:
    """Turns the citations of an assistant message into named sources.

    Filenames are cached by file id for the life of the process. Failed
    lookups fall back to the raw id and are not cached.
    """

    def __init__(self, client: AssistantClient, cache: AsyncTTLCache[str]) -> None:
        self._client = client
        self._cache = cache

    async def file_name(self, file_id: str) -> str:
        """Return the display name of ``file_id``, or the id itself on failure."""
        try:
            return await self._cache.get_or_compute(
                file_id, lambda: self._client.get_file_name(file_id)
            )
        except LookupFailure:
            logger.warning("File name lookup failed", extra={"file_id": file_id})
            return file_id

    async def sources_for(self, thread_id: str, message_id: str) -> list[SourceRef]:
        """List the distinct files cited by a message, in citation order.

        Raises:
            UpstreamTransientError: If the message cannot be retrieved.
        """
        file_ids = await self._client.get_message_file_ids(thread_id, message_id)
        sources: list[SourceRef] = []
        seen: set[str] = set()
        for file_id in file_ids:
            if file_id in seen:
                continue
            seen.add(file_id)
            sources.append(SourceRef(file_id=file_id, filename=await self.file_name(file_id)))
        return sources
