"""FastAPI dependencies and the process-wide service container."""

import logging
from dataclasses import dataclass
from typing import Annotated

import httpx
from fastapi import Depends, Request

from widget_relay.core.cache import AsyncTTLCache
from widget_relay.core.config import Settings
from widget_relay.core.tasks import TaskSupervisor
from widget_relay.integrations.assistant import AssistantClient
from widget_relay.integrations.telegram import TelegramNotifier
from widget_relay.models.leads import LeadScanOptions
from widget_relay.services.citations import CitationResolver
from widget_relay.services.leads import LeadPipeline
from widget_relay.services.relay import StreamingRelay
from widget_relay.services.sessions import ConversationSessionManager
from widget_relay.services.summarizer import Summarizer
from widget_relay.services.transcripts import TranscriptFetcher

logger = logging.getLogger(__name__)


@dataclass
class RelayServices:
    """Shared, long-lived collaborators of every relay request.

    Only the filename cache and the task supervisor hold mutable state;
    everything else is read-only after startup.
    """

    settings: Settings
    client: AssistantClient
    sessions: ConversationSessionManager
    citations: CitationResolver
    leads: LeadPipeline
    supervisor: TaskSupervisor
    http_client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelayServices":
        """Wire the service graph from settings."""
        client = AssistantClient.from_api_key(settings.OPENAI_API_KEY.get_secret_value())
        http_client = httpx.AsyncClient(timeout=settings.TELEGRAM_TIMEOUT_SECONDS)
        filename_cache: AsyncTTLCache[str] = AsyncTTLCache(
            "file-names",
            maxsize=settings.CITATION_CACHE_SIZE,
            ttl=settings.CITATION_CACHE_TTL_SECONDS,
        )
        leads = LeadPipeline(
            TranscriptFetcher(client, max_excerpt_chars=settings.SUMMARY_MAX_CHARS),
            Summarizer(
                client,
                model=settings.TELEGRAM_SUMMARY_MODEL,
                locale=settings.SUMMARY_LOCALE,
                max_tokens=settings.SUMMARY_MAX_TOKENS,
                temperature=settings.SUMMARY_TEMPERATURE,
            ),
            TelegramNotifier.from_settings(settings, http_client=http_client),
            default_options=LeadScanOptions(
                scan_limit=settings.LEAD_SCAN_LIMIT,
                excerpt_limit=settings.SUMMARY_MAX_MESSAGES,
                title=settings.LEAD_NOTICE_TITLE,
            ),
        )
        return cls(
            settings=settings,
            client=client,
            sessions=ConversationSessionManager(client),
            citations=CitationResolver(client, filename_cache),
            leads=leads,
            supervisor=TaskSupervisor(),
            http_client=http_client,
        )

    async def aclose(self) -> None:
        """Let pending lead tasks finish, then release HTTP clients."""
        await self.supervisor.drain(self.settings.SHUTDOWN_DRAIN_SECONDS)
        if self.http_client is not None:
            await self.http_client.aclose()
        await self.client.close()


def get_services(request: Request) -> RelayServices:
    """Return the container built during application startup."""
    return request.app.state.services


def get_relay(services: Annotated[RelayServices, Depends(get_services)]) -> StreamingRelay:
    """Build a fresh relay for the current request."""
    return StreamingRelay(
        settings=services.settings,
        client=services.client,
        sessions=services.sessions,
        citations=services.citations,
        leads=services.leads,
        supervisor=services.supervisor,
    )


Services = Annotated[RelayServices, Depends(get_services)]
Relay = Annotated[StreamingRelay, Depends(get_relay)]
