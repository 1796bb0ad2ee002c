"""Lead detection and notification pipeline.

After a conversation turn completes, scan the user's recent messages for
contact details. When any are found, summarize the conversation and push a
lead notice to Telegram. Runs detached from the HTTP response and never
raises to its caller.
"""

import logging
import time

from widget_relay.core.contacts import extract_contacts
from widget_relay.core.exceptions import SummarizationFailure
from widget_relay.integrations.telegram import TelegramNotifier
from widget_relay.models.leads import LeadNotice, LeadScanOptions
from widget_relay.services.summarizer import Summarizer
from widget_relay.services.transcripts import TranscriptFetcher

logger = logging.getLogger(__name__)


class LeadPipeline:
    """Contact scan → summary → notice → delivery."""

    def __init__(
        self,
        transcripts: TranscriptFetcher,
        summarizer: Summarizer,
        notifier: TelegramNotifier,
        default_options: LeadScanOptions | None = None,
    ) -> None:
        self._transcripts = transcripts
        self._summarizer = summarizer
        self._notifier = notifier
        self.default_options = default_options or LeadScanOptions()

    async def detect_and_notify(
        self, session_id: str, options: LeadScanOptions | None = None
    ) -> None:
        """Notify about ``session_id`` if its user turns contain contacts.

        Always returns normally; every failure is logged here.
        """
        try:
            await self._run(session_id, options or self.default_options)
        except Exception:
            logger.exception("Lead pipeline failed", extra={"thread_id": session_id})

    async def find_contacts(self, session_id: str, scan_limit: int) -> list[str]:
        """Collect unique contacts from the latest user turns, newest first."""
        turns = await self._transcripts.recent_turns(
            session_id, limit=scan_limit, order="desc", role="user"
        )
        contacts: dict[str, None] = {}
        for turn in turns:
            for contact in extract_contacts(turn.content):
                contacts.setdefault(contact, None)
        return list(contacts)

    async def _run(self, session_id: str, options: LeadScanOptions) -> None:
        start = time.perf_counter()

        if not self._notifier.is_configured:
            logger.debug("Notifier not configured, skipping lead scan")
            return

        contacts = await self.find_contacts(session_id, options.scan_limit)
        if not contacts:
            return

        summary = await self._summarize(session_id, options)
        notice = LeadNotice(
            session_id=session_id,
            contacts=contacts,
            summary=summary,
            title=options.title,
        )
        await self._notifier.send(notice.format())

        logger.info(
            "Lead notice dispatched",
            extra={
                "thread_id": session_id,
                "contact_count": len(contacts),
                "has_summary": summary is not None,
                "total_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )

    async def _summarize(self, session_id: str, options: LeadScanOptions) -> str | None:
        try:
            excerpt = await self._transcripts.excerpt(session_id, limit=options.excerpt_limit)
            return await self._summarizer.summarize(excerpt, locale=options.locale)
        except SummarizationFailure as e:
            logger.warning(
                "Lead summary failed, sending contacts only",
                extra={"thread_id": session_id, "error": e.message},
            )
        except Exception:
            logger.warning(
                "Lead summary failed, sending contacts only",
                extra={"thread_id": session_id},
                exc_info=True,
            )
        return None
