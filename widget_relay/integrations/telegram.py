"""Telegram Bot API notifier.

Delivers plain-text lead notices to a chat via ``sendMessage``. Delivery is
best-effort: an unconfigured destination is a silent no-op and a failed
chunk stops the remaining chunks without raising.
"""

import logging
from dataclasses import dataclass

import httpx

from widget_relay.core.config import Settings
from widget_relay.core.exceptions import NotificationFailure

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.telegram.org"
# Telegram caps messages at 4096 characters
DEFAULT_CHUNK_SIZE = 3800


@dataclass(frozen=True)
class TelegramDestination:
    """Bot credentials and target chat."""

    bot_token: str | None
    chat_id: str | None

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)


def chunk_text(text: str, size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Split ``text`` into consecutive slices of at most ``size`` characters.

    Splits on exact offsets, ignoring word boundaries.
    """
    if size < 1:
        raise ValueError("size must be at least 1")
    return [text[i : i + size] for i in range(0, len(text), size)]


class TelegramNotifier:
    """Sends text to a Telegram chat in one or more messages."""

    def __init__(
        self,
        destination: TelegramDestination,
        *,
        api_base: str = DEFAULT_API_BASE,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            destination: Default destination used by ``send``.
            api_base: Bot API base URL.
            chunk_size: Maximum characters per message.
            timeout: Per-request timeout in seconds.
            http_client: Shared client; one is created per send when omitted.
        """
        self.destination = destination
        self.api_base = api_base.rstrip("/")
        self.chunk_size = chunk_size
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> "TelegramNotifier":
        """Build a notifier from TELEGRAM_* settings."""
        token = settings.TELEGRAM_BOT_TOKEN.get_secret_value() if settings.TELEGRAM_BOT_TOKEN else None
        return cls(
            TelegramDestination(bot_token=token, chat_id=settings.TELEGRAM_CHAT_ID or None),
            api_base=settings.TELEGRAM_API_BASE,
            chunk_size=settings.TELEGRAM_CHUNK_SIZE,
            timeout=settings.TELEGRAM_TIMEOUT_SECONDS,
            http_client=http_client,
        )

    @property
    def is_configured(self) -> bool:
        """True when the default destination has both token and chat id."""
        return self.destination.is_configured

    async def send(self, text: str, destination: TelegramDestination | None = None) -> None:
        """Deliver ``text``, chunked, to ``destination`` (or the default one).

        Never raises. Returns without any network call when the destination
        is not configured.
        """
        target = destination or self.destination
        if not target.is_configured:
            logger.debug("Telegram destination not configured, skipping notification")
            return

        chunks = chunk_text(text, self.chunk_size)
        if self._http_client is not None:
            await self._send_chunks(self._http_client, target, chunks)
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            await self._send_chunks(client, target, chunks)

    async def _send_chunks(
        self,
        client: httpx.AsyncClient,
        target: TelegramDestination,
        chunks: list[str],
    ) -> None:
        for index, chunk in enumerate(chunks):
            try:
                await self._deliver_chunk(client, target, chunk)
            except NotificationFailure as e:
                logger.error(
                    "Telegram sendMessage failed",
                    extra={
                        "chunk": index + 1,
                        "chunks": len(chunks),
                        "status": e.details.get("status"),
                        "error": e.message,
                    },
                )
                return

        logger.info("Telegram notification sent", extra={"chunks": len(chunks)})

    async def _deliver_chunk(
        self,
        client: httpx.AsyncClient,
        target: TelegramDestination,
        chunk: str,
    ) -> None:
        """POST one chunk; raise NotificationFailure on any failure."""
        try:
            response = await client.post(
                f"{self.api_base}/bot{target.bot_token}/sendMessage",
                # No parse_mode: lead text is sent verbatim without escaping
                json={
                    "chat_id": target.chat_id,
                    "text": chunk,
                    "disable_web_page_preview": True,
                },
                timeout=self.timeout,
            )
        except httpx.RequestError as e:
            # The request URL embeds the bot token, so only the error type is reported
            raise NotificationFailure("telegram", f"Connection error: {type(e).__name__}") from e

        if response.is_error:
            raise NotificationFailure(
                "telegram",
                response.text[:200],
                status=response.status_code,
            )
