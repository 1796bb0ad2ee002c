"""Short conversation synopses for lead notices."""

import logging

from widget_relay.core.exceptions import RelayException, SummarizationFailure
from widget_relay.integrations.assistant import AssistantClient

logger = logging.getLogger(__name__)

_PROMPTS: dict[str, str] = {
    "ru": (
        "Ты помогаешь делать сверхкраткие выжимки диалога. Дай 3–5 лаконичных "
        "маркеров: суть запроса пользователя, что уже ответили, и следующие шаги. "
        "Без лишней воды."
    ),
    "en": (
        "You produce ultra-brief conversation summaries. Return 3–5 bullets with "
        "user intent, what was answered, and next steps. Be concise."
    ),
}


def system_prompt_for(locale: str) -> str:
    """Return the summary instruction for ``locale``, English when unknown."""
    return _PROMPTS.get(locale.lower(), _PROMPTS["en"])


class Summarizer:
    """Asks a chat model for a 3 to 5 bullet synopsis of a transcript."""

    def __init__(
        self,
        client: AssistantClient,
        *,
        model: str = "gpt-4o-mini",
        locale: str = "ru",
        max_tokens: int = 220,
        temperature: float = 0.2,
    ) -> None:
        self._client = client
        self.model = model
        self.locale = locale
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def summarize(self, excerpt: str, locale: str | None = None) -> str | None:
        """Summarize ``excerpt``.

        Args:
            excerpt: Role-prefixed transcript text.
            locale: Overrides the configured summary language.

        Returns:
            The synopsis, or None for an empty excerpt or empty reply.

        Raises:
            SummarizationFailure: If the model call fails.
        """
        if not excerpt or not excerpt.strip():
            return None

        try:
            summary = await self._client.complete(
                system=system_prompt_for(locale or self.locale),
                user=excerpt,
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except RelayException as e:
            raise SummarizationFailure(e.message) from e

        return summary.strip() if summary and summary.strip() else None
