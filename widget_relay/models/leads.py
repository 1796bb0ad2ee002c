"""Lead detection models.

Contacts found in user turns and the notice sent to the sales channel
when a conversation contains any.
"""

from dataclasses import dataclass
from enum import Enum


class ContactKind(str, Enum):
    """Pattern class a contact was matched by."""

    EMAIL = "email"
    PHONE = "phone"
    HANDLE = "handle"
    LINK = "link"


@dataclass(frozen=True)
class Contact:
    """A raw matched contact string and the pattern class that found it."""

    value: str
    kind: ContactKind


@dataclass
class LeadNotice:
    """Lead summary pushed to the notification channel.

    Only built when at least one contact was found; formatted, sent and
    discarded.
    """

    session_id: str
    contacts: list[str]
    summary: str | None = None
    title: str = "🔔 Lead with contacts"

    def __post_init__(self) -> None:
        if not self.contacts:
            raise ValueError("LeadNotice requires at least one contact")

    def format(self) -> str:
        """Render the notice as plain text (no markup, Telegram-safe)."""
        lines = [self.title, f"Thread: {self.session_id}", "", "Contacts:"]
        lines.extend(f"• {contact}" for contact in self.contacts)
        if self.summary:
            lines.extend(["", "Summary:", self.summary])
        return "\n".join(lines)


@dataclass
class LeadScanOptions:
    """Per-invocation knobs for the lead pipeline."""

    scan_limit: int = 30
    excerpt_limit: int = 20
    title: str = "🔔 Lead with contacts"
    locale: str | None = None
