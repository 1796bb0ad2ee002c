"""Extract contact details from free chat text.

Regex-based heuristics, no LLM calls. Four independent passes run in a
fixed order (emails, phones, handles, messaging links) and their matches
are merged in first-seen order. False positives and negatives within these
pattern classes are expected.
"""

import logging
import re

from widget_relay.models.leads import Contact, ContactKind

logger = logging.getLogger(__name__)

# Pass 1: email-like tokens
_EMAIL = re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.IGNORECASE)

# Pass 2: 8+ digits with +, 00 prefix, spaces, hyphens or parentheses between them
_PHONE = re.compile(r"(?:(?:\+|00)?\d[ \-()]*){7,}\d")

# Pass 3: @handles with 5+ word characters; the lookbehind skips email domains
_HANDLE = re.compile(r"(?<![\w.%+-])@\w{5,}")

# Pass 4: links to messaging apps
_MESSAGING_LINK = re.compile(
    r"\b(?:https?://)?(?:t\.me|wa\.me|whatsapp\.com)/\S+",
    re.IGNORECASE,
)

_PASSES: tuple[tuple[ContactKind, re.Pattern[str]], ...] = (
    (ContactKind.EMAIL, _EMAIL),
    (ContactKind.PHONE, _PHONE),
    (ContactKind.HANDLE, _HANDLE),
    (ContactKind.LINK, _MESSAGING_LINK),
)


def find_contacts(text: str | None) -> list[Contact]:
    """Find contact candidates in ``text``.

    Args:
        text: Arbitrary user text.

    Returns:
        Contacts ordered by pass (emails, phones, handles, links) and by
        position within a pass, with exact-duplicate strings removed.
    """
    if not text:
        return []

    seen: set[str] = set()
    contacts: list[Contact] = []
    for kind, pattern in _PASSES:
        for match in pattern.finditer(text):
            value = match.group(0)
            if value in seen:
                continue
            seen.add(value)
            contacts.append(Contact(value=value, kind=kind))
    return contacts


def extract_contacts(text: str | None) -> list[str]:
    """Return the raw contact strings found in ``text``, in notice order."""
    return [contact.value for contact in find_contacts(text)]
