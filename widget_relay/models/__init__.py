"""Models package for the widget relay."""

from widget_relay.models.chat import (
    DONE_FRAME,
    ChatRequest,
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    InfoEvent,
    OutputEvent,
    RunEvent,
    RunEventKind,
    SessionHandle,
    SourceRef,
    SourcesEvent,
    Turn,
)
from widget_relay.models.leads import Contact, ContactKind, LeadNotice, LeadScanOptions

__all__ = [
    "DONE_FRAME",
    "ChatRequest",
    "Contact",
    "ContactKind",
    "ContentEvent",
    "DoneEvent",
    "ErrorEvent",
    "InfoEvent",
    "LeadNotice",
    "LeadScanOptions",
    "OutputEvent",
    "RunEvent",
    "RunEventKind",
    "SessionHandle",
    "SourceRef",
    "SourcesEvent",
    "Turn",
]
