"""Tests for client stream event framing."""

import json

from widget_relay.models.chat import (
    DONE_FRAME,
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    InfoEvent,
    SourceRef,
    SourcesEvent,
)


def _payload(frame: str) -> dict:
    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    return json.loads(frame[len("data: ") : -2])


class TestOutputEvents:
    """Tests for OutputEvent.to_sse."""

    def test_info_frame(self) -> None:
        """Test the new-thread announcement."""
        assert _payload(InfoEvent("thread_1").to_sse()) == {"info": {"id": "thread_1"}}

    def test_content_frame_keeps_unicode(self) -> None:
        """Test content is written without ASCII escaping."""
        frame = ContentEvent("Привет, мир").to_sse()
        assert "Привет" in frame
        assert _payload(frame) == {"content": "Привет, мир"}

    def test_content_with_newlines_stays_one_frame(self) -> None:
        """Test embedded newlines are JSON-escaped."""
        frame = ContentEvent("line 1\n\nline 2").to_sse()
        assert frame.count("\n\n") == 1

    def test_sources_frame(self) -> None:
        """Test cited files are listed in order."""
        event = SourcesEvent((SourceRef("f1", "a.pdf"), SourceRef("f2", "b.pdf")))
        assert _payload(event.to_sse()) == {
            "sources": [
                {"file_id": "f1", "filename": "a.pdf"},
                {"file_id": "f2", "filename": "b.pdf"},
            ]
        }

    def test_done_frame(self) -> None:
        """Test the end-of-stream sentinel."""
        assert DoneEvent().to_sse() == "data: [DONE]\n\n"

    def test_error_frame_is_followed_by_done(self) -> None:
        """Test errors still terminate with the sentinel."""
        frame = ErrorEvent("Assistant is not configured on server.").to_sse()
        error_frame, rest = frame.split("\n\n", 1)
        assert json.loads(error_frame[len("data: ") :]) == {
            "error": "Assistant is not configured on server."
        }
        assert rest == DONE_FRAME

    def test_terminal_flags(self) -> None:
        """Test only Done and Error end the stream."""
        assert DoneEvent().terminal is True
        assert ErrorEvent("x").terminal is True
        assert InfoEvent("t").terminal is False
        assert ContentEvent("c").terminal is False
        assert SourcesEvent(()).terminal is False
