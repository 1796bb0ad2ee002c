"""Tests for citation stripping and source resolution."""

from unittest.mock import MagicMock

import pytest

from widget_relay.core.cache import AsyncTTLCache
from widget_relay.core.exceptions import LookupFailure
from widget_relay.models.chat import SourceRef
from widget_relay.services.citations import CitationResolver, strip_citation_markers


class TestStripCitationMarkers:
    """Tests for strip_citation_markers."""

    def test_removes_only_markers(self) -> None:
        """Test markers are removed and all other text is untouched."""
        text = "Plans start at $10【4:0†pricing.pdf】 per seat【12:3†faq_v2.md】."
        assert strip_citation_markers(text) == "Plans start at $10 per seat."

    def test_idempotent(self) -> None:
        """Test stripping twice equals stripping once."""
        text = "a【1:2†b.pdf】c"
        once = strip_citation_markers(text)
        assert strip_citation_markers(once) == once

    def test_lookalikes_kept(self) -> None:
        """Test brackets without the marker shape stay."""
        for text in ["【note】", "【4:0 pricing.pdf】", "[4:0†a.pdf]", ""]:
            assert strip_citation_markers(text) == text


class TestCitationResolver:
    """Tests for CitationResolver."""

    @pytest.mark.asyncio
    async def test_file_name_is_cached(self, mock_assistant: MagicMock) -> None:
        """Test repeated lookups hit the cache."""
        resolver = CitationResolver(mock_assistant, AsyncTTLCache("file-names"))

        assert await resolver.file_name("file_a") == "file_a.pdf"
        assert await resolver.file_name("file_a") == "file_a.pdf"
        mock_assistant.get_file_name.assert_awaited_once_with("file_a")

    @pytest.mark.asyncio
    async def test_failed_lookup_falls_back_to_id(self, mock_assistant: MagicMock) -> None:
        """Test failures return the raw id and are retried later."""
        mock_assistant.get_file_name.side_effect = LookupFailure("file_a")
        resolver = CitationResolver(mock_assistant, AsyncTTLCache("file-names"))

        assert await resolver.file_name("file_a") == "file_a"
        assert await resolver.file_name("file_a") == "file_a"
        assert mock_assistant.get_file_name.await_count == 2

    @pytest.mark.asyncio
    async def test_sources_for_dedupes_in_order(self, mock_assistant: MagicMock) -> None:
        """Test each cited file appears once, in first-citation order."""
        mock_assistant.get_message_file_ids.return_value = ["file_b", "file_a", "file_b"]
        resolver = CitationResolver(mock_assistant, AsyncTTLCache("file-names"))

        sources = await resolver.sources_for("thread_1", "msg_1")

        assert sources == [
            SourceRef("file_b", "file_b.pdf"),
            SourceRef("file_a", "file_a.pdf"),
        ]
