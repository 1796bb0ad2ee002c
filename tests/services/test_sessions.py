"""Tests for conversation session management."""

from unittest.mock import MagicMock

import pytest

from widget_relay.core.exceptions import UpstreamTransientError
from widget_relay.services.sessions import ConversationSessionManager


class TestConversationSessionManager:
    """Tests for ConversationSessionManager.ensure_session."""

    @pytest.mark.asyncio
    async def test_existing_id_is_reused(self, mock_assistant: MagicMock) -> None:
        """Test a supplied id is trusted without an upstream call."""
        session = await ConversationSessionManager(mock_assistant).ensure_session("thread_1")
        assert session.id == "thread_1"
        assert session.created is False
        mock_assistant.create_thread.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_existing_id_returned_unchanged(self, mock_assistant: MagicMock) -> None:
        """Test the supplied id is passed through exactly as given."""
        session = await ConversationSessionManager(mock_assistant).ensure_session(" thread_1 ")
        assert session.id == " thread_1 "

    @pytest.mark.asyncio
    @pytest.mark.parametrize("existing", [None, "", "   "])
    async def test_missing_id_creates_thread(
        self, mock_assistant: MagicMock, existing: str | None
    ) -> None:
        """Test absent or blank ids create a new thread."""
        session = await ConversationSessionManager(mock_assistant).ensure_session(existing)
        assert session.id == "thread_new"
        assert session.created is True

    @pytest.mark.asyncio
    async def test_creation_failure_propagates(self, mock_assistant: MagicMock) -> None:
        """Test upstream errors reach the relay."""
        mock_assistant.create_thread.side_effect = UpstreamTransientError("create_thread")
        with pytest.raises(UpstreamTransientError):
            await ConversationSessionManager(mock_assistant).ensure_session()
