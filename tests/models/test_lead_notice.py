"""Tests for the lead notice model."""

import pytest

from widget_relay.models.leads import LeadNotice


class TestLeadNotice:
    """Tests for LeadNotice."""

    def test_requires_contacts(self) -> None:
        """Test a notice without contacts cannot be built."""
        with pytest.raises(ValueError):
            LeadNotice(session_id="thread_1", contacts=[])

    def test_format_without_summary(self) -> None:
        """Test the plain-text layout without a summary section."""
        notice = LeadNotice(session_id="thread_1", contacts=["a@b.io", "+79123456789"])
        assert notice.format() == (
            "🔔 Lead with contacts\n"
            "Thread: thread_1\n"
            "\n"
            "Contacts:\n"
            "• a@b.io\n"
            "• +79123456789"
        )

    def test_format_with_summary(self) -> None:
        """Test the summary section is appended last."""
        notice = LeadNotice(
            session_id="thread_1",
            contacts=["a@b.io"],
            summary="- wants pricing",
            title="New lead",
        )
        text = notice.format()
        assert text.startswith("New lead\n")
        assert text.endswith("\n\nSummary:\n- wants pricing")
