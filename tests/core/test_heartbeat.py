"""Tests for the keep-alive heartbeat."""

import asyncio

import pytest

from widget_relay.core.heartbeat import HEARTBEAT_FRAME, Heartbeat


class TestHeartbeat:
    """Tests for Heartbeat."""

    def test_frame_is_sse_comment(self) -> None:
        """Test the keep-alive frame is a bare SSE comment."""
        assert HEARTBEAT_FRAME == ":\n\n"

    @pytest.mark.asyncio
    async def test_beats_until_stopped(self) -> None:
        """Test beats fire periodically and stop after stop()."""
        frames: list[str] = []

        async def beat() -> None:
            frames.append(HEARTBEAT_FRAME)

        heartbeat = Heartbeat(0.01, beat)
        heartbeat.start()
        await asyncio.sleep(0.08)
        await heartbeat.stop()

        count = len(frames)
        assert count >= 2
        assert heartbeat.running is False
        await asyncio.sleep(0.03)
        assert len(frames) == count

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self) -> None:
        """Test stop can be called before start and more than once."""
        heartbeat = Heartbeat(10, lambda: asyncio.sleep(0))
        await heartbeat.stop()
        heartbeat.start()
        await heartbeat.stop()
        await heartbeat.stop()
        assert heartbeat.running is False

    @pytest.mark.asyncio
    async def test_start_twice_keeps_single_task(self) -> None:
        """Test a second start does not spawn another timer."""
        heartbeat = Heartbeat(10, lambda: asyncio.sleep(0))
        heartbeat.start()
        task = heartbeat._task
        heartbeat.start()
        assert heartbeat._task is task
        await heartbeat.stop()

    @pytest.mark.asyncio
    async def test_failing_beat_ends_loop(self) -> None:
        """Test a write failure stops the timer without raising."""

        async def beat() -> None:
            raise ConnectionResetError("client gone")

        heartbeat = Heartbeat(0.01, beat)
        heartbeat.start()
        await asyncio.sleep(0.05)
        assert heartbeat.running is False
        assert heartbeat.beats == 0
        await heartbeat.stop()
