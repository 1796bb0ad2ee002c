"""Keep-alive timer for long-lived streaming responses."""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

# SSE comment line; conforming clients ignore it
HEARTBEAT_FRAME = ":\n\n"


class Heartbeat:
    """Periodically invoke ``beat`` on a background task until stopped.

    The beat runs every ``interval`` seconds regardless of other activity on
    the connection. An exception from ``beat`` means the transport is gone:
    it is swallowed and the loop ends.

    Args:
        interval: Seconds between beats.
        beat: Coroutine function writing one keep-alive frame.
        name: Task name used in logs.
    """

    def __init__(
        self,
        interval: float,
        beat: Callable[[], Awaitable[None]],
        name: str = "sse-heartbeat",
    ) -> None:
        self.interval = interval
        self._beat = beat
        self._name = name
        self._task: asyncio.Task[None] | None = None
        self.beats = 0

    @property
    def running(self) -> bool:
        """True while the timer task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the timer. Calling start on a running heartbeat is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self._name)

    async def stop(self) -> None:
        """Cancel the timer and wait for it to finish. Safe to call repeatedly."""
        task = self._task
        if task is None:
            return
        if not task.done():
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self._beat()
            except Exception:
                logger.debug("Heartbeat write failed, stopping", extra={"task": self._name})
                return
            self.beats += 1
