"""Supervised fire-and-forget background tasks.

Work that must outlive an HTTP response (lead notifications) is handed to a
TaskSupervisor instead of a bare ``asyncio.create_task``. The supervisor
keeps a strong reference to each task, logs failures, and lets the
application wait for outstanding work on shutdown.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class TaskSupervisor:
    """Owns detached tasks for the lifetime of the process."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of tasks that have not finished yet."""
        return sum(1 for task in self._tasks if not task.done())

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task[Any] | None:
        """Schedule ``coro`` on the running loop without awaiting it.

        Args:
            coro: Coroutine to run.
            name: Task name for logs.

        Returns:
            The created task, or None when the supervisor is shutting down.
        """
        if self._closed:
            logger.warning("Supervisor closed, dropping background task", extra={"task": name})
            coro.close()
            return None

        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.info("Background task cancelled", extra={"task": task.get_name()})
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Background task failed",
                exc_info=exc,
                extra={"task": task.get_name()},
            )

    async def join(self) -> None:
        """Wait until every task spawned so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def drain(self, timeout: float) -> None:
        """Stop accepting work and give pending tasks ``timeout`` seconds to finish.

        Tasks still running after the timeout are cancelled.
        """
        self._closed = True
        tasks = [task for task in self._tasks if not task.done()]
        if not tasks:
            return

        logger.info("Waiting for %d background task(s) before shutdown", len(tasks))
        _done, still_running = await asyncio.wait(tasks, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(
                "Cancelled %d background task(s) at shutdown",
                len(still_running),
            )
            await asyncio.gather(*still_running, return_exceptions=True)
