"""
Refresh Coordination

Single-flight guard for channel refreshes: at most one refresh runs at a
time, and callers arriving while it runs share its outcome.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable


logger = logging.getLogger(__name__)


class RefreshCoordinator:
    """
    Coordinates refresh operations to prevent concurrent executions.

    Keeps a handle on the in-flight refresh task. A second request while it is
    running does not start another delete-and-reinsert cycle; it awaits the
    running task and gets the same result (or exception).
    """

    def __init__(self):
        """Initialize the coordinator with no refresh in flight."""
        self._lock = asyncio.Lock()
        self._current: asyncio.Task | None = None

    async def execute(self, refresh_func: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run refresh_func, or join the refresh already in progress.

        Args:
            refresh_func: Async function performing one full refresh

        Returns:
            Result of the refresh that this call started or joined

        Raises:
            Any exception raised by the refresh
        """
        async with self._lock:
            task = self._current
            if task is None or task.done():
                task = asyncio.create_task(self._run(refresh_func))
                self._current = task
            else:
                logger.info("Channel refresh already in progress, waiting for it to finish")

        # Shield so a disconnected caller does not cancel the shared refresh
        return await asyncio.shield(task)

    async def _run(self, refresh_func: Callable[[], Awaitable[Any]]) -> Any:
        return await refresh_func()

    def is_refreshing(self) -> bool:
        """
        Check if a refresh operation is currently in progress.

        Returns:
            True if a refresh is running, False otherwise
        """
        return self._current is not None and not self._current.done()

    def cancel(self) -> None:
        """Cancel the in-flight refresh (application shutdown only)."""
        if self.is_refreshing():
            self._current.cancel()
