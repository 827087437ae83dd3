"""
Best-effort background execution

Work submitted here never reaches the caller: failures are logged and
dropped. Used for analytics writes that must not slow down or break the
response path.
"""
import asyncio
from typing import Any, Coroutine, Set

from kb_assistant.utils.logger import get_logger

logger = get_logger(__name__)


class BestEffortRunner:
    """Schedule coroutines as detached tasks and swallow their failures."""

    def __init__(self):
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def submit(self, coro: Coroutine[Any, Any, Any], description: str) -> asyncio.Task:
        """
        Run coro in the background

        Args:
            coro: Coroutine to schedule on the running loop
            description: Short label used in log messages

        Returns:
            The scheduled task (already tracked, callers may ignore it)
        """
        task = asyncio.create_task(self._guard(coro, description))
        # Strong reference until done, otherwise the loop may collect the task
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait for every submitted task to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @staticmethod
    async def _guard(coro: Coroutine[Any, Any, Any], description: str) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            logger.warning(f"Background task cancelled: {description}")
            raise
        except Exception as e:
            logger.warning(f"Background task failed ({description}): {e}")
