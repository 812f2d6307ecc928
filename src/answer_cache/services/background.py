"""Fire-and-forget tasks that must not be garbage collected mid-flight."""

import asyncio
from collections.abc import Coroutine
from typing import Any

from answer_cache.logging import get_logger

logger = get_logger(__name__)


class BackgroundTasks:
    """Holds references to spawned tasks until they finish.

    Exceptions escaping a task are logged, never re-raised: nothing the
    caller already received depends on these tasks.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Background task failed", task=task.get_name(), error=repr(error))

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every spawned task (including ones spawned meanwhile) is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
