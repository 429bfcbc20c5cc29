"""Fire-and-forget background work with its own error logging."""

import asyncio
from typing import Coroutine, Any

from .logging import get_logger

logger = get_logger("utils.tasks")


class BackgroundTasks:
    """Keeps a reference to detached tasks and logs how they ended.

    The dispatch loop never awaits these; there is no ordering guarantee
    relative to later lines.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()
        self._total_failed: int = 0

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("background_task_cancelled", task=task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            self._total_failed += 1
            logger.error("background_task_failed", task=task.get_name(), error=str(exc))

    @property
    def pending(self) -> int:
        return len(self._tasks)

    @property
    def total_failed(self) -> int:
        return self._total_failed

    async def drain(self) -> None:
        """Wait for every pending task. Used on shutdown and in tests."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
