"""Best-effort background side effects."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

_logger = logging.getLogger(__name__)


@dataclass
class BackgroundTasks:
    """Runs fire-and-forget coroutines and logs their failures."""

    _tasks: set[asyncio.Task[None]] = field(default_factory=set)

    def spawn(self, name: str, factory: Callable[[], Awaitable[None]]) -> None:
        """Schedule a coroutine on the running loop without awaiting it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _logger.warning("No running event loop, dropped background task %s", name)
            return
        task = loop.create_task(self._run(name, factory), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for every pending task, including ones spawned meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def _run(self, name: str, factory: Callable[[], Awaitable[None]]) -> None:
        try:
            await factory()
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Background task %s failed: %s", name, exc)
