"""Trailing-edge debounce on the running event loop."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Run ``callback`` once the calls to ``trigger()`` pause for ``delay_s``.

    Each trigger restarts the quiet period; only the last one fires. A
    coroutine callback runs as a task, and a fired task is never cancelled by
    a later trigger.
    """

    def __init__(
        self,
        delay_s: float,
        callback: Callable[[], Awaitable[None] | None],
    ) -> None:
        self._delay_s = delay_s
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        """True while a fire is scheduled but has not happened yet."""
        return self._handle is not None

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def trigger(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay_s, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def wait(self) -> None:
        """Wait for tasks already fired to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _fire(self) -> None:
        self._handle = None
        result = self._callback()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
