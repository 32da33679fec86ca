"""Ordering helpers for interleaved remote calls: stale-response guard and debounce."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class RequestGuard:
    """Monotonic request-id guard for interruptible fetches.

    Usage::

        token = guard.issue()
        result = await gateway.get_candidates(term)
        if not guard.is_current(token):
            return  # a newer request was dispatched meanwhile
    """

    def __init__(self) -> None:
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        """Tag a new request; every earlier token becomes stale."""
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest


class Debouncer:
    """Run a coroutine callback once input has been quiet for ``delay_s`` seconds.

    Only the quiet period is cancellable. A run that has already started is
    left to finish; callers pair the callback with a ``RequestGuard`` so a
    superseded run discards its own result.

    ``trigger()`` must be called from inside a running event loop.
    """

    def __init__(self, delay_s: float, callback: Callable[[], Awaitable[None]]) -> None:
        self._delay_s = delay_s
        self._callback = callback
        self._timer: asyncio.TimerHandle | None = None
        self._running: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None or bool(self._running)

    def trigger(self) -> None:
        """(Re)start the quiet period, dropping a run that has not started yet."""
        self.cancel()
        self._timer = asyncio.get_running_loop().call_later(self._delay_s, self._start)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Debounced run was superseded")

    async def wait(self) -> None:
        """Wait for the quiet period to elapse and every started run to finish."""
        loop = asyncio.get_running_loop()
        while self._timer is not None:
            await asyncio.sleep(max(self._timer.when() - loop.time(), 0))
        while self._running:
            await asyncio.gather(*self._running)

    def _start(self) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._run())
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run(self) -> None:
        await self._callback()
