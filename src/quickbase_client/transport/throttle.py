"""Admission control for outbound API calls.

Quickbase limits how many requests a client may have open at once (and, for
some realms, how many it may start per period). ``Throttle`` enforces that
limit on the client side so callers can fire off many calls concurrently
without tripping the server's limits.

## Modes

| Setting | Behaviour |
|---------|-----------|
| `max_concurrent=Throttle.UNBOUNDED` | No limiting at all |
| `window_ms=None` | A slot is busy from acquire until release |
| `window_ms=1000` | A slot is busy until release AND at least 1000 ms after it was granted |
| `error_on_limit=True` | Raise `NoConnectionsAvailableError` instead of queueing |

## Example

```python
throttle = Throttle(max_concurrent=10, window_ms=1000)

async with throttle.slot():
    response = await http.send(request)
```

All bookkeeping runs on the event loop thread; the only suspension point is
the wait on a queued acquirer's future.
"""

import asyncio
import logging
from collections import deque
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from quickbase_client.errors.exceptions import NoConnectionsAvailableError

logger = logging.getLogger(__name__)


class Throttle:
    """Limit concurrent (and optionally per-window) slot holders.

    Args:
        max_concurrent: Maximum number of slots held at once, or
            ``Throttle.UNBOUNDED`` to disable limiting (default: 10)
        window_ms: If set, each slot stays counted for at least this many
            milliseconds after it was granted (default: None)
        error_on_limit: Raise instead of queueing when no slot is free
            (default: False)
    """

    UNBOUNDED = -1

    def __init__(
        self,
        max_concurrent: int = 10,
        window_ms: float | None = None,
        *,
        error_on_limit: bool = False,
    ) -> None:
        if max_concurrent != self.UNBOUNDED and max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1 or Throttle.UNBOUNDED, got {max_concurrent}")

        self.max_concurrent = max_concurrent
        self.window_ms = window_ms if window_ms and window_ms > 0 else None
        self.error_on_limit = error_on_limit

        self._in_use = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def unbounded(self) -> bool:
        return self.max_concurrent == self.UNBOUNDED

    @property
    def in_use(self) -> int:
        """Number of slots currently granted (including window hold-over)."""
        return self._in_use

    @property
    def pending(self) -> int:
        """Number of acquirers queued for a slot."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def acquire(self) -> float:
        """Wait for a slot.

        Returns:
            Loop time at which the slot was granted; pass it to ``release``.

        Raises:
            NoConnectionsAvailableError: If no slot is free and the throttle
                was built with ``error_on_limit=True``.
        """
        loop = asyncio.get_running_loop()

        if self.unbounded:
            return loop.time()

        if self._in_use < self.max_concurrent and not self.pending:
            self._in_use += 1
            return loop.time()

        if self.error_on_limit:
            raise NoConnectionsAvailableError(self.max_concurrent)

        waiter: asyncio.Future[None] = loop.create_future()
        self._waiters.append(waiter)
        logger.debug(f"Throttle full ({self._in_use}/{self.max_concurrent}), queued at position {self.pending}")

        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was handed over just before the cancellation landed
                self._free_slot()
            else:
                self._discard(waiter)
            raise

        return loop.time()

    def release(self, granted_at: float) -> None:
        """Return a slot granted at loop time ``granted_at``."""
        if self.unbounded:
            return

        if self.window_ms is None:
            self._free_slot()
            return

        loop = asyncio.get_running_loop()
        remaining = (granted_at + self.window_ms / 1000) - loop.time()

        if remaining > 0:
            loop.call_later(remaining, self._free_slot)
        else:
            self._free_slot()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold a slot for the duration of the ``async with`` block."""
        granted_at = await self.acquire()
        try:
            yield
        finally:
            self.release(granted_at)

    def _free_slot(self) -> None:
        # Hand the slot straight to the oldest live waiter so in_use never
        # dips and lets a newcomer jump the queue.
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return

        self._in_use -= 1

    def _discard(self, waiter: asyncio.Future[None]) -> None:
        try:
            self._waiters.remove(waiter)
        except ValueError:
            pass
