"""
Sequential Approval Queue

Guarantees at most one approval dialog is visible to a human at a time.
Requests are granted strictly in arrival order (FIFO), no matter how many
tool calls pile up while a dialog is open.

Structure:
    - ``enqueue()`` reserves a position synchronously, at tool-call time,
      so arrival order is fixed before any background task runs
    - ``wait_for_turn(token)`` suspends until the token is at the head
    - ``release(token)`` hands the turn to the next waiter; idempotent and
      safe for tokens that never got their turn
    - ``hold()`` wraps all three in an ``async with`` block

The holder keeps its turn until it calls ``release()``, however long the
exchange and the announcement that follows it take. Callers release in a
``finally`` block, so a holder that fails or is cancelled still hands over.

Safe for concurrent tasks within one event loop; no thread locks.
"""

import asyncio
import itertools
from collections import deque
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger


class QueueToken:
    """A caller's position in the approval queue."""

    __slots__ = ("_granted", "position", "released")

    def __init__(self, position: int, granted: asyncio.Future[None]) -> None:
        self.position = position
        self.released = False
        self._granted = granted

    @property
    def granted(self) -> bool:
        return self._granted.done() and not self._granted.cancelled()

    def __repr__(self) -> str:
        return f"QueueToken(#{self.position}, granted={self.granted}, released={self.released})"


class SequentialApprovalQueue:
    def __init__(self) -> None:
        self._sequence = itertools.count(1)
        self._waiters: deque[QueueToken] = deque()
        self._holder: QueueToken | None = None

    @property
    def holder(self) -> QueueToken | None:
        return self._holder

    @property
    def waiting_count(self) -> int:
        return len(self._waiters)

    def enqueue(self) -> QueueToken:
        """Reserve the next position. Does not suspend."""
        loop = asyncio.get_running_loop()
        token = QueueToken(next(self._sequence), loop.create_future())
        if self._holder is None and not self._waiters:
            self._grant(token)
        else:
            self._waiters.append(token)
            logger.debug(
                f"[ApprovalQueue] {token} queued behind {self._holder} "
                f"({len(self._waiters)} waiting)"
            )
        return token

    async def wait_for_turn(self, token: QueueToken) -> QueueToken:
        await token._granted
        return token

    async def acquire(self) -> QueueToken:
        """Enqueue and suspend until the returned token holds the queue."""
        return await self.wait_for_turn(self.enqueue())

    def release(self, token: QueueToken) -> None:
        if token.released:
            return
        token.released = True

        if self._holder is token:
            self._holder = None
            logger.debug(f"[ApprovalQueue] Released {token}")
            self._advance()
        else:
            # Never reached the head (e.g. cancelled while waiting)
            try:
                self._waiters.remove(token)
            except ValueError:
                pass
            if not token._granted.done():
                token._granted.cancel()
            logger.debug(f"[ApprovalQueue] Withdrew {token} before its turn")

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[QueueToken]:
        token = self.enqueue()
        try:
            yield await self.wait_for_turn(token)
        finally:
            self.release(token)

    def _grant(self, token: QueueToken) -> None:
        self._holder = token
        token._granted.set_result(None)
        logger.debug(f"[ApprovalQueue] Granted {token}")

    def _advance(self) -> None:
        while self._waiters:
            token = self._waiters.popleft()
            if token._granted.cancelled():
                # Waiter gave up; its own release() will be a no-op
                token.released = True
                logger.debug(f"[ApprovalQueue] Skipping abandoned {token}")
                continue
            self._grant(token)
            return
