"""
Dedup Registry

Collapses overlapping identical tool calls (same fingerprint) into one
approval exchange. Voice models re-issue a tool call when the user talks over
them; without this the approver would see the same dialog twice.

Pattern:
    1. ``register_or_join(fingerprint)`` runs without awaiting, so the
       check-and-create is atomic on the event loop
    2. First caller gets a ``NewEntry``: it owns the Future, must ``settle()``
       it once and ``release()`` the entry in a ``finally`` block
    3. Later callers get a ``JoinedEntry`` sharing the same Future and must not
       start a second exchange
    4. After ``release()`` the next identical call starts a fresh cycle
"""

import asyncio
from dataclasses import dataclass, field

from loguru import logger

from meeting_approval.protocol.message_types import ResolvedOutcome


@dataclass
class NewEntry:
    fingerprint: str
    future: asyncio.Future[ResolvedOutcome]
    _registry: "DedupRegistry" = field(repr=False)

    is_new = True

    def settle(self, outcome: ResolvedOutcome) -> bool:
        """Resolve the shared Future. Only the first call has any effect."""
        if self.future.done():
            logger.warning(
                f"[DedupRegistry] Ignoring second settlement for fingerprint={self.fingerprint} "
                f"(status={outcome.status.value})"
            )
            return False
        self.future.set_result(outcome)
        logger.debug(
            f"[DedupRegistry] Settled fingerprint={self.fingerprint} status={outcome.status.value}"
        )
        return True

    def release(self) -> None:
        self._registry._remove(self.fingerprint, self.future)


@dataclass
class JoinedEntry:
    fingerprint: str
    future: asyncio.Future[ResolvedOutcome]

    is_new = False

    async def join(self) -> ResolvedOutcome:
        return await asyncio.shield(self.future)


Registration = NewEntry | JoinedEntry


class DedupRegistry:
    """fingerprint → in-flight outcome Future. At most one entry per fingerprint."""

    def __init__(self) -> None:
        self._entries: dict[str, asyncio.Future[ResolvedOutcome]] = {}

    def register_or_join(self, fingerprint: str) -> Registration:
        existing = self._entries.get(fingerprint)
        if existing is not None:
            logger.info(f"[DedupRegistry] Joining in-flight request fingerprint={fingerprint}")
            return JoinedEntry(fingerprint=fingerprint, future=existing)

        future: asyncio.Future[ResolvedOutcome] = asyncio.get_running_loop().create_future()
        self._entries[fingerprint] = future
        logger.debug(
            f"[DedupRegistry] Registered fingerprint={fingerprint} (in flight: {len(self._entries)})"
        )
        return NewEntry(fingerprint=fingerprint, future=future, _registry=self)

    def _remove(self, fingerprint: str, future: asyncio.Future[ResolvedOutcome]) -> None:
        # Only drop the entry this owner created; a newer cycle may already hold the key
        if self._entries.get(fingerprint) is future:
            del self._entries[fingerprint]
            logger.debug(f"[DedupRegistry] Removed fingerprint={fingerprint}")

    def is_in_flight(self, fingerprint: str) -> bool:
        return fingerprint in self._entries

    def __len__(self) -> int:
        return len(self._entries)
