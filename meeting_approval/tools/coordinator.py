"""
Approval Coordinator

Owns the process-wide mutable state of the approval engine for one agent
session: the dedup registry, the sequential approval queue and the detached
background tasks. Create one per session at session start and close it at
session end; the tool entry point holds a reference to it.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from loguru import logger

from .approval_queue import SequentialApprovalQueue
from .dedup_registry import DedupRegistry


class ApprovalCoordinator:
    def __init__(self) -> None:
        self.registry = DedupRegistry()
        self.queue = SequentialApprovalQueue()
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    def spawn(self, coro: Coroutine[Any, Any, None], name: str) -> asyncio.Task[None]:
        """Start ``coro`` detached from the caller; a reference is kept until it finishes."""
        if self._closed:
            coro.close()
            raise RuntimeError("ApprovalCoordinator is closed")
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"[ApprovalCoordinator] Task {task.get_name()} was cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.opt(exception=error).error(
                f"[ApprovalCoordinator] Task {task.get_name()} escaped with an error"
            )

    async def drain(self, timeout: float | None = None) -> None:
        """Wait until every background approval sequence has finished."""
        while self._tasks:
            pending = list(self._tasks)
            _, not_done = await asyncio.wait(pending, timeout=timeout)
            if not_done:
                raise TimeoutError(f"{len(not_done)} approval task(s) still running")

    async def aclose(self) -> None:
        """Cancel outstanding sequences; each still releases its queue token and dedup entry."""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(f"[ApprovalCoordinator] Closed ({len(tasks)} task(s) cancelled)")
