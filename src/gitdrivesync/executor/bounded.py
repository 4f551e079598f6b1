"""Bounded-concurrency executor with FIFO admission."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Awaitable, Callable, Optional, TypeVar

from gitdrivesync.errors import ExecutorInvariantError
from gitdrivesync.runlog import RunLog

T = TypeVar("T")

DEFAULT_LIMIT: int = 20


class BoundedExecutor:
    """
    Run coroutines with at most `limit` bodies in flight.

    Admission uses a turnstile of completion tickets: the queue starts with
    `limit` already-completed tickets. Each call appends its own open ticket,
    takes the oldest one, waits for it, runs, and always completes its own
    ticket afterwards. Calls are therefore admitted strictly in call order,
    call i+limit starts only after call i has finished, and a failing call
    still lets the next one in. A call also waits for its predecessor to be
    admitted, so bodies start in call order even when earlier calls finish
    out of order.
    """

    def __init__(self, limit: int = DEFAULT_LIMIT, run_log: Optional[RunLog] = None) -> None:
        if limit < 1:
            raise ValueError(f"Invalid limit ({limit}): must be 1 or greater")
        self.limit = limit
        self._log = run_log
        self._tickets: Optional[deque[asyncio.Future[None]]] = None
        self._tasks: list[asyncio.Task[Any]] = []
        self._last_admitted: Optional[asyncio.Future[None]] = None

    async def fire(self, desc: str, func: Callable[[], Awaitable[T]]) -> T:
        """
        Wait for a free slot (FIFO), then run func.

        Raises:
            ExecutorInvariantError: if no ticket is left to take.
            Exception: whatever func raises.
        """
        tickets = self._ticket_queue()
        loop = asyncio.get_running_loop()
        release: asyncio.Future[None] = loop.create_future()
        admitted: asyncio.Future[None] = loop.create_future()
        previous, self._last_admitted = self._last_admitted, admitted
        tickets.append(release)
        try:
            if not tickets:
                raise ExecutorInvariantError(f"Queue depleted ({desc})")
            my_turn = tickets.popleft()
            self._debug(f"fire({desc}): waiting for my turn")
            await my_turn
            if previous is not None:
                await previous
            admitted.set_result(None)
            self._debug(f"fire({desc}): running")
            return await func()
        except Exception as exc:
            self._debug(f"fire({desc}): error found: {exc!r}")
            raise
        finally:
            if not admitted.done():
                admitted.set_result(None)
            if not release.done():
                release.set_result(None)

    def submit(self, desc: str, func: Callable[[], Awaitable[T]]) -> asyncio.Task[T]:
        """Schedule fire(desc, func) as a task; tasks start in submission order."""
        task = asyncio.create_task(self.fire(desc, func))
        self._tasks.append(task)
        return task

    async def wait_all(self) -> list[Any]:
        """
        Wait until every submitted task has settled.

        Returns:
            One entry per submitted task, in submission order: its result or
            the exception it raised.
        """
        tasks, self._tasks = self._tasks, []
        if not tasks:
            return []
        return list(await asyncio.gather(*tasks, return_exceptions=True))

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    def _ticket_queue(self) -> deque[asyncio.Future[None]]:
        # Futures bind to the running loop, so the pre-completed tickets are
        # created on first use rather than in __init__.
        if self._tickets is None:
            loop = asyncio.get_running_loop()
            self._tickets = deque()
            for _ in range(self.limit):
                ticket: asyncio.Future[None] = loop.create_future()
                ticket.set_result(None)
                self._tickets.append(ticket)
        return self._tickets

    def _debug(self, message: str) -> None:
        if self._log is not None:
            self._log.debug(message)
