"""Async helpers for awaiting blocking Drive API calls."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_sync(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run a blocking function in a worker thread without blocking the event loop.

    Only the I/O happens off-thread; callers mutate shared state after the
    await returns, on the event-loop thread.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
