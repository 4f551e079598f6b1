"""Batching of user-facing notices for a chat channel."""

from __future__ import annotations

from typing import Iterable, Protocol

from gitdrivesync.errors import SyncError
from gitdrivesync.runlog import RunLog

DEFAULT_MAX_CHARS: int = 30000


class NotificationChannel(Protocol):
    async def post(self, text: str) -> None: ...


class NotificationAggregator:
    """
    Buffer notices and post them in size-bounded batches.

    Batches join messages with newlines and are split only between
    messages: a single message longer than max_chars is sent on its own,
    untouched.
    """

    def __init__(self, max_chars: int = DEFAULT_MAX_CHARS) -> None:
        if max_chars < 1:
            raise ValueError("max_chars must be 1 or greater")
        self.max_chars = max_chars
        self._buffer: list[str] = []

    def add(self, message: str) -> None:
        self._buffer.append(message)

    def collect(self, run_log: RunLog) -> int:
        """Move pending notices from run_log into the buffer."""
        drained = run_log.drain_notices()
        self._buffer.extend(drained)
        return len(drained)

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def batches(self) -> list[str]:
        return _split_batches(self._buffer, self.max_chars)

    async def flush(self, channels: Iterable[NotificationChannel], run_log: RunLog) -> int:
        """
        Post buffered notices to every channel and clear the buffer.

        A failed batch is logged and skipped; the remaining batches are still
        posted. Returns the number of batches delivered.
        """
        batches = self.batches()
        self._buffer.clear()
        delivered = 0
        for channel in channels:
            for batch in batches:
                try:
                    await channel.post(batch)
                    delivered += 1
                except SyncError as exc:
                    run_log.error(f"Notification error ({channel!r}): {exc}")
        return delivered


def _split_batches(messages: list[str], max_chars: int) -> list[str]:
    batches: list[str] = []
    current: list[str] = []
    size = 0
    for message in messages:
        added = len(message) + (1 if current else 0)
        if current and size + added > max_chars:
            batches.append("\n".join(current))
            current, size = [], 0
            added = len(message)
        current.append(message)
        size += added
    if current:
        batches.append("\n".join(current))
    return batches
