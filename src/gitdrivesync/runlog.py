"""Per-run log trail and user-facing notice stream."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from gitdrivesync.util.time import now_utc, to_rfc3339

logger = logging.getLogger("gitdrivesync")


class Severity(str, Enum):
    DEBUG = "DEBUG"
    INFO = "LOG"
    ERROR = "ERROR"
    NOTICE = "NOTICE"


_LOGGING_LEVELS: dict[Severity, int] = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.ERROR: logging.ERROR,
    Severity.NOTICE: logging.INFO,
}


@dataclass(slots=True, frozen=True)
class LogEntry:
    severity: Severity
    message: str
    timestamp: datetime = field(default_factory=now_utc)

    def __str__(self) -> str:
        return f"{to_rfc3339(self.timestamp)} {self.severity.value}: {self.message}"


class RunLog:
    """
    Append-only record of one run.

    debug/info/error entries form the trail kept for post-mortem reporting.
    Notices are user-facing (chat channel) messages kept apart from the trail
    and drained by whoever posts them. Every entry is also forwarded to the
    stdlib logger so console output follows the configured handlers.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []
        self._notices: list[LogEntry] = []

    def debug(self, message: str) -> None:
        self._append(Severity.DEBUG, message)

    def info(self, message: str) -> None:
        self._append(Severity.INFO, message)

    def error(self, message: str) -> None:
        self._append(Severity.ERROR, message)

    def notice(self, message: str) -> None:
        entry = LogEntry(Severity.NOTICE, message)
        self._notices.append(entry)
        logger.log(_LOGGING_LEVELS[Severity.NOTICE], message)

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    @property
    def has_errors(self) -> bool:
        return any(e.severity is Severity.ERROR for e in self._entries)

    def trail(self) -> str:
        """Full debug/info/error trail, one timestamped line per entry."""
        return "\n".join(str(e) for e in self._entries)

    def errors(self) -> str:
        return "\n".join(str(e) for e in self._entries if e.severity is Severity.ERROR)

    def notices(self) -> list[str]:
        # Notices are posted without timestamps.
        return [e.message for e in self._notices]

    def drain_notices(self) -> list[str]:
        """Return pending notices and clear them."""
        drained = [e.message for e in self._notices]
        self._notices.clear()
        return drained

    def _append(self, severity: Severity, message: str) -> None:
        self._entries.append(LogEntry(severity, message))
        logger.log(_LOGGING_LEVELS[severity], message)
