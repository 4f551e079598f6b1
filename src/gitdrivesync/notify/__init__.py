"""Notification exports for gitdrivesync."""

from __future__ import annotations

from .aggregator import DEFAULT_MAX_CHARS, NotificationAggregator, NotificationChannel
from .slack import SLACK_HOOKS_PREFIX, SlackConfig, SlackWebhookChannel

__all__ = [
    "NotificationAggregator",
    "NotificationChannel",
    "DEFAULT_MAX_CHARS",
    "SlackConfig",
    "SlackWebhookChannel",
    "SLACK_HOOKS_PREFIX",
]
