"""Slack incoming-webhook channel."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional, Sequence, Union

import httpx

from gitdrivesync.errors import NotificationError

logger = logging.getLogger(__name__)

# Bare webhook ids (TXXXX/BXXXX/secret) get the hooks prefix.
_SLACK_ID_RE = re.compile(r"^[A-Z0-9]{9,15}/[A-Z0-9]{9,15}/[0-9a-zA-Z_+/-]{18,32}$")
SLACK_HOOKS_PREFIX: str = "https://hooks.slack.com/services/"

MAX_ATTEMPTS: int = 5
RETRY_DELAY_SEC: float = 3.0
TIMEOUT_SEC: float = 60.0


class SlackConfig:
    """
    Webhook targets parsed from a '|'-separated string (or a list).

    Entries that are not https URLs after prefixing are dropped.
    """

    def __init__(self, urls: Union[str, Sequence[str], None] = None) -> None:
        if urls is None:
            items: list[str] = []
        elif isinstance(urls, str):
            items = urls.split("|")
        else:
            items = list(urls)

        cleaned = [u.strip() for u in items if u and u.strip()]
        self.urls: list[str] = [
            u
            for u in (SLACK_HOOKS_PREFIX + c if _SLACK_ID_RE.match(c) else c for c in cleaned)
            if u.lower().startswith("https://")
        ]

    def channels(
        self,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> list[SlackWebhookChannel]:
        return [SlackWebhookChannel(url, client=client) for url in self.urls]


class SlackWebhookChannel:
    """
    Post text messages to one Slack webhook.

    A post is attempted up to `max_attempts` times with a fixed delay; the
    final failure is raised as NotificationError.
    """

    def __init__(
        self,
        url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay_sec: float = RETRY_DELAY_SEC,
        timeout_sec: float = TIMEOUT_SEC,
    ) -> None:
        self.url = url
        self._client = client
        self._max_attempts = max(1, max_attempts)
        self._retry_delay_sec = retry_delay_sec
        self._timeout_sec = timeout_sec

    def __repr__(self) -> str:
        # Webhook URLs are secrets; keep only the host.
        return f"SlackWebhookChannel({httpx.URL(self.url).host!r})"

    async def post(self, text: str) -> None:
        if self._client is not None:
            await self._post_with_retries(self._client, text)
            return
        async with httpx.AsyncClient(timeout=self._timeout_sec) as client:
            await self._post_with_retries(client, text)

    async def _post_with_retries(self, client: httpx.AsyncClient, text: str) -> None:
        attempt = 0
        while True:
            try:
                response = await client.post(
                    self.url,
                    json={"text": text},
                    timeout=self._timeout_sec,
                )
                response.raise_for_status()
                return
            except httpx.HTTPError as exc:
                attempt += 1
                if attempt >= self._max_attempts:
                    raise NotificationError(
                        "Slack API call failed",
                        details={"attempts": attempt, "error": type(exc).__name__},
                        cause=exc,
                    ) from exc
                logger.debug("Slack API call error (retrying): %s", type(exc).__name__)
            await asyncio.sleep(self._retry_delay_sec)
