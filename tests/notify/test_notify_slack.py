import json
import unittest

import httpx

from gitdrivesync.errors import NotificationError
from gitdrivesync.notify import SLACK_HOOKS_PREFIX, SlackConfig, SlackWebhookChannel

_HOOK_ID = "T01234567/B01234567/abcdefghijklmnopqrstuvwx"


class TestSlackConfig(unittest.TestCase):
    def test_bare_ids_get_prefix_and_non_https_dropped(self) -> None:
        config = SlackConfig(
            f" {_HOOK_ID} | https://example.com/hook | http://insecure/hook | ftp://x ||"
        )
        self.assertEqual(
            config.urls,
            [SLACK_HOOKS_PREFIX + _HOOK_ID, "https://example.com/hook"],
        )

    def test_empty_config(self) -> None:
        self.assertEqual(SlackConfig(None).urls, [])
        self.assertEqual(SlackConfig("").channels(), [])

    def test_channels_built_per_url(self) -> None:
        channels = SlackConfig([_HOOK_ID, "https://example.com/hook"]).channels()
        self.assertEqual([c.url for c in channels], [SLACK_HOOKS_PREFIX + _HOOK_ID, "https://example.com/hook"])


class TestSlackWebhookChannel(unittest.IsolatedAsyncioTestCase):
    async def test_post_sends_json_text(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="ok")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            channel = SlackWebhookChannel("https://hooks.example.com/x", client=client)
            await channel.post("*[ADDED]* file")

        self.assertEqual(len(seen), 1)
        self.assertEqual(seen[0].method, "POST")
        self.assertEqual(json.loads(seen[0].content), {"text": "*[ADDED]* file"})

    async def test_post_retries_then_succeeds(self) -> None:
        statuses = [500, 503, 200]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(statuses.pop(0))

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            channel = SlackWebhookChannel(
                "https://hooks.example.com/x",
                client=client,
                retry_delay_sec=0,
            )
            await channel.post("hello")

        self.assertEqual(statuses, [])

    async def test_post_gives_up_after_max_attempts(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(404, text="no_service")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            channel = SlackWebhookChannel(
                "https://hooks.example.com/x",
                client=client,
                max_attempts=3,
                retry_delay_sec=0,
            )
            with self.assertRaises(NotificationError) as ctx:
                await channel.post("hello")

        self.assertEqual(calls, 3)
        self.assertEqual(ctx.exception.details["attempts"], 3)

    def test_repr_hides_webhook_secret(self) -> None:
        channel = SlackWebhookChannel(SLACK_HOOKS_PREFIX + _HOOK_ID)
        self.assertNotIn("abcdefghijklmnopqrstuvwx", repr(channel))


if __name__ == "__main__":
    unittest.main()
