import threading
import unittest

from gitdrivesync.util.aio import run_sync


class TestRunSync(unittest.IsolatedAsyncioTestCase):
    async def test_runs_in_worker_thread_and_returns_value(self) -> None:
        loop_thread = threading.get_ident()

        def blocking(a: int, *, b: int) -> tuple[int, int]:
            return a + b, threading.get_ident()

        value, worker_thread = await run_sync(blocking, 1, b=2)
        self.assertEqual(value, 3)
        self.assertNotEqual(worker_thread, loop_thread)

    async def test_propagates_exceptions(self) -> None:
        def boom() -> None:
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            await run_sync(boom)


if __name__ == "__main__":
    unittest.main()
