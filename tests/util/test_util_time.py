import unittest
from datetime import datetime, timedelta, timezone

from gitdrivesync.util.time import normalize_dt, now_utc, to_rfc3339


class TestUtilTime(unittest.TestCase):
    def test_now_utc_is_tz_aware(self) -> None:
        dt = now_utc()
        self.assertIsNotNone(dt.tzinfo)
        self.assertEqual(dt.tzinfo, timezone.utc)

    def test_normalize_dt_rejects_naive(self) -> None:
        naive = datetime(2025, 1, 1, 12, 0, 0)
        with self.assertRaises(ValueError):
            normalize_dt(naive)

    def test_to_rfc3339_outputs_z_with_millis(self) -> None:
        dt = datetime(2025, 1, 1, 0, 0, 0, 123456, tzinfo=timezone.utc)
        self.assertEqual(to_rfc3339(dt), "2025-01-01T00:00:00.123Z")

    def test_to_rfc3339_converts_offset_to_utc(self) -> None:
        jst = timezone(timedelta(hours=9))
        dt = datetime(2025, 1, 1, 12, 34, 56, tzinfo=jst)
        # 12:34:56 JST == 03:34:56 UTC
        self.assertEqual(to_rfc3339(dt), "2025-01-01T03:34:56.000Z")


if __name__ == "__main__":
    unittest.main()
