import unittest

from gitdrivesync.errors.exceptions import (
    CreationError,
    HttpErrorInfo,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    RemoteApiError,
    SyncError,
    map_http_error,
)


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = SyncError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)

    def test_details_default_to_empty_dict(self) -> None:
        err = CreationError("no id")
        self.assertEqual(err.details, {})
        self.assertIsNone(err.cause)

    def test_remote_family_shares_base(self) -> None:
        for cls in (PermissionDeniedError, NotFoundError, RateLimitError, NetworkError):
            self.assertTrue(issubclass(cls, RemoteApiError))
            self.assertTrue(issubclass(cls, SyncError))

    def test_map_http_error_basic(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=404, message="not found"))
        self.assertIsInstance(err, NotFoundError)

        err = map_http_error(HttpErrorInfo(status_code=429, message="rate"))
        self.assertIsInstance(err, RateLimitError)

        err = map_http_error(HttpErrorInfo(status_code=401, message="auth"))
        self.assertIsInstance(err, PermissionDeniedError)

    def test_map_http_error_403_quota_vs_permission(self) -> None:
        err = map_http_error(
            HttpErrorInfo(status_code=403, reason="userRateLimitExceeded", message="quota")
        )
        self.assertIsInstance(err, RateLimitError)

        err = map_http_error(
            HttpErrorInfo(status_code=403, reason="insufficientPermissions", message="x")
        )
        self.assertIsInstance(err, PermissionDeniedError)

    def test_map_http_error_5xx_keeps_status(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=503, message="unavail"))
        self.assertIs(type(err), RemoteApiError)
        self.assertEqual(err.details["status_code"], 503)

    def test_map_http_error_message_fallback(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=418))
        self.assertIs(type(err), RemoteApiError)
        self.assertIn("418", str(err))


if __name__ == "__main__":
    unittest.main()
