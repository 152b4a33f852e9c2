"""Tests for FetchResult and the failure-to-exception mapping."""

from __future__ import annotations

import pytest

from fetchcache.client import FailureReason, FetchResult
from fetchcache.exceptions import (
    ConnectionError_,
    EmptyContentError,
    FetchcacheError,
    HTTPStatusError,
    InvalidUsageError,
    error_for_result,
)
from fetchcache.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_EMPTY_CONTENT,
    EXIT_HTTP_STATUS,
    EXIT_INVALID_USAGE,
)


def _failed(reason: FailureReason | None, error: str = "boom") -> FetchResult:
    return FetchResult(
        url="https://example.com/a",
        resolved_url="https://example.com/a",
        ok=False,
        error=error,
        reason=reason,
    )


class TestFetchResult:
    def test_truthiness_follows_ok(self) -> None:
        ok = FetchResult(url="u", resolved_url="u", ok=True)
        assert bool(ok) is True
        assert bool(_failed(FailureReason.TIMEOUT)) is False

    def test_is_immutable(self) -> None:
        result = FetchResult(url="u", resolved_url="u", ok=True)
        with pytest.raises(AttributeError):
            result.ok = False  # type: ignore[misc]

    def test_redirected(self) -> None:
        assert FetchResult(url="a", resolved_url="a", ok=True).redirected is False
        assert FetchResult(url="a", resolved_url="b", ok=True).redirected is True

    def test_elapsed_ms(self) -> None:
        assert FetchResult(url="u", resolved_url="u", ok=True, elapsed=1.2345).elapsed_ms == 1234

    def test_summary_success_has_no_error_fields(self) -> None:
        result = FetchResult(
            url="u", resolved_url="u", ok=True, body_bytes=b"abc", size=3, status_code=200
        )
        summary = result.summary()
        assert summary == {
            "url": "u",
            "resolved_url": "u",
            "ok": True,
            "size": 3,
            "elapsed_ms": 0,
            "from_cache": False,
            "status_code": 200,
        }

    def test_summary_failure_includes_reason(self) -> None:
        summary = _failed(FailureReason.EMPTY_BODY, "nothing").summary()
        assert summary["error"] == "nothing"
        assert summary["reason"] == "empty_body"


class TestErrorForResult:
    @pytest.mark.parametrize(
        ("reason", "exc_type", "exit_code"),
        [
            (FailureReason.INVALID_URL, InvalidUsageError, EXIT_INVALID_USAGE),
            (FailureReason.TIMEOUT, ConnectionError_, EXIT_CONNECTION_ERROR),
            (FailureReason.TRANSPORT, ConnectionError_, EXIT_CONNECTION_ERROR),
            (FailureReason.HTTP_STATUS, HTTPStatusError, EXIT_HTTP_STATUS),
            (FailureReason.EMPTY_BODY, EmptyContentError, EXIT_EMPTY_CONTENT),
        ],
    )
    def test_mapping(self, reason, exc_type, exit_code) -> None:
        exc = error_for_result(_failed(reason, "message text"))
        assert type(exc) is exc_type
        assert exc.exit_code == exit_code
        assert str(exc) == "message text"

    def test_missing_reason_is_generic(self) -> None:
        exc = error_for_result(_failed(None, ""))
        assert type(exc) is FetchcacheError
        assert "https://example.com/a" in str(exc)

    def test_exit_code_override(self) -> None:
        assert FetchcacheError("x", exit_code=42).exit_code == 42
