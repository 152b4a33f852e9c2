"""Exception hierarchy for fetchcache.

The cache and fetcher never raise for runtime failures; they return
``None``/``False`` or a failed :class:`~fetchcache.client.FetchResult`.
These exceptions exist for the outer layers: configuration loading and the
CLI, where :func:`error_for_result` turns a failed result into an error
that :func:`fetchcache.app.main` reports and exits with.

Subclass hierarchy::

    FetchcacheError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- HTTPStatusError     (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- EmptyContentError   (exit 7)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fetchcache.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_EMPTY_CONTENT,
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_STATUS,
    EXIT_INVALID_USAGE,
)

if TYPE_CHECKING:
    from fetchcache.client.response import FetchResult


class FetchcacheError(Exception):
    """Base exception for all fetchcache errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(FetchcacheError):
    """Raised for invalid CLI arguments or a URL that is not absolute http(s)."""

    exit_code = EXIT_INVALID_USAGE


class HTTPStatusError(FetchcacheError):
    """Raised when the server answers with a non-2xx status."""

    exit_code = EXIT_HTTP_STATUS


class ConnectionError_(FetchcacheError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class EmptyContentError(FetchcacheError):
    """Raised when a successful response carried no content."""

    exit_code = EXIT_EMPTY_CONTENT


class ConfigError(FetchcacheError):
    """Raised for configuration problems (invalid JSON, bad environment values)."""

    exit_code = EXIT_GENERIC_FAILURE


def error_for_result(result: FetchResult) -> FetchcacheError:
    """Return the exception matching a failed *result*'s failure reason."""
    from fetchcache.client.response import FailureReason

    mapping: dict[FailureReason, type[FetchcacheError]] = {
        FailureReason.INVALID_URL: InvalidUsageError,
        FailureReason.TIMEOUT: ConnectionError_,
        FailureReason.TRANSPORT: ConnectionError_,
        FailureReason.HTTP_STATUS: HTTPStatusError,
        FailureReason.EMPTY_BODY: EmptyContentError,
    }
    exc_type = mapping.get(result.reason, FetchcacheError) if result.reason else FetchcacheError
    return exc_type(result.error or f"Fetching {result.url} failed")
