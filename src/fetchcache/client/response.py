"""Result type returned by every :class:`~fetchcache.client.fetcher.CachingFetcher` call.

A :class:`FetchResult` is created fresh for each call and never mutated,
so callers can hold on to it while issuing further requests on the same
fetcher.  Failures are values, not exceptions: check :attr:`FetchResult.ok`
(or the result's truthiness) before trusting the body fields.

See Also:
    :func:`fetchcache.exceptions.error_for_result` -- converts a failed
    result into the matching exception at the CLI boundary.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class FailureReason(str, enum.Enum):
    """Why a fetch failed.  Carried alongside the human-readable message."""

    INVALID_URL = "invalid_url"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    EMPTY_BODY = "empty_body"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single byte or text fetch.

    Attributes:
        url: The URL as requested by the caller.
        resolved_url: The final URL after redirects.  Equal to the
            requested URL for cache hits and for failures raised before a
            response was received.
        ok: Whether the fetch succeeded.
        body_bytes: Raw body, when available.
        body_text: Decoded body (text fetches only).
        size: Body size in bytes.
        elapsed: Wall-clock duration of the call in seconds.
        status_code: HTTP status of the network response, or ``None`` when
            no response was received (cache hit or pre-network failure).
        from_cache: ``True`` if the body was served from the disk cache.
        error: Failure message; empty on success.
        reason: Machine-readable failure tag; ``None`` on success.
    """

    url: str
    resolved_url: str
    ok: bool
    body_bytes: Optional[bytes] = None
    body_text: Optional[str] = None
    size: int = 0
    elapsed: float = 0.0
    status_code: Optional[int] = None
    from_cache: bool = False
    error: str = ""
    reason: Optional[FailureReason] = None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def elapsed_ms(self) -> int:
        return int(self.elapsed * 1000)

    @property
    def redirected(self) -> bool:
        """Whether the response came from a different URL than requested."""
        return self.resolved_url != self.url

    def summary(self) -> dict[str, object]:
        """Return the result metadata (no body) as a JSON-friendly dict."""
        data: dict[str, object] = {
            "url": self.url,
            "resolved_url": self.resolved_url,
            "ok": self.ok,
            "size": self.size,
            "elapsed_ms": self.elapsed_ms,
            "from_cache": self.from_cache,
            "status_code": self.status_code,
        }
        if not self.ok:
            data["error"] = self.error
            data["reason"] = self.reason.value if self.reason else None
        return data
