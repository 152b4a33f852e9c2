"""Read-through / write-through HTTP GET fetcher backed by the disk cache.

This module provides :class:`CachingFetcher`, the blocking fetch path used
by fetchcache.  It wraps :class:`httpx.Client` and layers on:

- **Read-through caching** -- a valid cache entry for the URL is returned
  without touching the network.
- **Write-through caching** -- successful, non-empty responses are stored
  under the requested URL, unless the request was redirected.
- **Charset decoding** -- text fetches decode with the charset from the
  response's ``Content-Type`` header, falling back to UTF-8.
- **Failure values** -- invalid URLs, timeouts, transport errors, non-2xx
  statuses and empty bodies all come back as a failed
  :class:`~fetchcache.client.response.FetchResult` rather than an
  exception.

There is no retry: one failed attempt is the final answer for that call.

See Also:
    :class:`~fetchcache.cache.KeyedFileCache` -- the storage layer.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta
from typing import Optional, Union

import httpx

from fetchcache.cache import KeyedFileCache
from fetchcache.client.response import FailureReason, FetchResult

logger = logging.getLogger(__name__)

HTTP_NAMESPACE = "http"
DEFAULT_TIMEOUT = 20.0
DEFAULT_CHARSET = "utf-8"

# Headers sent by Safari 17.3.1 on macOS.
DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.3.1 Safari/605.1.15"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
}

_SCHEMES = ("http", "https")

URLTypes = Union[str, httpx.URL]


class CachingFetcher:
    """Blocking HTTP GET fetcher with an optional disk cache in front of it.

    Every call returns a new :class:`FetchResult`; the fetcher itself holds
    no per-call state, so one instance can be shared between threads.

    Args:
        cache: Cache to read from and write to.  Defaults to a
            :class:`KeyedFileCache` in the ``"http"`` namespace.
        client: Pre-built :class:`httpx.Client`.  When given it is used
            as-is and left open by :meth:`close`.  It should follow
            redirects, since redirect detection relies on the final
            response URL.
        timeout: Request timeout in seconds for the default client.
        headers: Extra headers merged over :data:`DEFAULT_HEADERS` for the
            default client.
        verify_ssl: Verify TLS certificates with the default client.

    Example::

        with CachingFetcher() as fetcher:
            result = fetcher.fetch_text("https://example.com/")
            if result:
                print(result.body_text)
            else:
                print(result.error)
    """

    def __init__(
        self,
        cache: Optional[KeyedFileCache] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Optional[dict[str, str]] = None,
        verify_ssl: bool = True,
    ) -> None:
        self._cache = cache if cache is not None else KeyedFileCache(HTTP_NAMESPACE)
        self._client = client
        self._owns_client = client is None
        self._client_lock = threading.Lock()
        self._timeout = timeout
        self._headers = {**DEFAULT_HEADERS, **(headers or {})}
        self._verify_ssl = verify_ssl

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> CachingFetcher:
        self._get_client()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the default client.  Injected clients are left open."""
        with self._client_lock:
            if self._owns_client and self._client is not None:
                self._client.close()
                self._client = None

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def cache(self) -> KeyedFileCache:
        return self._cache

    @property
    def cache_expiration(self) -> timedelta:
        """How long fetched responses stay cached."""
        return self._cache.lifespan

    @cache_expiration.setter
    def cache_expiration(self, value: timedelta) -> None:
        self._cache.lifespan = value

    # ------------------------------------------------------------------ #
    # Public fetch methods
    # ------------------------------------------------------------------ #

    def fetch_bytes(self, url: URLTypes, use_cache: bool = True) -> FetchResult:
        """Fetch *url* and return its raw body.

        Args:
            url: Absolute ``http`` or ``https`` URL.
            use_cache: Read from and write to the cache.

        Returns:
            A :class:`FetchResult` with :attr:`~FetchResult.body_bytes` set
            on success.
        """
        return self._fetch(url, use_cache, as_text=False)

    def fetch_text(self, url: URLTypes, use_cache: bool = True) -> FetchResult:
        """Fetch *url* and return its body decoded to text.

        The response charset is taken from the ``Content-Type`` header and
        defaults to UTF-8.  The decoded text, not the raw bytes, is what
        gets cached.

        Args:
            url: Absolute ``http`` or ``https`` URL.
            use_cache: Read from and write to the cache.

        Returns:
            A :class:`FetchResult` with :attr:`~FetchResult.body_text` set
            on success.
        """
        return self._fetch(url, use_cache, as_text=True)

    @staticmethod
    def is_valid_url(url: URLTypes) -> bool:
        """Return ``True`` for absolute ``http``/``https`` URLs with a host."""
        try:
            parsed = httpx.URL(str(url))
        except (httpx.InvalidURL, TypeError, ValueError):
            return False
        return parsed.is_absolute_url and parsed.scheme in _SCHEMES and bool(parsed.host)

    @staticmethod
    def cache_key(url: URLTypes) -> str:
        """Return the normalised absolute form of *url* used as the cache identifier."""
        return str(httpx.URL(str(url)))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _get_client(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(
                    timeout=self._timeout,
                    verify=self._verify_ssl,
                    follow_redirects=True,
                    headers=self._headers,
                )
            return self._client

    def _fetch(self, url: URLTypes, use_cache: bool, as_text: bool) -> FetchResult:
        started = time.perf_counter()

        if not self.is_valid_url(url):
            requested = str(url)
            return self._failure(
                requested,
                requested,
                started,
                FailureReason.INVALID_URL,
                f"Invalid URL '{requested}': only absolute http(s) URLs are supported.",
            )

        key = self.cache_key(url)

        if use_cache:
            cached = self._from_cache(key, as_text, started)
            if cached is not None:
                return cached

        logger.info("GET %s", key)
        try:
            response = self._get_client().get(key)
        except httpx.TimeoutException:
            return self._failure(
                key,
                key,
                started,
                FailureReason.TIMEOUT,
                "Could not download content for URL. Connection Timeout.",
            )
        except httpx.HTTPError as exc:
            return self._failure(
                key, key, started, FailureReason.TRANSPORT, f"Error requesting url. {exc}"
            )

        resolved = str(response.url)

        if not response.is_success:
            return self._failure(
                key,
                resolved,
                started,
                FailureReason.HTTP_STATUS,
                "Could not download content for URL. "
                f"Status code: '{response.status_code} {response.reason_phrase}'",
                status_code=response.status_code,
            )

        content = response.content
        body_text: Optional[str] = None
        if as_text:
            body_text = _decode(content, response.charset_encoding)
            if not body_text:
                return self._failure(
                    key,
                    resolved,
                    started,
                    FailureReason.EMPTY_BODY,
                    f"Received no text content for '{key}'",
                    status_code=response.status_code,
                )
        elif not content:
            return self._failure(
                key,
                resolved,
                started,
                FailureReason.EMPTY_BODY,
                f"Received no binary content for '{key}'",
                status_code=response.status_code,
            )

        if use_cache:
            self._store(key, resolved, body_text if as_text else content)

        return FetchResult(
            url=key,
            resolved_url=resolved,
            ok=True,
            body_bytes=content,
            body_text=body_text,
            size=len(content),
            elapsed=time.perf_counter() - started,
            status_code=response.status_code,
        )

    def _from_cache(self, key: str, as_text: bool, started: float) -> Optional[FetchResult]:
        """Build a successful result from the cache, or return ``None`` on a miss."""
        body_text: Optional[str] = None
        if as_text:
            body_text = self._cache.get_string(key)
            if body_text is None:
                return None
            body_bytes = body_text.encode("utf-8")
        else:
            cached = self._cache.get_bytes(key)
            if cached is None:
                return None
            body_bytes = cached

        return FetchResult(
            url=key,
            resolved_url=key,
            ok=True,
            body_bytes=body_bytes,
            body_text=body_text,
            size=len(body_bytes),
            elapsed=time.perf_counter() - started,
            from_cache=True,
        )

    def _store(self, key: str, resolved: str, payload: Union[bytes, str, None]) -> None:
        # The cache cannot record a redirect chain, so a redirected response
        # is never stored under the requested URL.
        if resolved != key:
            logger.debug("Not caching %s: redirected to %s", key, resolved)
            return
        if payload is None:
            return
        if not self._cache.set(key, payload):
            logger.warning("Could not write %s to cache at %s", key, self._cache.path_for(key))

    @staticmethod
    def _failure(
        url: str,
        resolved: str,
        started: float,
        reason: FailureReason,
        message: str,
        status_code: Optional[int] = None,
    ) -> FetchResult:
        logger.info("Fetch failed (%s): %s", reason.value, message)
        return FetchResult(
            url=url,
            resolved_url=resolved,
            ok=False,
            elapsed=time.perf_counter() - started,
            status_code=status_code,
            error=message,
            reason=reason,
        )


def _decode(content: bytes, charset: Optional[str]) -> str:
    """Decode *content* with *charset*, using UTF-8 when it is missing or unknown."""
    encoding = charset or DEFAULT_CHARSET
    try:
        return content.decode(encoding, errors="replace")
    except (LookupError, ValueError):
        # Unknown names and non-text codecs such as hex or base64.
        logger.debug("Unusable charset %r, decoding as %s", encoding, DEFAULT_CHARSET)
    return content.decode(DEFAULT_CHARSET, errors="replace")
