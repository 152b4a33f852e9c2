"""HTTP fetch module for fetchcache.

Provides :class:`CachingFetcher`, a blocking GET fetcher that wraps
:mod:`httpx` with a read-through / write-through disk cache, and the
:class:`FetchResult` value every fetch returns.

Example::

    from fetchcache.client import CachingFetcher

    with CachingFetcher() as fetcher:
        result = fetcher.fetch_bytes("https://example.com/logo.png")
"""

from fetchcache.client.fetcher import DEFAULT_HEADERS, DEFAULT_TIMEOUT, HTTP_NAMESPACE, CachingFetcher
from fetchcache.client.response import FailureReason, FetchResult

__all__ = [
    "CachingFetcher",
    "DEFAULT_HEADERS",
    "DEFAULT_TIMEOUT",
    "FailureReason",
    "FetchResult",
    "HTTP_NAMESPACE",
]
