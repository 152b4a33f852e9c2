"""fetchcache -- memoise HTTP GET fetches in a local, time-limited disk cache.

The package has two layers:

* :class:`~fetchcache.cache.KeyedFileCache` stores bytes or text for any
  string identifier in one file per entry, and expires entries by age.
  :class:`~fetchcache.cache.TypedFileCache` adds JSON-serialised values on
  top of the same storage.
* :class:`~fetchcache.client.CachingFetcher` issues GET requests through
  :mod:`httpx`, reading from and writing to the cache, and returns a
  :class:`~fetchcache.client.FetchResult` for every call.

Typical use::

    from fetchcache import CachingFetcher

    with CachingFetcher() as fetcher:
        result = fetcher.fetch_text("https://example.com/")

Modules:
    app: Typer CLI entry point.
    models: Pydantic configuration models.
    config: XDG-aware configuration loading and fetcher wiring.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"

from fetchcache.cache import KeyedFileCache, TypedFileCache  # noqa: E402
from fetchcache.client import CachingFetcher, FailureReason, FetchResult  # noqa: E402

__all__ = [
    "CachingFetcher",
    "FailureReason",
    "FetchResult",
    "KeyedFileCache",
    "TypedFileCache",
    "__version__",
]
