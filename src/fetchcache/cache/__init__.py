"""Disk caching for fetchcache.

This package provides :class:`KeyedFileCache`, a file-per-entry cache in a
shared directory with modification-time expiry, and
:class:`TypedFileCache`, a serialising wrapper over the same storage.

The cache is consumed by :class:`~fetchcache.client.fetcher.CachingFetcher`
and is controlled by the ``cache`` section of the configuration
(:class:`~fetchcache.models.CacheConfig`).
"""

from fetchcache.cache.cache import DEFAULT_LIFESPAN, DEFAULT_NAMESPACE, KeyedFileCache
from fetchcache.cache.typed import TypedFileCache

__all__ = ["DEFAULT_LIFESPAN", "DEFAULT_NAMESPACE", "KeyedFileCache", "TypedFileCache"]
