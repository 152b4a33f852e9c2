"""Typed cache layered over :class:`~fetchcache.cache.cache.KeyedFileCache`.

:class:`TypedFileCache` stores values as serialised text in the same
file-per-entry layout as the untyped cache.  The serialiser pair is
injected, and :meth:`TypedFileCache.for_type` builds one from a pydantic
:class:`~pydantic.TypeAdapter` so that models, dataclasses and plain
containers round-trip through JSON.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from pydantic import TypeAdapter

from fetchcache.cache.cache import DEFAULT_LIFESPAN, DEFAULT_NAMESPACE, KeyedFileCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TypedFileCache(Generic[T]):
    """Cache of structured values backed by a :class:`KeyedFileCache`.

    Args:
        cache: The untyped cache that owns the files.
        dumps: Converts a value to its stored text form.
        loads: Rebuilds a value from stored text.  Any exception it raises
            is treated as a cache miss.

    Example::

        from pydantic import BaseModel

        class Quote(BaseModel):
            symbol: str
            price: float

        quotes = TypedFileCache.for_type(Quote, namespace="quotes")
        quotes.set("AAPL", Quote(symbol="AAPL", price=190.1))
        quotes.get("AAPL")
    """

    def __init__(
        self,
        cache: KeyedFileCache,
        dumps: Callable[[T], str],
        loads: Callable[[str], T],
    ) -> None:
        self._cache = cache
        self._dumps = dumps
        self._loads = loads

    @classmethod
    def for_type(
        cls,
        tp: Any,
        namespace: str = DEFAULT_NAMESPACE,
        lifespan: timedelta = DEFAULT_LIFESPAN,
        directory: Optional[Union[str, Path]] = None,
    ) -> TypedFileCache[Any]:
        """Build a typed cache whose values are JSON-encoded via pydantic."""
        adapter: TypeAdapter[Any] = TypeAdapter(tp)
        return cls(
            KeyedFileCache(namespace, lifespan=lifespan, directory=directory),
            dumps=lambda value: adapter.dump_json(value).decode("utf-8"),
            loads=adapter.validate_json,
        )

    @property
    def cache(self) -> KeyedFileCache:
        return self._cache

    @property
    def namespace(self) -> str:
        return self._cache.namespace

    @property
    def lifespan(self) -> timedelta:
        return self._cache.lifespan

    @lifespan.setter
    def lifespan(self, value: timedelta) -> None:
        self._cache.lifespan = value

    def get(self, identifier: str) -> Optional[T]:
        """Return the stored value, or ``None`` on a miss or a decode failure."""
        text = self._cache.get_string(identifier)
        if text is None:
            return None
        try:
            return self._loads(text)
        except Exception as exc:
            logger.debug("Cache miss (decode-error): %s [%s]: %s", identifier, self.namespace, exc)
            return None

    def set(self, identifier: str, value: T) -> bool:
        """Serialise and store *value*.  Returns ``False`` if either step fails."""
        try:
            text = self._dumps(value)
        except Exception as exc:
            logger.debug("Cache serialise failed for %s [%s]: %s", identifier, self.namespace, exc)
            return False
        return self._cache.set(identifier, text)

    def clear(self, identifier: str) -> None:
        self._cache.clear(identifier)
