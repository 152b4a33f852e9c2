"""File-per-entry disk cache with modification-time expiry.

Each entry lives in its own file named ``{key}.cache-{namespace}`` where
``key`` is the upper-case hex MD5 of the entry's identifier.  All entries
share one directory (the system temporary directory unless told
otherwise), and the namespace suffix keeps logically distinct caches apart
even when their identifiers coincide.

An entry's age is taken from the file's ``st_mtime``, so every successful
:meth:`KeyedFileCache.set` resets the age to zero.  Reads of an entry whose
age has reached the instance's lifespan delete the file and report a miss.

Nothing in this module raises for I/O problems: reads degrade to ``None``
and writes to ``False``.  The underlying cause is logged at DEBUG level.

See Also:
    :class:`~fetchcache.cache.typed.TypedFileCache` -- a serialising
    wrapper over the same storage.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import threading
import time
from datetime import timedelta
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"
DEFAULT_LIFESPAN = timedelta(hours=2)


class KeyedFileCache:
    """Disk cache mapping arbitrary string identifiers to files.

    Args:
        namespace: Suffix scoping this cache's files.  Fixed for the
            lifetime of the instance.
        lifespan: How long an entry stays valid after it was last written.
        directory: Where entry files live.  Defaults to the system
            temporary directory.

    Example::

        from fetchcache.cache import KeyedFileCache

        cache = KeyedFileCache("thumbnails", lifespan=timedelta(minutes=10))
        cache.set("https://example.com/a.png", b"\\x89PNG...")
        data = cache.get_bytes("https://example.com/a.png")
    """

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        lifespan: timedelta = DEFAULT_LIFESPAN,
        directory: Optional[Union[str, Path]] = None,
    ) -> None:
        self._namespace = namespace
        self._directory = Path(directory) if directory is not None else Path(tempfile.gettempdir())
        self._lock = threading.Lock()
        self.lifespan = lifespan

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def lifespan(self) -> timedelta:
        """How long an entry is valid for, measured from its last write."""
        return self._lifespan

    @lifespan.setter
    def lifespan(self, value: timedelta) -> None:
        if value < timedelta(0):
            raise ValueError(f"lifespan must not be negative, got {value}")
        self._lifespan = value

    # ------------------------------------------------------------------ #
    # Key derivation
    # ------------------------------------------------------------------ #

    @staticmethod
    def make_key(identifier: str) -> str:
        """Return the upper-case hex MD5 digest of *identifier*."""
        digest = hashlib.md5(identifier.encode("utf-8"), usedforsecurity=False)
        return digest.hexdigest().upper()

    def path_for(self, identifier: str) -> Path:
        """Return the file that backs *identifier* in this namespace."""
        return self._directory / f"{self.make_key(identifier)}.cache-{self._namespace}"

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_bytes(self, identifier: str) -> Optional[bytes]:
        """Return the stored bytes for *identifier*, or ``None`` on a miss."""
        return self._read(identifier)

    def get_string(self, identifier: str) -> Optional[str]:
        """Return the stored content decoded as UTF-8, or ``None`` on a miss."""
        data = self._read(identifier)
        if data is None:
            return None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Cache miss (decode-error): %s [%s]", identifier, self._namespace)
            return None

    def contains(self, identifier: str) -> bool:
        """Return ``True`` if a valid entry exists.  Stale entries are evicted."""
        path = self.path_for(identifier)
        with self._lock:
            return self._is_valid(path, identifier)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def set(self, identifier: str, payload: Union[bytes, str]) -> bool:
        """Write *payload* for *identifier*, replacing any existing entry.

        Text payloads are stored UTF-8 encoded.

        Returns:
            ``True`` if the entry was written, ``False`` on any I/O error.
        """
        data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
        path = self.path_for(identifier)
        try:
            with self._lock:
                self._directory.mkdir(parents=True, exist_ok=True)
                path.write_bytes(data)
        except OSError as exc:
            logger.debug("Cache write failed for %s [%s]: %s", identifier, self._namespace, exc)
            return False
        logger.debug("Cache write: %s [%s] (%d bytes)", identifier, self._namespace, len(data))
        return True

    def clear(self, identifier: str) -> None:
        """Delete the entry for *identifier*.  Missing entries are ignored."""
        path = self.path_for(identifier)
        try:
            with self._lock:
                path.unlink()
        except OSError:
            pass

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _read(self, identifier: str) -> Optional[bytes]:
        path = self.path_for(identifier)
        with self._lock:
            if not self._is_valid(path, identifier):
                return None
            try:
                data = path.read_bytes()
            except OSError as exc:
                logger.debug("Cache miss (io-error): %s [%s]: %s", identifier, self._namespace, exc)
                return None
        if not data:
            logger.debug("Cache miss (empty): %s [%s]", identifier, self._namespace)
            return None
        logger.debug("Cache hit: %s [%s]", identifier, self._namespace)
        return data

    def _is_valid(self, path: Path, identifier: str) -> bool:
        """Check the entry's age, deleting it once it reaches the lifespan.

        Must be called with ``self._lock`` held.
        """
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            logger.debug("Cache miss (missing): %s [%s]", identifier, self._namespace)
            return False
        except OSError as exc:
            logger.debug("Cache miss (io-error): %s [%s]: %s", identifier, self._namespace, exc)
            return False

        age = time.time() - mtime
        if age < self._lifespan.total_seconds():
            return True

        logger.debug("Cache miss (expired): %s [%s] age=%.1fs", identifier, self._namespace, age)
        try:
            os.remove(path)
        except OSError:
            pass
        return False
