"""Shared test fixtures for fetchcache.

Provides caches scoped to a temporary directory, a fetcher factory backed by
:class:`httpx.MockTransport` that records every network call, isolated
config environments, and output-state resets.  These fixtures are
discovered automatically by pytest.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Callable

import httpx
import pytest

from fetchcache.cache import KeyedFileCache
from fetchcache.client import CachingFetcher
from fetchcache.output import reset_output


Handler = Callable[[httpx.Request], httpx.Response]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager holds references to sys.stdout/sys.stderr taken at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Cache fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def cache(cache_dir: Path) -> KeyedFileCache:
    """A default-namespace cache writing into a private temp directory."""
    return KeyedFileCache(directory=cache_dir)


@pytest.fixture
def http_cache(cache_dir: Path) -> KeyedFileCache:
    """The cache a fetcher uses, in the ``http`` namespace."""
    return KeyedFileCache("http", lifespan=timedelta(hours=2), directory=cache_dir)


# ---------------------------------------------------------------------------
# Fetcher fixtures
# ---------------------------------------------------------------------------


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it was asked to send."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def make_fetcher(http_cache: KeyedFileCache):
    """Factory building a CachingFetcher over a recording mock transport.

    Returns a ``(fetcher, transport)`` pair.  The fetcher shares the
    ``http_cache`` fixture so tests can inspect what was stored.
    """
    clients: list[httpx.Client] = []

    def _make(handler: Handler) -> tuple[CachingFetcher, RecordingTransport]:
        transport = RecordingTransport(handler)
        client = httpx.Client(transport=transport, follow_redirects=True)
        clients.append(client)
        return CachingFetcher(cache=http_cache, client=client), transport

    yield _make

    for client in clients:
        client.close()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME (and HOME, for non-XDG platforms) into tmp_path
    and clears all FETCHCACHE_* environment variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path / "home"))
    for var in ["FETCHCACHE_CACHE_TTL", "FETCHCACHE_CACHE_DIR", "FETCHCACHE_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def recording_transport() -> type[RecordingTransport]:
    """The :class:`RecordingTransport` class, for tests that build their own client."""
    return RecordingTransport
