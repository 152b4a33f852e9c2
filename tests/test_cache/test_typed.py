"""Tests for the TypedFileCache wrapper."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel

from fetchcache.cache import KeyedFileCache, TypedFileCache


class Quote(BaseModel):
    symbol: str
    price: float
    tags: list[str] = []


@dataclass
class Point:
    x: int
    y: int


class TestForType:
    def test_model_round_trip(self, cache_dir: Path) -> None:
        quotes = TypedFileCache.for_type(Quote, namespace="quotes", directory=cache_dir)
        value = Quote(symbol="AAPL", price=190.5, tags=["tech"])
        assert quotes.set("AAPL", value) is True
        assert quotes.get("AAPL") == value

    def test_dataclass_round_trip(self, cache_dir: Path) -> None:
        points = TypedFileCache.for_type(Point, directory=cache_dir)
        points.set("origin", Point(0, 0))
        assert points.get("origin") == Point(0, 0)

    def test_container_round_trip(self, cache_dir: Path) -> None:
        typed = TypedFileCache.for_type(dict[str, list[int]], directory=cache_dir)
        typed.set("k", {"a": [1, 2], "b": []})
        assert typed.get("k") == {"a": [1, 2], "b": []}

    def test_stored_as_json_text(self, cache_dir: Path) -> None:
        quotes = TypedFileCache.for_type(Quote, namespace="quotes", directory=cache_dir)
        quotes.set("MSFT", Quote(symbol="MSFT", price=1.0))
        raw = quotes.cache.path_for("MSFT").read_text(encoding="utf-8")
        assert json.loads(raw) == {"symbol": "MSFT", "price": 1.0, "tags": []}

    def test_miss_returns_none(self, cache_dir: Path) -> None:
        quotes = TypedFileCache.for_type(Quote, directory=cache_dir)
        assert quotes.get("nothing") is None

    def test_invalid_json_is_a_miss(self, cache_dir: Path) -> None:
        quotes = TypedFileCache.for_type(Quote, namespace="quotes", directory=cache_dir)
        quotes.cache.set("bad", "{not json")
        assert quotes.get("bad") is None

    def test_wrong_shape_is_a_miss(self, cache_dir: Path) -> None:
        quotes = TypedFileCache.for_type(Quote, namespace="quotes", directory=cache_dir)
        quotes.cache.set("bad", json.dumps({"symbol": "X"}))
        assert quotes.get("bad") is None

    def test_unserialisable_value_returns_false(self, cache_dir: Path) -> None:
        typed = TypedFileCache.for_type(int, directory=cache_dir)
        assert typed.set("k", object()) is False  # type: ignore[arg-type]
        assert not typed.cache.path_for("k").exists()


class TestDelegation:
    def test_expiry_applies(self, cache_dir: Path) -> None:
        quotes = TypedFileCache.for_type(
            Quote, namespace="quotes", lifespan=timedelta(0), directory=cache_dir
        )
        quotes.set("AAPL", Quote(symbol="AAPL", price=1.0))
        assert quotes.get("AAPL") is None
        assert not quotes.cache.path_for("AAPL").exists()

    def test_lifespan_and_namespace(self, cache_dir: Path) -> None:
        quotes = TypedFileCache.for_type(Quote, namespace="quotes", directory=cache_dir)
        assert quotes.namespace == "quotes"
        quotes.lifespan = timedelta(minutes=1)
        assert quotes.cache.lifespan == timedelta(minutes=1)

    def test_clear(self, cache_dir: Path) -> None:
        quotes = TypedFileCache.for_type(Quote, namespace="quotes", directory=cache_dir)
        quotes.set("AAPL", Quote(symbol="AAPL", price=1.0))
        quotes.clear("AAPL")
        assert quotes.get("AAPL") is None
        quotes.clear("AAPL")


class TestCustomSerialisers:
    def test_injected_functions_are_used(self, cache: KeyedFileCache) -> None:
        typed: TypedFileCache[tuple[int, int]] = TypedFileCache(
            cache,
            dumps=lambda pair: f"{pair[0]},{pair[1]}",
            loads=lambda text: tuple(int(part) for part in text.split(",")),
        )
        typed.set("pair", (3, 4))
        assert cache.get_string("pair") == "3,4"
        assert typed.get("pair") == (3, 4)

    def test_loads_failure_is_a_miss(self, cache: KeyedFileCache) -> None:
        typed: TypedFileCache[int] = TypedFileCache(cache, dumps=str, loads=int)
        cache.set("n", "not a number")
        assert typed.get("n") is None

    def test_shares_storage_with_untyped_cache(self, cache: KeyedFileCache) -> None:
        typed: TypedFileCache[int] = TypedFileCache(cache, dumps=str, loads=int)
        typed.set("n", 42)
        assert cache.get_string("n") == "42"
