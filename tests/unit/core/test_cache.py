"""Unit tests for the cache fingerprint, entry codec and backends."""

import datetime
from decimal import Decimal
from typing import Any
from unittest.mock import Mock

import pytest

from sqlfacade.core.builder import QueryBuilder
from sqlfacade.core.cache import (
    CacheBackend,
    CacheEntry,
    MemoryCacheBackend,
    RedisCacheBackend,
    create_cache_key,
    decode_entry,
    encode_entry,
)
from sqlfacade.core.filters import NamedEquals
from sqlfacade.core.request import FetchShape, QueryRequest
from sqlfacade.exceptions import CacheUnavailableError, SerializationError

builder = QueryBuilder()


def _key(request: QueryRequest, prefix: str = "test:") -> str:
    return create_cache_key(builder.select(request), request, prefix)


def test_same_sql_different_values_give_different_keys() -> None:
    first = QueryRequest("users", "*", {"id": 1}, cache_ttl=60)
    second = QueryRequest("users", "*", {"id": 2}, cache_ttl=60)

    assert builder.select(first).sql == builder.select(second).sql
    assert _key(first) != _key(second)


def test_key_is_stable_and_prefixed() -> None:
    request = QueryRequest("users", "*", {"first_name": "Ada", "last_name": "Lovelace"})

    key = _key(request, prefix="app:")

    assert key == _key(QueryRequest("users", "*", {"first_name": "Ada", "last_name": "Lovelace"}), prefix="app:")
    assert key.startswith("app:")
    assert len(key) == len("app:") + 64


def test_key_covers_result_shape() -> None:
    base = QueryRequest("users", "*", {"id": 1})

    assert _key(base) != _key(QueryRequest("users", "*", {"id": 1}, fetch_shape=FetchShape.NUMERIC))
    assert _key(base) != _key(QueryRequest("users", "*", {"id": 1}, single_row=True))


@pytest.mark.parametrize(
    ("first", "second"),
    [
        pytest.param(1, "1", id="int-str"),
        pytest.param(1, 1.0, id="int-float"),
        pytest.param(b"abc", "YWJj", id="bytes-base64"),
        pytest.param(datetime.datetime(2024, 1, 1), "2024-01-01T00:00:00", id="datetime-iso"),
        pytest.param(datetime.date(2024, 1, 1), "2024-01-01", id="date-iso"),
        pytest.param(Decimal("1.5"), "1.5", id="decimal-str"),
    ],
)
def test_key_distinguishes_value_types(first: Any, second: Any) -> None:
    assert _key(QueryRequest("users", "*", [NamedEquals("id", first)])) != _key(
        QueryRequest("users", "*", [NamedEquals("id", second)])
    )


def test_entry_roundtrip_restores_numeric_rows() -> None:
    payload = encode_entry(CacheEntry(row_count=2, result=[(1, "a"), (2, "b")]))

    entry = decode_entry(payload, FetchShape.NUMERIC)

    assert entry.row_count == 2
    assert entry.result == [(1, "a"), (2, "b")]


def test_entry_single_numeric_row() -> None:
    payload = encode_entry(CacheEntry(row_count=1, result=(1, "a")))

    assert decode_entry(payload, FetchShape.NUMERIC, single_row=True).result == (1, "a")


def test_entry_missing_single_row() -> None:
    payload = encode_entry(CacheEntry(row_count=0, result=None))

    assert decode_entry(payload, FetchShape.NUMERIC, single_row=True).result is None


def test_decode_rejects_garbage() -> None:
    with pytest.raises(SerializationError):
        decode_entry(b"\xc1not msgpack")


def test_memory_backend_satisfies_protocol() -> None:
    assert isinstance(MemoryCacheBackend(), CacheBackend)
    assert isinstance(RedisCacheBackend(client=Mock()), CacheBackend)


def test_memory_backend_ttl(memory_cache: MemoryCacheBackend, clock: Any) -> None:
    assert memory_cache.set("k", b"v", 10)
    assert memory_cache.get("k") == b"v"

    clock.advance(10)

    assert memory_cache.get("k") is None
    assert memory_cache.stats.expirations == 1
    assert "k" not in memory_cache


def test_memory_backend_refuses_non_positive_ttl(memory_cache: MemoryCacheBackend) -> None:
    assert memory_cache.set("k", b"v", 0) is False
    assert memory_cache.get("k") is None


def test_memory_backend_evicts_least_recently_used(clock: Any) -> None:
    cache = MemoryCacheBackend(max_size=2, clock=clock)
    cache.set("a", b"1", 60)
    cache.set("b", b"2", 60)
    cache.get("a")

    cache.set("c", b"3", 60)

    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache
    assert cache.stats.evictions == 1
    assert len(cache) == 2


def test_memory_backend_stats(memory_cache: MemoryCacheBackend) -> None:
    memory_cache.set("k", b"v", 60)
    memory_cache.get("k")
    memory_cache.get("missing")

    assert memory_cache.stats.hits == 1
    assert memory_cache.stats.misses == 1
    assert memory_cache.stats.hit_rate == 50.0


def test_memory_backend_delete_and_clear(memory_cache: MemoryCacheBackend) -> None:
    memory_cache.set("a", b"1", 60)
    memory_cache.set("b", b"2", 60)

    assert memory_cache.delete("a") is True
    assert memory_cache.delete("a") is False
    memory_cache.clear()
    assert len(memory_cache) == 0


def test_redis_backend_uses_expiry() -> None:
    client = Mock()
    client.set.return_value = True
    backend = RedisCacheBackend(client=client)

    assert backend.set("k", b"v", 30) is True
    client.set.assert_called_once_with("k", b"v", ex=30)


def test_redis_backend_get() -> None:
    client = Mock()
    client.get.side_effect = [b"payload", None]
    backend = RedisCacheBackend(client=client)

    assert backend.get("k") == b"payload"
    assert backend.get("k") is None


def test_redis_backend_errors_become_cache_unavailable() -> None:
    client = Mock()
    client.get.side_effect = ConnectionError("refused")
    client.set.side_effect = ConnectionError("refused")
    backend = RedisCacheBackend(client=client)

    with pytest.raises(CacheUnavailableError):
        backend.get("k")
    with pytest.raises(CacheUnavailableError):
        backend.set("k", b"v", 10)


def test_redis_backend_connect() -> None:
    client = Mock()
    client.ping.return_value = True
    assert RedisCacheBackend(client=client).connect() is True

    client.ping.side_effect = TimeoutError("timeout")
    assert RedisCacheBackend(client=client).connect() is False


def test_redis_backend_close_releases_client() -> None:
    client = Mock()
    backend = RedisCacheBackend(client=client)

    backend.close()

    client.close.assert_called_once_with()
