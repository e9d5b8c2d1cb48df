"""Result caching for facade reads.

Components:
- CacheConfig: facade level cache settings
- CacheEntry: the unit stored in a backend, ``{row_count, result}``
- create_cache_key: deterministic fingerprint of a rendered select
- CacheBackend: the key-value store protocol
- MemoryCacheBackend: in-process LRU store with per-entry TTL
- RedisCacheBackend: Redis store through ``redis-py``

Backends raise ``CacheUnavailableError`` when the store cannot be reached;
the facade absorbs it and falls back to the driver.
"""

import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, Optional, Protocol, runtime_checkable

import msgspec
from mypy_extensions import mypyc_attr

from sqlfacade.core.filters import RawPredicate
from sqlfacade.core.request import FetchShape
from sqlfacade.exceptions import CacheUnavailableError, MissingDependencyError
from sqlfacade.utils.logging import get_logger
from sqlfacade.utils.serializers import from_msgpack, to_json, to_msgpack

if TYPE_CHECKING:
    from sqlfacade.core.builder import CompiledQuery
    from sqlfacade.core.request import QueryRequest

__all__ = (
    "CacheBackend",
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "MemoryCacheBackend",
    "RedisCacheBackend",
    "RedisCacheConfig",
    "create_cache_key",
    "decode_entry",
    "encode_entry",
)

logger = get_logger("core.cache")

DEFAULT_MAX_SIZE: Final = 10000
DEFAULT_KEY_PREFIX: Final = "sqlfacade:select:"


@dataclass
class CacheConfig:
    """Facade cache settings.

    Args:
        enabled: Master switch; when off every read goes to the driver.
        default_ttl: TTL applied when a select does not pass ``cache_ttl``.
            ``0`` keeps caching opt-in per call.
        key_prefix: Prefix for every fingerprint, to share a store between applications.
        max_size: Entry limit for the in-memory backend.
    """

    enabled: bool = True
    default_ttl: int = 0
    key_prefix: str = DEFAULT_KEY_PREFIX
    max_size: int = DEFAULT_MAX_SIZE


@dataclass
class RedisCacheConfig:
    """Connection settings for ``RedisCacheBackend``."""

    url: str = "redis://localhost:6379/0"
    socket_timeout: float = 1.0
    socket_connect_timeout: float = 1.0


class CacheEntry(msgspec.Struct, frozen=True):
    """A cached select result."""

    row_count: int
    result: Any


def encode_entry(entry: CacheEntry) -> bytes:
    return to_msgpack(entry)


def decode_entry(payload: bytes, fetch_shape: FetchShape = FetchShape.MAPPING, single_row: bool = False) -> CacheEntry:
    """Decode a cached payload.

    MessagePack has no tuple type, so numeric rows are turned back into
    tuples to match what the driver path returns.

    Raises:
        SerializationError: The payload is not a valid entry.
    """
    entry = from_msgpack(payload, CacheEntry)
    if fetch_shape is not FetchShape.NUMERIC or entry.result is None:
        return entry
    if single_row:
        return CacheEntry(row_count=entry.row_count, result=tuple(entry.result))
    return CacheEntry(row_count=entry.row_count, result=[tuple(row) for row in entry.result])


def _type_tag(value: Any) -> "list[Any]":
    value_type = type(value)
    return [f"{value_type.__module__}.{value_type.__qualname__}", value]


def _typed_parameters(parameters: Any) -> Any:
    if isinstance(parameters, dict):
        return {name: _type_tag(value) for name, value in parameters.items()}
    return [_type_tag(value) for value in parameters]


def create_cache_key(
    compiled: "CompiledQuery", request: "QueryRequest", prefix: str = DEFAULT_KEY_PREFIX
) -> str:
    """Fingerprint a select for cache lookup.

    The hash covers the rendered text, the bound values, the raw filter
    fragments and the result shape. Each bound value is paired with its
    type name, so values that share a JSON rendering (``b"abc"`` and
    ``"YWJj"``, a datetime and its ISO string) still produce distinct keys.
    Mapping keys are sorted, so bound value order does not matter.

    Args:
        compiled: Rendered statement.
        request: The originating request.
        prefix: Key namespace.

    Returns:
        Prefixed hex digest.
    """
    raw = [item.text for item in request.filters if isinstance(item, RawPredicate)]
    key_data = {
        "sql": compiled.sql,
        "parameters": _typed_parameters(compiled.parameters),
        "raw": raw,
        "shape": request.fetch_shape.value,
        "single_row": request.single_row,
    }
    digest = hashlib.sha256(to_json(key_data, as_bytes=True, sort_keys=True)).hexdigest()
    return f"{prefix}{digest}"


@runtime_checkable
class CacheBackend(Protocol):
    """Key-value store used for read-through caching."""

    def connect(self) -> bool:
        """Check connectivity. Return False when the store is unreachable."""
        ...

    def get(self, key: str) -> "Optional[bytes]":
        """Return the stored payload or None on a miss."""
        ...

    def set(self, key: str, value: bytes, ttl: int) -> bool:
        """Store ``value`` for ``ttl`` seconds."""
        ...

    def close(self) -> None: ...


@mypyc_attr(allow_interpreted_subclasses=False)
class CacheStats:
    """Cache statistics tracking."""

    __slots__ = ("evictions", "expirations", "hits", "misses")

    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    @property
    def hit_rate(self) -> float:
        """Cache hit rate as percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    def __repr__(self) -> str:
        return (
            f"CacheStats(hit_rate={self.hit_rate:.1f}%, hits={self.hits}, misses={self.misses}, "
            f"evictions={self.evictions}, expirations={self.expirations})"
        )


@mypyc_attr(allow_interpreted_subclasses=False)
class MemoryCacheBackend:
    """Thread-safe in-process store with LRU eviction and per-entry TTL.

    Args:
        max_size: Maximum number of entries before the least recently used is evicted.
        clock: Monotonic time source, injectable for tests.
    """

    __slots__ = ("_clock", "_data", "_lock", "_max_size", "stats")

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, clock: "Any" = time.monotonic) -> None:
        self._data: OrderedDict[str, tuple[bytes, float]] = OrderedDict()
        self._lock = threading.RLock()
        self._max_size = max_size
        self._clock = clock
        self.stats = CacheStats()

    def connect(self) -> bool:
        return True

    def get(self, key: str) -> "Optional[bytes]":
        with self._lock:
            item = self._data.get(key)
            if item is None:
                self.stats.misses += 1
                return None
            value, expires_at = item
            if self._clock() >= expires_at:
                del self._data[key]
                self.stats.expirations += 1
                self.stats.misses += 1
                return None
            self._data.move_to_end(key)
            self.stats.hits += 1
            return value

    def set(self, key: str, value: bytes, ttl: int) -> bool:
        if ttl <= 0:
            return False
        with self._lock:
            if key in self._data:
                self._data.move_to_end(key)
            elif len(self._data) >= self._max_size:
                self._data.popitem(last=False)
                self.stats.evictions += 1
            self._data[key] = (value, self._clock() + ttl)
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def close(self) -> None:
        """Entries stay available to other facades sharing this backend."""

    def __contains__(self, key: str) -> bool:
        with self._lock:
            item = self._data.get(key)
            return item is not None and self._clock() < item[1]

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class RedisCacheBackend:
    """Redis store for cache entries.

    The client is created lazily from ``config.url`` unless one is passed in.
    Any Redis error is reported as ``CacheUnavailableError``.

    Args:
        config: Connection settings.
        client: Pre-built ``redis.Redis`` compatible client.
    """

    __slots__ = ("_client", "_config")

    def __init__(self, config: "Optional[RedisCacheConfig]" = None, client: "Any" = None) -> None:
        self._config = config or RedisCacheConfig()
        self._client = client

    def _require_client(self) -> Any:
        if self._client is not None:
            return self._client
        try:
            import redis
        except ImportError as exc:
            raise MissingDependencyError(package="redis", install_package="redis") from exc
        self._client = redis.Redis.from_url(
            self._config.url,
            socket_timeout=self._config.socket_timeout,
            socket_connect_timeout=self._config.socket_connect_timeout,
        )
        return self._client

    def connect(self) -> bool:
        try:
            return bool(self._require_client().ping())
        except MissingDependencyError:
            raise
        except Exception as exc:
            logger.warning("Redis cache at %s is unavailable: %s", self._config.url, exc)
            return False

    def get(self, key: str) -> "Optional[bytes]":
        try:
            value = self._require_client().get(key)
        except MissingDependencyError:
            raise
        except Exception as exc:
            msg = f"Redis get failed: {exc}"
            raise CacheUnavailableError(msg) from exc
        if value is None:
            return None
        return bytes(value)

    def set(self, key: str, value: bytes, ttl: int) -> bool:
        if ttl <= 0:
            return False
        try:
            return bool(self._require_client().set(key, value, ex=ttl))
        except MissingDependencyError:
            raise
        except Exception as exc:
            msg = f"Redis set failed: {exc}"
            raise CacheUnavailableError(msg) from exc

    def close(self) -> None:
        if self._client is None:
            return
        try:
            self._client.close()
        except Exception as exc:  # pragma: no cover
            logger.debug("Error closing Redis client: %s", exc)
        self._client = None
