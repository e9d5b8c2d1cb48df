"""sqlfacade core: request rendering, read caching and results.

- request.py: QueryRequest and FetchShape
- filters.py: NamedEquals and RawPredicate filters
- builder.py: QueryBuilder, pure SQL rendering
- cache.py: cache fingerprint, entry codec and backends
- counters.py: per-operation counters
- compiler.py: statement classification with SQLGlot
- result.py: RowSet, WriteResult and Failure
"""

from sqlfacade.core import filters
from sqlfacade.core.builder import CompiledQuery, QueryBuilder
from sqlfacade.core.cache import (
    CacheBackend,
    CacheConfig,
    CacheEntry,
    CacheStats,
    MemoryCacheBackend,
    RedisCacheBackend,
    RedisCacheConfig,
    create_cache_key,
)
from sqlfacade.core.compiler import OperationType, detect_operation_type
from sqlfacade.core.counters import OperationCounters, OperationKind
from sqlfacade.core.filters import NamedEquals, RawPredicate
from sqlfacade.core.request import FetchShape, QueryRequest
from sqlfacade.core.result import Failure, RowSet, WriteResult, is_failure, shape_rows

__all__ = (
    "CacheBackend",
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "CompiledQuery",
    "Failure",
    "FetchShape",
    "MemoryCacheBackend",
    "NamedEquals",
    "OperationCounters",
    "OperationKind",
    "OperationType",
    "QueryBuilder",
    "QueryRequest",
    "RawPredicate",
    "RedisCacheBackend",
    "RedisCacheConfig",
    "RowSet",
    "WriteResult",
    "create_cache_key",
    "detect_operation_type",
    "filters",
    "is_failure",
    "shape_rows",
)
