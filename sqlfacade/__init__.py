"""sqlfacade: a caching data-access facade over parameterized SQL."""

from sqlfacade import adapters, core, driver, exceptions, typing, utils
from sqlfacade.__metadata__ import __version__
from sqlfacade.adapters.sqlite import SqliteConfig, SqliteConnectionParams, SqliteDriver
from sqlfacade.config import DatabaseConfig
from sqlfacade.core.builder import CompiledQuery, QueryBuilder
from sqlfacade.core.cache import CacheConfig, MemoryCacheBackend, RedisCacheBackend, RedisCacheConfig
from sqlfacade.core.counters import OperationKind
from sqlfacade.core.filters import NamedEquals, RawPredicate
from sqlfacade.core.request import FetchShape, QueryRequest
from sqlfacade.core.result import Failure, RowSet, WriteResult, is_failure
from sqlfacade.diagnostics import ErrorEntry, ErrorLog
from sqlfacade.driver import PreparedStatement, SyncDriverAdapterBase
from sqlfacade.exceptions import (
    CacheUnavailableError,
    DriverError,
    MalformedRequestError,
    MissingParameterError,
    ParameterCollisionError,
    SQLFacadeError,
)
from sqlfacade.facade import DataAccessFacade

__all__ = (
    "CacheConfig",
    "CacheUnavailableError",
    "CompiledQuery",
    "DataAccessFacade",
    "DatabaseConfig",
    "DriverError",
    "ErrorEntry",
    "ErrorLog",
    "Failure",
    "FetchShape",
    "MalformedRequestError",
    "MemoryCacheBackend",
    "MissingParameterError",
    "NamedEquals",
    "OperationKind",
    "ParameterCollisionError",
    "PreparedStatement",
    "QueryBuilder",
    "QueryRequest",
    "RawPredicate",
    "RedisCacheBackend",
    "RedisCacheConfig",
    "RowSet",
    "SQLFacadeError",
    "SqliteConfig",
    "SqliteConnectionParams",
    "SqliteDriver",
    "SyncDriverAdapterBase",
    "WriteResult",
    "__version__",
    "adapters",
    "core",
    "driver",
    "exceptions",
    "is_failure",
    "typing",
    "utils",
)
