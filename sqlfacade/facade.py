"""Data access facade.

``DataAccessFacade`` turns structured read and write requests into
parameterized SQL, runs them on one driver and serves repeated reads from a
cache backend. Driver failures never escape a facade operation: they are
recorded in the facade's ``ErrorLog`` and returned as a falsy ``Failure``.
Malformed requests and use before ``initialize()`` raise.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Generic, Optional, Union

from sqlfacade.config import DriverT
from sqlfacade.core.builder import QueryBuilder
from sqlfacade.core.cache import CacheEntry, MemoryCacheBackend, create_cache_key, decode_entry, encode_entry
from sqlfacade.core.counters import OperationCounters, OperationKind
from sqlfacade.core.request import QueryRequest
from sqlfacade.core.result import Failure, WriteResult, shape_rows
from sqlfacade.diagnostics import ErrorLog
from sqlfacade.exceptions import (
    CacheUnavailableError,
    DatabaseConnectionError,
    DriverError,
    ImproperConfigurationError,
    SerializationError,
)
from sqlfacade.utils.logging import configure_logging, get_logger, log_with_context

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlfacade.config import DatabaseConfig
    from sqlfacade.core.builder import CompiledQuery
    from sqlfacade.core.cache import CacheBackend
    from sqlfacade.core.filters import FiltersInput
    from sqlfacade.core.request import FetchShape
    from sqlfacade.core.result import RowSet
    from sqlfacade.typing import BatchRow, ColumnDescriptor, FieldsT

__all__ = ("DataAccessFacade",)

logger = get_logger("facade")


class DataAccessFacade(Generic[DriverT]):
    """Query construction, execution and read caching over one connection.

    Args:
        config: Database configuration; creates the driver.
        cache_backend: Store for cached reads. Defaults to an in-memory
            backend sized by ``config.cache_config.max_size``. Ignored when
            ``config.cache_config.enabled`` is off.

    Example:
        >>> facade = DataAccessFacade(SqliteConfig())
        >>> facade.initialize()
        True
        >>> _ = facade.sql("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
        >>> _ = facade.insert("users", {"name": "Ada"})
        >>> facade.select("users", "name", {"id": 1}, single=True)
        'Ada'
    """

    COMPONENT = "DataAccessFacade"

    __slots__ = ("_builder", "_cache", "_cache_online", "_config", "_counters", "_driver", "_errors", "_last_row_count")

    def __init__(self, config: "DatabaseConfig[DriverT]", cache_backend: "Optional[CacheBackend]" = None) -> None:
        self._config = config
        self._builder = QueryBuilder()
        self._counters = OperationCounters()
        self._errors = ErrorLog()
        self._driver: Optional[DriverT] = None
        self._last_row_count = 0
        cache_config = config.cache_config
        if not cache_config.enabled:
            self._cache: Optional[CacheBackend] = None
        elif cache_backend is not None:
            self._cache = cache_backend
        else:
            self._cache = MemoryCacheBackend(max_size=cache_config.max_size)
        self._cache_online = False

    @property
    def config(self) -> "DatabaseConfig[DriverT]":
        return self._config

    @property
    def error_log(self) -> ErrorLog:
        """Errors recorded by this facade."""
        return self._errors

    @property
    def cache_backend(self) -> "Optional[CacheBackend]":
        return self._cache

    @property
    def driver(self) -> "Optional[DriverT]":
        return self._driver

    def initialize(self) -> bool:
        """Open the connection, connect the cache and reset the counters.

        Returns:
            False when the connection cannot be opened; the reason is in
            :attr:`error_log` under the ``initialize`` operation.
        """
        if self._config.echo:
            configure_logging()
        if self._driver is None:
            self._driver = self._config.create_driver()
        try:
            self._driver.open()
        except DriverError as exc:
            self._record("initialize", exc)
            return False

        if self._cache is not None:
            self._cache_online = self._cache.connect()
            if not self._cache_online:
                logger.warning("Cache backend %s is unreachable; reads go to the database", type(self._cache).__name__)
        self._counters.reset()
        logger.debug("Initialized %r", self._driver)
        return True

    def close(self) -> None:
        """Close the connection and the cache client."""
        if self._cache is not None:
            self._cache.close()
            self._cache_online = False
        if self._driver is None:
            return
        try:
            self._driver.close()
        except DriverError as exc:
            self._record("close", exc)

    def __enter__(self) -> "DataAccessFacade[DriverT]":
        if not self.initialize():
            msg = self._errors.first_message(self.COMPONENT, "initialize") or "Could not open the database connection"
            raise DatabaseConnectionError(msg)
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _require_driver(self) -> DriverT:
        if self._driver is None or not self._driver.is_open:
            msg = "DataAccessFacade is not initialized, call initialize() first"
            raise ImproperConfigurationError(msg)
        return self._driver

    def _record(self, operation: str, error: DriverError) -> Failure:
        self._errors.add(str(error), self.COMPONENT, operation, code=error.code)
        return Failure(operation, error)

    def _show(self, operation: str, compiled: "CompiledQuery", show_query: bool) -> None:
        if show_query or self._config.echo:
            log_with_context(
                logger, logging.INFO, compiled.sql, operation=operation, parameters=compiled.parameters
            )

    def _run(self, compiled: "CompiledQuery") -> "RowSet":
        driver = self._require_driver()
        return driver.execute(driver.prepare(compiled.sql), compiled.parameters)

    def _cache_get(self, key: str, request: QueryRequest) -> "Optional[CacheEntry]":
        if self._cache is None:
            return None
        try:
            payload = self._cache.get(key)
        except CacheUnavailableError as exc:
            logger.debug("Cache lookup failed, reading from the database: %s", exc)
            return None
        if payload is None:
            return None
        try:
            return decode_entry(payload, request.fetch_shape, request.single_row)
        except SerializationError as exc:
            logger.debug("Ignoring undecodable cache entry %s: %s", key, exc)
            return None

    def _cache_set(self, key: str, entry: CacheEntry, ttl: int) -> None:
        if self._cache is None:
            return
        try:
            self._cache.set(key, encode_entry(entry), ttl)
        except (CacheUnavailableError, SerializationError) as exc:
            logger.debug("Could not store cache entry %s: %s", key, exc)

    def select(
        self,
        table: str,
        fields: "FieldsT" = "*",
        filters: "FiltersInput" = None,
        *,
        join: Optional[str] = None,
        order_by: Optional[str] = None,
        group_by: Optional[str] = None,
        limit: "Optional[Union[str, int]]" = None,
        single_row: bool = False,
        single: bool = False,
        fetch_shape: "Optional[Union[FetchShape, str]]" = None,
        cache_ttl: Optional[int] = None,
        show_query: bool = False,
    ) -> Any:
        """Run a select, reading through the cache when ``cache_ttl`` is positive.

        Args:
            table: Table name.
            fields: Columns to select.
            filters: Legacy filter mapping or tagged filters.
            join: Join condition ANDed onto the WHERE clause.
            order_by: ORDER BY fragment.
            group_by: GROUP BY fragment.
            limit: LIMIT fragment.
            single_row: Return one row instead of a list.
            single: Return one scalar.
            fetch_shape: Row shape, dicts by default.
            cache_ttl: Cache expiry in seconds. Defaults to ``cache_config.default_ttl``.
            show_query: Log the rendered statement at INFO level.

        Raises:
            MalformedRequestError: The request cannot be rendered.
            ImproperConfigurationError: The facade is not initialized.

        Returns:
            Rows in the requested shape, one row or scalar (None when nothing
            matched), or a ``Failure``.
        """
        request = QueryRequest(
            table,
            fields,
            filters,
            join=join,
            order_by=order_by,
            group_by=group_by,
            limit=limit,
            single_row=single_row,
            single=single,
            fetch_shape=fetch_shape,
            cache_ttl=self._config.cache_config.default_ttl if cache_ttl is None else cache_ttl,
        )
        compiled = self._builder.select(request)
        self._show("select", compiled, show_query)
        self._require_driver()

        key: Optional[str] = None
        if request.use_cache and self._cache is not None and self._cache_online:
            key = create_cache_key(compiled, request, self._config.cache_config.key_prefix)
            entry = self._cache_get(key, request)
            if entry is not None:
                self._counters.increment(OperationKind.CACHE_HIT)
                self._last_row_count = entry.row_count
                return entry.result

        try:
            rowset = self._run(compiled)
        except DriverError as exc:
            return self._record("select", exc)
        self._counters.increment(OperationKind.SELECT)
        self._last_row_count = rowset.row_count
        result = shape_rows(rowset, request.fetch_shape, request.single_row)
        if key is not None:
            self._cache_set(key, CacheEntry(row_count=rowset.row_count, result=result), request.cache_ttl)
        return result

    def sql(self, text: str) -> "Union[RowSet, Failure]":
        """Execute raw, unparameterized SQL.

        Nothing in ``text`` is escaped or checked.
        """
        driver = self._require_driver()
        self._counters.increment(OperationKind.SQL)
        try:
            rowset = driver.execute(driver.prepare(text))
        except DriverError as exc:
            return self._record("sql", exc)
        self._last_row_count = rowset.row_count
        return rowset

    def _write(self, operation: str, kind: OperationKind, compiled: "CompiledQuery") -> "Union[WriteResult, Failure]":
        try:
            rowset = self._run(compiled)
        except DriverError as exc:
            return self._record(operation, exc)
        self._counters.increment(kind)
        self._last_row_count = rowset.rows_affected
        return WriteResult(operation, rowset.rows_affected, rowset.last_inserted_id)

    def insert(self, table: str, data: "Mapping[str, Any]") -> "Union[WriteResult, Failure]":
        """Insert one row; keys of ``data`` are the column names."""
        compiled = self._builder.insert(table, data)
        self._require_driver()
        return self._write("insert", OperationKind.INSERT, compiled)

    def insert_batch(
        self, table: str, fields: "Sequence[str]", rows: "Sequence[BatchRow]"
    ) -> "Union[WriteResult, Failure]":
        """Insert many rows with one statement.

        The statement runs in its own transaction, rolled back on failure,
        unless a transaction is already open on the connection.
        """
        compiled = self._builder.insert_batch(table, fields, rows)
        driver = self._require_driver()
        if driver.in_transaction:
            return self._write("insert_batch", OperationKind.INSERT, compiled)
        try:
            with driver.transaction():
                rowset = self._run(compiled)
        except DriverError as exc:
            return self._record("insert_batch", exc)
        self._counters.increment(OperationKind.INSERT)
        self._last_row_count = rowset.rows_affected
        return WriteResult("insert_batch", rowset.rows_affected, rowset.last_inserted_id)

    def update(
        self,
        table: str,
        data: "Mapping[str, Any]",
        match_columns: "Optional[Sequence[str]]" = None,
        *,
        show_query: bool = False,
    ) -> "Union[WriteResult, Failure]":
        """Update the rows matching ``match_columns`` (``id`` by default) with ``data``.

        Match values are taken from ``data``.
        """
        compiled = self._builder.update(table, data, match_columns)
        self._show("update", compiled, show_query)
        self._require_driver()
        return self._write("update", OperationKind.UPDATE, compiled)

    def delete(self, table: str, filters: "FiltersInput") -> "Union[WriteResult, Failure]":
        compiled = self._builder.delete(table, filters)
        self._require_driver()
        return self._write("delete", OperationKind.DELETE, compiled)

    def last_insert_id(self) -> "Optional[Union[int, str]]":
        """Identifier generated by the last insert, None if unavailable."""
        driver = self._require_driver()
        try:
            return driver.last_insert_id()
        except DriverError as exc:
            self._record("last_insert_id", exc)
            return None

    def last_row_count(self) -> int:
        """Rows returned or affected by the last operation."""
        return int(self._last_row_count)

    def operation_counters(self, kind: "Optional[Union[OperationKind, str]]" = None) -> "Union[int, dict[str, int]]":
        """Return one counter, or all of them for None, ``"all"`` or an unknown kind."""
        return self._counters.get(kind)

    def list_tables(self) -> "Union[list[str], Failure]":
        driver = self._require_driver()
        try:
            return driver.list_tables()
        except DriverError as exc:
            return self._record("list_tables", exc)

    def list_columns(self, table: str) -> "Union[list[ColumnDescriptor], Failure]":
        driver = self._require_driver()
        try:
            return driver.list_columns(table)
        except DriverError as exc:
            return self._record("list_columns", exc)

    def start_batch(self) -> bool:
        """Begin a caller managed transaction."""
        driver = self._require_driver()
        try:
            driver.begin()
        except DriverError as exc:
            self._record("start_batch", exc)
            return False
        return True

    def execute_batch(self) -> bool:
        """Commit the transaction opened by :meth:`start_batch`."""
        driver = self._require_driver()
        try:
            driver.commit()
        except DriverError as exc:
            self._record("execute_batch", exc)
            return False
        return True

    def rollback_batch(self) -> bool:
        """Discard the transaction opened by :meth:`start_batch`."""
        driver = self._require_driver()
        try:
            driver.rollback()
        except DriverError as exc:
            self._record("rollback_batch", exc)
            return False
        return True

    @contextmanager
    def transaction(self) -> "Generator[DataAccessFacade[DriverT], None, None]":
        """Run the block in one transaction.

        Commits when the block exits normally and rolls back when it raises.
        Facade operations inside the block still return ``Failure`` instead of
        raising, so check their results and raise to abort. Failures to begin
        or commit raise ``DriverError``.

        Example:
            >>> with facade.transaction():
            ...     if not facade.insert("users", {"name": "Ada"}):
            ...         raise RuntimeError("insert failed")
        """
        driver = self._require_driver()
        with driver.transaction():
            yield self

    def __repr__(self) -> str:
        return f"DataAccessFacade(driver={self._driver!r}, cache={type(self._cache).__name__ if self._cache else None})"
