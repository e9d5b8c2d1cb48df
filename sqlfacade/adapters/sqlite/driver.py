import contextlib
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional, Union

from sqlfacade.adapters.sqlite.core import (
    build_connection_config,
    create_mapped_exception,
    format_identifier,
    resolve_rowcount,
)
from sqlfacade.core.result import RowSet
from sqlfacade.driver import PreparedStatement, SyncDriverAdapterBase
from sqlfacade.exceptions import DatabaseConnectionError, SQLParsingError, TransactionError
from sqlfacade.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlfacade.typing import ColumnDescriptor, StatementParameters

__all__ = ("SqliteCursor", "SqliteDriver")

logger = get_logger("adapters.sqlite")

_TABLES_SQL = "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"


class SqliteCursor:
    """Context manager for SQLite cursor management."""

    def __init__(self, connection: "sqlite3.Connection") -> None:
        self.connection = connection
        self.cursor: Optional[sqlite3.Cursor] = None

    def __enter__(self) -> "sqlite3.Cursor":
        self.cursor = self.connection.cursor()
        return self.cursor

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.cursor is not None:
            with contextlib.suppress(Exception):
                self.cursor.close()


class SqliteDriver(SyncDriverAdapterBase):
    """Reference implementation for a synchronous SQLite driver.

    Args:
        connection_config: Keyword arguments for ``sqlite3.connect``.
        connection: An already open connection to adopt instead.
    """

    __slots__ = ("_connection_config", "_row_count")

    dialect = "sqlite"

    def __init__(
        self,
        connection_config: "Optional[Mapping[str, Any]]" = None,
        connection: "Optional[sqlite3.Connection]" = None,
    ) -> None:
        super().__init__(connection=connection)
        self._connection_config = build_connection_config(connection_config or {})
        self._row_count = 0

    @contextmanager
    def handle_database_exceptions(self) -> "Generator[None, None, None]":
        """Wrap ``sqlite3`` errors in driver errors."""
        try:
            yield
        except sqlite3.Error as e:
            raise create_mapped_exception(e) from e

    def open(self) -> None:
        if self.connection is not None:
            return
        database = self._connection_config["database"]
        try:
            self.connection = sqlite3.connect(**self._connection_config)
        except sqlite3.Error as e:
            msg = f"Could not open SQLite database {database!r}: {e}"
            raise DatabaseConnectionError(msg, code=getattr(e, "sqlite_errorcode", 0) or 0) from e
        logger.debug("Opened SQLite database %s", database)

    def close(self) -> None:
        if self.connection is None:
            return
        try:
            self.connection.close()
        finally:
            self.connection = None
        logger.debug("Closed SQLite database %s", self._connection_config["database"])

    def _require_connection(self) -> "sqlite3.Connection":
        if self.connection is None:
            msg = "SQLite connection is not open"
            raise DatabaseConnectionError(msg)
        return self.connection

    def execute(self, statement: PreparedStatement, parameters: "Optional[StatementParameters]" = None) -> RowSet:
        """Execute single SQL statement using SQLite execute."""
        connection = self._require_connection()
        with self.handle_database_exceptions(), SqliteCursor(connection) as cursor:
            cursor.execute(statement.sql, parameters or ())
            if cursor.description:
                rows = cursor.fetchall()
                columns = [col[0] for col in cursor.description]
                self._row_count = len(rows)
                return RowSet(columns=columns, rows=rows, operation_type=statement.operation_type)

            self._row_count = resolve_rowcount(cursor)
            return RowSet(
                rows_affected=self._row_count,
                last_inserted_id=cursor.lastrowid or None,
                operation_type=statement.operation_type,
            )

    def row_count(self) -> int:
        return self._row_count

    def last_insert_id(self) -> "Optional[Union[int, str]]":
        """Rowid of the most recent successful insert on this connection, None if there was none."""
        with self.handle_database_exceptions():
            row = self._require_connection().execute("SELECT last_insert_rowid()").fetchone()
        if not row or not row[0]:
            return None
        return int(row[0])

    def begin(self) -> None:
        """Begin a database transaction."""
        connection = self._require_connection()
        try:
            connection.execute("BEGIN")
        except sqlite3.Error as e:
            msg = f"Failed to begin transaction: {e}"
            raise TransactionError(msg, code=getattr(e, "sqlite_errorcode", 0) or 0) from e

    def commit(self) -> None:
        """Commit the current transaction."""
        connection = self._require_connection()
        try:
            connection.commit()
        except sqlite3.Error as e:
            msg = f"Failed to commit transaction: {e}"
            raise TransactionError(msg, code=getattr(e, "sqlite_errorcode", 0) or 0) from e

    def rollback(self) -> None:
        """Rollback the current transaction."""
        connection = self._require_connection()
        try:
            connection.rollback()
        except sqlite3.Error as e:
            msg = f"Failed to rollback transaction: {e}"
            raise TransactionError(msg, code=getattr(e, "sqlite_errorcode", 0) or 0) from e

    @property
    def in_transaction(self) -> bool:
        return self.connection is not None and self.connection.in_transaction

    def list_tables(self) -> "list[str]":
        result = self.execute(PreparedStatement(_TABLES_SQL, "SELECT"))
        return [row[0] for row in result.rows]

    def list_columns(self, table: str) -> "list[ColumnDescriptor]":
        sql = f"PRAGMA table_info({format_identifier(table)})"
        result = self.execute(PreparedStatement(sql, "PRAGMA"))
        if not result.rows:
            msg = f"no such table: {table}"
            raise SQLParsingError(msg)
        columns: list[ColumnDescriptor] = []
        for _cid, name, type_name, notnull, default, pk in result.rows:
            columns.append({
                "name": name,
                "type": type_name,
                "nullable": not notnull,
                "default": default,
                "primary_key": bool(pk),
            })
        return columns

    def __repr__(self) -> str:
        return f"SqliteDriver(database={self._connection_config['database']!r}, open={self.is_open})"
