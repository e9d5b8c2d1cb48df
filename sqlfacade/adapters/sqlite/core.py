"""SQLite adapter helpers: error mapping, identifiers and connection settings."""

import sqlite3
from collections.abc import Mapping
from typing import Any, Final, Optional

from sqlfacade.exceptions import (
    DatabaseConnectionError,
    DriverError,
    ForeignKeyViolationError,
    IntegrityError,
    NotNullViolationError,
    OperationalError,
    SQLParsingError,
    UniqueViolationError,
)

__all__ = (
    "build_connection_config",
    "create_mapped_exception",
    "format_identifier",
    "resolve_rowcount",
)

SQLITE_ERROR_CODE: Final = 1
SQLITE_BUSY_CODE: Final = 5
SQLITE_LOCKED_CODE: Final = 6
SQLITE_READONLY_CODE: Final = 8
SQLITE_IOERR_CODE: Final = 10
SQLITE_CANTOPEN_CODE: Final = 14
SQLITE_CONSTRAINT_CODE: Final = 19
SQLITE_CONSTRAINT_CHECK_CODE: Final = 275
SQLITE_CONSTRAINT_FOREIGNKEY_CODE: Final = 787
SQLITE_CONSTRAINT_NOTNULL_CODE: Final = 1299
SQLITE_CONSTRAINT_PRIMARYKEY_CODE: Final = 1555
SQLITE_CONSTRAINT_UNIQUE_CODE: Final = 2067

_CONNECTION_KEYS: Final = frozenset({
    "database",
    "timeout",
    "detect_types",
    "isolation_level",
    "check_same_thread",
    "factory",
    "cached_statements",
    "uri",
})


def _quote_sqlite_identifier(identifier: str) -> str:
    normalized = identifier.replace('"', '""')
    return f'"{normalized}"'


def format_identifier(identifier: str) -> str:
    """Quote a possibly schema-qualified identifier for catalog queries."""
    cleaned = identifier.strip()
    if not cleaned:
        msg = "Table name must not be empty"
        raise SQLParsingError(msg)

    if "." not in cleaned:
        return _quote_sqlite_identifier(cleaned)

    return ".".join(_quote_sqlite_identifier(part) for part in cleaned.split(".") if part)


def resolve_rowcount(cursor: Any) -> int:
    """Resolve rowcount from a SQLite cursor.

    Returns:
        Positive rowcount value or 0 when unknown.
    """
    try:
        rowcount = cursor.rowcount
    except AttributeError:
        return 0

    if isinstance(rowcount, int) and rowcount > 0:
        return rowcount
    return 0


def build_connection_config(connection_config: "Mapping[str, Any]") -> "dict[str, Any]":
    """Keep only the keyword arguments ``sqlite3.connect`` accepts.

    Autocommit mode (``isolation_level=None``) is the default so explicit
    ``BEGIN``/``COMMIT`` control transactions.
    """
    config = {key: value for key, value in connection_config.items() if key in _CONNECTION_KEYS}
    config.setdefault("database", ":memory:")
    config.setdefault("isolation_level", None)
    return config


def _create_sqlite_error(
    error: BaseException, code: "Optional[int]", error_class: "type[DriverError]", description: str
) -> DriverError:
    code_str = f"[code {code}]" if code else ""
    msg = f"SQLite {description} {code_str}: {error}" if code_str else f"SQLite {description}: {error}"
    exc = error_class(msg, code=code or 0)
    exc.__cause__ = error
    return exc


def create_mapped_exception(error: BaseException) -> DriverError:
    """Map a ``sqlite3`` exception to a ``DriverError`` subclass.

    Mapping priority: extended error codes, then error names, then message
    patterns, then ``DriverError``.

    Args:
        error: The SQLite exception to map.

    Returns:
        A driver error that wraps the original.
    """
    error_code: Optional[int] = getattr(error, "sqlite_errorcode", None)
    error_name: Optional[str] = getattr(error, "sqlite_errorname", None)
    error_msg = str(error).lower()

    if error_code in {SQLITE_CONSTRAINT_UNIQUE_CODE, SQLITE_CONSTRAINT_PRIMARYKEY_CODE} or error_name in {
        "SQLITE_CONSTRAINT_UNIQUE",
        "SQLITE_CONSTRAINT_PRIMARYKEY",
    }:
        return _create_sqlite_error(error, error_code, UniqueViolationError, "unique constraint violation")
    if error_code == SQLITE_CONSTRAINT_FOREIGNKEY_CODE or error_name == "SQLITE_CONSTRAINT_FOREIGNKEY":
        return _create_sqlite_error(error, error_code, ForeignKeyViolationError, "foreign key constraint violation")
    if error_code == SQLITE_CONSTRAINT_NOTNULL_CODE or error_name == "SQLITE_CONSTRAINT_NOTNULL":
        return _create_sqlite_error(error, error_code, NotNullViolationError, "not-null constraint violation")
    if error_code in {SQLITE_CONSTRAINT_CODE, SQLITE_CONSTRAINT_CHECK_CODE} or (
        error_name is not None and error_name.startswith("SQLITE_CONSTRAINT")
    ):
        return _create_sqlite_error(error, error_code, IntegrityError, "integrity constraint violation")

    if not error_code:
        if "unique constraint" in error_msg:
            return _create_sqlite_error(error, 0, UniqueViolationError, "unique constraint violation")
        if "foreign key constraint" in error_msg:
            return _create_sqlite_error(error, 0, ForeignKeyViolationError, "foreign key constraint violation")
        if "not null constraint" in error_msg:
            return _create_sqlite_error(error, 0, NotNullViolationError, "not-null constraint violation")
        if isinstance(error, sqlite3.IntegrityError):
            return _create_sqlite_error(error, 0, IntegrityError, "integrity constraint violation")

    if error_code == SQLITE_CANTOPEN_CODE or error_name == "SQLITE_CANTOPEN" or "unable to open" in error_msg:
        return _create_sqlite_error(error, error_code, DatabaseConnectionError, "connection error")
    if error_code in {SQLITE_BUSY_CODE, SQLITE_LOCKED_CODE, SQLITE_IOERR_CODE, SQLITE_READONLY_CODE}:
        return _create_sqlite_error(error, error_code, OperationalError, "operational error")
    if "locked" in error_msg or "busy" in error_msg or "readonly" in error_msg:
        return _create_sqlite_error(error, error_code, OperationalError, "operational error")

    if "syntax" in error_msg or "no such" in error_msg or "incomplete input" in error_msg:
        return _create_sqlite_error(error, error_code, SQLParsingError, "SQL error")
    if error_code == SQLITE_ERROR_CODE:
        return _create_sqlite_error(error, error_code, SQLParsingError, "SQL error")

    return _create_sqlite_error(error, error_code, DriverError, "database error")
