"""Synchronous driver protocol."""

from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Union

from mypy_extensions import mypyc_attr

from sqlfacade.core.compiler import detect_operation_type
from sqlfacade.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfacade.core.compiler import OperationType
    from sqlfacade.core.result import RowSet
    from sqlfacade.typing import ColumnDescriptor, StatementParameters

__all__ = ("PreparedStatement", "SyncDriverAdapterBase")

logger = get_logger("driver")


@mypyc_attr(allow_interpreted_subclasses=False)
class PreparedStatement:
    """Statement text ready for execution on one driver.

    Args:
        sql: Statement text.
        operation_type: Detected statement kind.
        handle: Driver specific prepared handle, if the driver has one.
    """

    __slots__ = ("handle", "operation_type", "sql")

    def __init__(self, sql: str, operation_type: "OperationType" = "UNKNOWN", handle: Any = None) -> None:
        self.sql = sql
        self.operation_type = operation_type
        self.handle = handle

    def __repr__(self) -> str:
        return f"PreparedStatement(sql={self.sql!r}, operation_type={self.operation_type!r})"


class SyncDriverAdapterBase(ABC):
    """Narrow interface the facade uses to talk to a relational database.

    Every method reports failures as a ``DriverError`` subclass. Concrete
    adapters implement connection handling, execution and catalog queries;
    transaction helpers and statement preparation are shared.
    """

    __slots__ = ("connection",)

    dialect: "ClassVar[Optional[str]]" = None

    def __init__(self, connection: Any = None) -> None:
        self.connection = connection

    @abstractmethod
    def open(self) -> None:
        """Open the connection if it is not open yet."""

    @abstractmethod
    def close(self) -> None:
        """Close the connection."""

    @property
    def is_open(self) -> bool:
        return self.connection is not None

    def prepare(self, sql: str) -> PreparedStatement:
        """Prepare ``sql`` for execution.

        The base implementation only classifies the statement; adapters with
        a native prepare step override this.
        """
        return PreparedStatement(sql, detect_operation_type(sql, self.dialect))

    @abstractmethod
    def execute(self, statement: PreparedStatement, parameters: "Optional[StatementParameters]" = None) -> "RowSet":
        """Execute a prepared statement with its bound values."""

    @abstractmethod
    def row_count(self) -> int:
        """Rows returned or affected by the last execution."""

    @abstractmethod
    def last_insert_id(self) -> "Optional[Union[int, str]]":
        """Identifier generated by the last insert."""

    @abstractmethod
    def begin(self) -> None:
        """Begin a database transaction on the current connection."""

    @abstractmethod
    def commit(self) -> None:
        """Commit the current transaction on the current connection."""

    @abstractmethod
    def rollback(self) -> None:
        """Rollback the current transaction on the current connection."""

    @property
    @abstractmethod
    def in_transaction(self) -> bool:
        """True while an explicit transaction is open."""

    @abstractmethod
    def list_tables(self) -> "list[str]":
        """Names of the user tables."""

    @abstractmethod
    def list_columns(self, table: str) -> "list[ColumnDescriptor]":
        """Column metadata for ``table``."""

    @contextmanager
    def transaction(self) -> "Generator[None, None, None]":
        """Run the block in a transaction, rolling back on any exception."""
        self.begin()
        try:
            yield
        except BaseException as exc:
            if self.in_transaction:
                logger.debug("Rolling back transaction after %s", type(exc).__name__)
                self.rollback()
            raise
        self.commit()

    def __enter__(self) -> "SyncDriverAdapterBase":
        self.open()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
