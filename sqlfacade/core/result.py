"""Operation results.

Facade operations never raise driver errors. A successful call returns its
value (rows, a scalar, a ``RowSet`` or a ``WriteResult``); a failed call
returns a ``Failure`` carrying the error. ``Failure`` is falsy and
``WriteResult`` is truthy, so ``if facade.insert(...):`` reads naturally.
"""

from typing import TYPE_CHECKING, Any, Optional, Union

from mypy_extensions import mypyc_attr

from sqlfacade.core.request import FetchShape

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlfacade.core.compiler import OperationType
    from sqlfacade.exceptions import SQLFacadeError
    from sqlfacade.typing import DictRow, TupleRow

__all__ = ("Failure", "RowSet", "WriteResult", "is_failure", "shape_rows")


@mypyc_attr(allow_interpreted_subclasses=False)
class RowSet:
    """Rows returned by the driver for one statement.

    Args:
        columns: Column names from the cursor description.
        rows: Raw positional rows.
        rows_affected: Driver reported affected row count for writes.
        last_inserted_id: Row id of the last insert, if any.
        operation_type: Statement kind.
    """

    __slots__ = ("columns", "last_inserted_id", "operation_type", "rows", "rows_affected")

    def __init__(
        self,
        columns: "Optional[list[str]]" = None,
        rows: "Optional[list[TupleRow]]" = None,
        rows_affected: int = 0,
        last_inserted_id: "Optional[Union[int, str]]" = None,
        operation_type: "OperationType" = "UNKNOWN",
    ) -> None:
        self.columns = columns if columns is not None else []
        self.rows = rows if rows is not None else []
        self.rows_affected = rows_affected
        self.last_inserted_id = last_inserted_id
        self.operation_type = operation_type

    @property
    def row_count(self) -> int:
        """Rows returned, or rows affected for statements that return none."""
        if self.columns:
            return len(self.rows)
        return self.rows_affected

    def as_dicts(self) -> "list[DictRow]":
        return [dict(zip(self.columns, row)) for row in self.rows]

    def first(self) -> "Optional[TupleRow]":
        return self.rows[0] if self.rows else None

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> "Iterator[TupleRow]":
        return iter(self.rows)

    def __repr__(self) -> str:
        return (
            f"RowSet(operation_type={self.operation_type!r}, columns={self.columns!r}, "
            f"row_count={self.row_count}, last_inserted_id={self.last_inserted_id!r})"
        )


@mypyc_attr(allow_interpreted_subclasses=False)
class WriteResult:
    """Outcome of a successful insert, insert-batch, update or delete."""

    __slots__ = ("last_inserted_id", "operation", "rows_affected")

    def __init__(
        self, operation: str, rows_affected: int = 0, last_inserted_id: "Optional[Union[int, str]]" = None
    ) -> None:
        self.operation = operation
        self.rows_affected = rows_affected
        self.last_inserted_id = last_inserted_id

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return (
            f"WriteResult(operation={self.operation!r}, rows_affected={self.rows_affected}, "
            f"last_inserted_id={self.last_inserted_id!r})"
        )


@mypyc_attr(allow_interpreted_subclasses=False)
class Failure:
    """A failed operation.

    Args:
        operation: Facade operation name.
        error: The driver error that caused the failure.
    """

    __slots__ = ("error", "operation")

    def __init__(self, operation: str, error: "SQLFacadeError") -> None:
        self.operation = operation
        self.error = error

    @property
    def message(self) -> str:
        return str(self.error)

    @property
    def code(self) -> "int | str":
        return getattr(self.error, "code", 0)

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Failure(operation={self.operation!r}, error={self.error!r})"


def is_failure(value: Any) -> bool:
    """Return True if ``value`` is a ``Failure``."""
    return isinstance(value, Failure)


def shape_rows(rowset: RowSet, fetch_shape: FetchShape, single_row: bool = False) -> Any:
    """Materialize driver rows in the requested shape.

    Args:
        rowset: Driver output.
        fetch_shape: ``MAPPING`` gives dicts, ``NUMERIC`` tuples and ``COLUMN`` the first column only.
        single_row: Return the first item, or None when there are no rows.

    Returns:
        A list of rows, or one row (or scalar) when ``single_row`` is set.
    """
    if fetch_shape is FetchShape.MAPPING:
        data: list[Any] = rowset.as_dicts()
    elif fetch_shape is FetchShape.NUMERIC:
        data = [tuple(row) for row in rowset.rows]
    else:
        data = [row[0] for row in rowset.rows]
    if single_row:
        return data[0] if data else None
    return data
