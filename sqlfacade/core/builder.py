"""SQL text rendering for the facade operations.

``QueryBuilder`` is pure: it renders statement text and bound values from a
structured request and never touches a connection. Identifiers (tables,
columns, raw fragments) are inserted verbatim; only values are bound.

Placeholder styles:

- select, insert, update and delete use named ``:name`` placeholders.
- insert-batch uses positional ``?`` placeholders, one group per row.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

from mypy_extensions import mypyc_attr

from sqlfacade.core.filters import FiltersInput, NamedEquals, bind_name, normalize_filters, partition_filters
from sqlfacade.core.request import QueryRequest, render_fields
from sqlfacade.exceptions import MalformedRequestError, MissingParameterError, ParameterCollisionError

if TYPE_CHECKING:
    from sqlfacade.core.filters import FilterT
    from sqlfacade.typing import BatchRow, RowData, StatementParameters

__all__ = ("CompiledQuery", "QueryBuilder")


class CompiledQuery(NamedTuple):
    """Rendered statement text and its bound values."""

    sql: str
    parameters: "StatementParameters"


def _named_parameters(filters: "Iterable[NamedEquals]") -> "dict[str, Any]":
    return {item.bind_name: item.value for item in filters}


def _where_clause(filters: "tuple[FilterT, ...]", join: Optional[str] = None) -> "tuple[str, list[NamedEquals]]":
    """Build the WHERE clause body.

    Raw fragments come first, then named equality filters, then the join
    condition, all joined with ``AND`` and no added parentheses.
    """
    raw, named = partition_filters(filters)
    clauses: list[str] = []
    if raw:
        clauses.append(" AND ".join(raw))
    if named:
        clauses.append(" AND ".join(item.render() for item in named))
    if join:
        clauses.append(join)
    return " AND ".join(clauses), named


def _check_bind_names(columns: "Iterable[str]") -> None:
    seen: dict[str, str] = {}
    for column in columns:
        name = bind_name(column)
        previous = seen.get(name)
        if previous is not None:
            msg = f"Columns {previous!r} and {column!r} both bind as :{name}"
            raise ParameterCollisionError(msg)
        seen[name] = column


@mypyc_attr(allow_interpreted_subclasses=False)
class QueryBuilder:
    """Render select, insert, insert-batch, update and delete statements."""

    __slots__ = ()

    def select(self, request: QueryRequest) -> CompiledQuery:
        """Render a select.

        Args:
            request: The read request.

        Raises:
            ParameterCollisionError: Two filter columns share a bind name.

        Returns:
            ``SELECT <fields> FROM <table> [WHERE] [GROUP BY] [ORDER BY] [LIMIT]`` and the named bindings.
        """
        where, named = _where_clause(request.filters, request.join)
        parts = [f"SELECT {render_fields(request.fields)} FROM {request.table}"]
        if where:
            parts.append(f"WHERE {where}")
        if request.group_by:
            parts.append(f"GROUP BY {request.group_by}")
        if request.order_by:
            parts.append(f"ORDER BY {request.order_by}")
        if request.limit:
            parts.append(f"LIMIT {request.limit}")
        return CompiledQuery(" ".join(parts), _named_parameters(named))

    def insert(self, table: str, data: "RowData") -> CompiledQuery:
        """Render a single row insert.

        Column and placeholder lists come from the same ordered key set so
        they always line up.
        """
        if not data:
            msg = f"Cannot insert an empty row into {table}"
            raise MalformedRequestError(msg)
        columns = list(data)
        _check_bind_names(columns)
        placeholders = ",".join(f":{bind_name(column)}" for column in columns)
        sql = f"INSERT INTO {table} ({','.join(columns)}) VALUES ({placeholders})"
        return CompiledQuery(sql, {bind_name(column): data[column] for column in columns})

    def insert_batch(self, table: str, fields: "Sequence[str]", rows: "Sequence[BatchRow]") -> CompiledQuery:
        """Render a multi-row insert with positional placeholders.

        Args:
            table: Target table.
            fields: Column names, in placeholder order.
            rows: Positional sequences matching ``fields`` or mappings keyed by field name.

        Raises:
            MalformedRequestError: No fields, no rows or a row of the wrong width.
            MissingParameterError: A mapping row lacks one of ``fields``.

        Returns:
            Statement text and the row-major flattened values.
        """
        field_list = [fields] if isinstance(fields, str) else list(fields)
        if not field_list:
            msg = f"Cannot insert a batch into {table} without fields"
            raise MalformedRequestError(msg)
        if not rows:
            msg = f"Cannot insert an empty batch into {table}"
            raise MalformedRequestError(msg)

        width = len(field_list)
        group = "(" + ",".join("?" for _ in range(width)) + ")"
        values: list[Any] = []
        for index, row in enumerate(rows):
            if isinstance(row, Mapping):
                missing = [name for name in field_list if name not in row]
                if missing:
                    msg = f"Batch row {index} has no value for {', '.join(missing)}"
                    raise MissingParameterError(msg)
                values.extend(row[name] for name in field_list)
                continue
            if isinstance(row, (str, bytes)) or len(row) != width:
                msg = f"Batch row {index} does not have {width} values"
                raise MalformedRequestError(msg)
            values.extend(row)

        sql = f"INSERT INTO {table} ({','.join(field_list)}) VALUES {','.join(group for _ in rows)}"
        return CompiledQuery(sql, tuple(values))

    def update(
        self, table: str, data: "RowData", match_columns: "Optional[Sequence[str]]" = None
    ) -> CompiledQuery:
        """Render an update.

        Every key of ``data`` is assigned. Rows are matched on ``id`` unless
        ``match_columns`` names other columns; the WHERE placeholders draw on
        the same bound values as the SET clause.

        Raises:
            MissingParameterError: A match column has no value in ``data``.
        """
        if not data:
            msg = f"Cannot update {table} without values"
            raise MalformedRequestError(msg)
        columns = list(data)
        _check_bind_names(columns)

        if isinstance(match_columns, str):
            match_columns = [match_columns]
        match = list(match_columns) if match_columns else ["id"]
        missing = [name for name in match if name not in data]
        if missing:
            msg = f"Match columns {', '.join(missing)} have no value in the update data for {table}"
            raise MissingParameterError(msg)

        assignments = ",".join(f"{column} = :{bind_name(column)}" for column in columns)
        where = " AND ".join(f"{column} = :{bind_name(column)}" for column in match)
        sql = f"UPDATE {table} SET {assignments} WHERE {where}"
        return CompiledQuery(sql, {bind_name(column): data[column] for column in columns})

    def delete(self, table: str, filters: "FiltersInput") -> CompiledQuery:
        """Render a delete.

        Filters partition as in :meth:`select`; named values are bound.

        Raises:
            MalformedRequestError: No filters were given.
        """
        where, named = _where_clause(normalize_filters(filters))
        if not where:
            msg = f"Refusing to delete from {table} without filters"
            raise MalformedRequestError(msg)
        return CompiledQuery(f"DELETE FROM {table} WHERE {where}", _named_parameters(named))
