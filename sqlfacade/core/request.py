"""Read request description."""

from collections.abc import Sequence
from enum import Enum
from typing import Any, Optional

from mypy_extensions import mypyc_attr

from sqlfacade.core.filters import FiltersInput, FilterT, normalize_filters
from sqlfacade.exceptions import MalformedRequestError

__all__ = ("FetchShape", "QueryRequest", "render_fields")


class FetchShape(str, Enum):
    """How a result row is materialized."""

    MAPPING = "assoc"
    NUMERIC = "num"
    COLUMN = "column"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def coerce(cls, value: "FetchShape | str | None") -> "FetchShape":
        """Resolve a shape from an enum member or one of its names or values.

        Unknown names fall back to ``MAPPING``.
        """
        if value is None:
            return cls.MAPPING
        if isinstance(value, FetchShape):
            return value
        lowered = value.lower()
        for member in cls:
            if lowered in {member.value, member.name.lower()}:
                return member
        if lowered == "singlecolumn":
            return cls.COLUMN
        return cls.MAPPING


def render_fields(fields: "str | Sequence[str]") -> str:
    """Render the select list, joining sequences with commas."""
    if isinstance(fields, str):
        rendered = fields
    else:
        rendered = ",".join(fields)
    if not rendered.strip():
        msg = "At least one field must be selected"
        raise MalformedRequestError(msg)
    return rendered


@mypyc_attr(allow_interpreted_subclasses=False)
class QueryRequest:
    """Structured description of a select.

    Args:
        table: Table name, inserted as-is.
        fields: ``"*"``, a comma separated string or a sequence of column names.
        filters: Legacy filter mapping or a sequence of ``NamedEquals``/``RawPredicate``.
        join: Join condition ANDed onto the WHERE clause.
        order_by: ORDER BY fragment.
        group_by: GROUP BY fragment.
        limit: LIMIT fragment, e.g. ``"10"`` or ``"0,5"``.
        single_row: Return the first row instead of a list.
        single: Return the first column of the first row. Implies ``single_row``
            and ``FetchShape.COLUMN``.
        fetch_shape: Row materialization.
        cache_ttl: Cache expiry in seconds, ``0`` disables caching.
    """

    __slots__ = (
        "cache_ttl",
        "fetch_shape",
        "fields",
        "filters",
        "group_by",
        "join",
        "limit",
        "order_by",
        "single",
        "single_row",
        "table",
    )

    def __init__(
        self,
        table: str,
        fields: "str | Sequence[str]" = "*",
        filters: "FiltersInput" = None,
        *,
        join: Optional[str] = None,
        order_by: Optional[str] = None,
        group_by: Optional[str] = None,
        limit: "Optional[str | int]" = None,
        single_row: bool = False,
        single: bool = False,
        fetch_shape: "FetchShape | str | None" = None,
        cache_ttl: int = 0,
    ) -> None:
        if not table:
            msg = "Table name must not be empty"
            raise MalformedRequestError(msg)
        self.table = table
        self.fields = fields
        self.filters: tuple[FilterT, ...] = normalize_filters(filters)
        self.join = join
        self.order_by = order_by
        self.group_by = group_by
        self.limit = None if limit is None else str(limit)
        self.single = bool(single)
        self.single_row = bool(single_row) or self.single
        self.fetch_shape = FetchShape.COLUMN if self.single else FetchShape.coerce(fetch_shape)
        self.cache_ttl = int(cache_ttl)

    @property
    def use_cache(self) -> bool:
        return self.cache_ttl > 0

    def __repr__(self) -> str:
        return (
            f"QueryRequest(table={self.table!r}, fields={self.fields!r}, filters={self.filters!r}, "
            f"single_row={self.single_row!r}, fetch_shape={self.fetch_shape!s}, cache_ttl={self.cache_ttl!r})"
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, QueryRequest):
            return NotImplemented
        return all(getattr(self, slot) == getattr(other, slot) for slot in self.__slots__)

    __hash__ = None  # type: ignore[assignment]
