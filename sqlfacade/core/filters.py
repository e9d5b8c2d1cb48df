"""Filter conditions for WHERE clause construction.

Two filter variants exist:

- ``NamedEquals``: ``column = :bindname`` with the value bound as a parameter.
- ``RawPredicate``: a free-form boolean expression inserted verbatim. This is
  an explicit escape hatch and is never parameterized.

Callers may pass either a sequence of these objects or the legacy mapping
form, where string keys are named filters and integer keys are raw
predicates.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Union

from mypy_extensions import mypyc_attr

from sqlfacade.exceptions import MalformedRequestError, ParameterCollisionError

__all__ = (
    "FilterT",
    "FiltersInput",
    "NamedEquals",
    "RawPredicate",
    "bind_name",
    "normalize_filters",
    "partition_filters",
)


def bind_name(column: str) -> str:
    """Return the placeholder name for ``column``.

    Periods are stripped because most drivers reject them in named
    placeholders, so ``users.id`` binds as ``:usersid``.
    """
    return column.replace(".", "")


@mypyc_attr(allow_interpreted_subclasses=False)
class NamedEquals:
    """Equality filter bound as a named parameter."""

    __slots__ = ("column", "value")

    def __init__(self, column: str, value: Any) -> None:
        if not column:
            msg = "Filter column name must not be empty"
            raise MalformedRequestError(msg)
        self.column = column
        self.value = value

    @property
    def bind_name(self) -> str:
        return bind_name(self.column)

    def render(self) -> str:
        return f"{self.column} = :{self.bind_name}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamedEquals):
            return NotImplemented
        return self.column == other.column and self.value == other.value

    def __hash__(self) -> int:
        return hash((NamedEquals, self.column, repr(self.value)))

    def __repr__(self) -> str:
        return f"NamedEquals({self.column!r}, {self.value!r})"


@mypyc_attr(allow_interpreted_subclasses=False)
class RawPredicate:
    """Boolean expression inserted into the WHERE clause as-is.

    The caller is responsible for its safety and for parenthesizing mixed
    ``AND``/``OR`` expressions.
    """

    __slots__ = ("text",)

    def __init__(self, text: str) -> None:
        self.text = text

    def render(self) -> str:
        return self.text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RawPredicate):
            return NotImplemented
        return self.text == other.text

    def __hash__(self) -> int:
        return hash((RawPredicate, self.text))

    def __repr__(self) -> str:
        return f"RawPredicate({self.text!r})"


FilterT = Union[NamedEquals, RawPredicate]
FiltersInput = Union[Mapping[Union[str, int], Any], Iterable[FilterT], None]


def normalize_filters(filters: "FiltersInput") -> "tuple[FilterT, ...]":
    """Convert any accepted filter input into a tuple of tagged filters.

    Raw mapping entries whose value is None are skipped.

    Args:
        filters: ``None``, a legacy mapping or an iterable of filter objects.

    Raises:
        MalformedRequestError: If a mapping key or sequence item is not a supported type.

    Returns:
        Filters in input order.
    """
    if filters is None:
        return ()
    if isinstance(filters, Mapping):
        normalized: list[FilterT] = []
        for key, value in filters.items():
            if isinstance(key, bool):
                msg = f"Unsupported filter key: {key!r}"
                raise MalformedRequestError(msg)
            if isinstance(key, int):
                if value is not None:
                    normalized.append(RawPredicate(str(value)))
            elif isinstance(key, str):
                normalized.append(NamedEquals(key, value))
            else:
                msg = f"Unsupported filter key: {key!r}"
                raise MalformedRequestError(msg)
        return tuple(normalized)
    if isinstance(filters, str):
        msg = "Filters must be a mapping or a sequence of filters, not a string; wrap raw SQL in RawPredicate"
        raise MalformedRequestError(msg)

    result: list[FilterT] = []
    for item in filters:
        if not isinstance(item, (NamedEquals, RawPredicate)):
            msg = f"Unsupported filter: {item!r}"
            raise MalformedRequestError(msg)
        result.append(item)
    return tuple(result)


def partition_filters(filters: "tuple[FilterT, ...]") -> "tuple[list[str], list[NamedEquals]]":
    """Split filters into raw fragments and named equality filters.

    Empty raw fragments are dropped.

    Raises:
        ParameterCollisionError: If two different columns share a bind name.

    Returns:
        ``(raw_fragments, named_filters)`` each in input order.
    """
    raw: list[str] = []
    named: list[NamedEquals] = []
    seen: dict[str, str] = {}
    for item in filters:
        if isinstance(item, RawPredicate):
            if item.text != "":
                raw.append(item.text)
            continue
        name = item.bind_name
        previous = seen.get(name)
        if previous is not None:
            msg = f"Filter columns {previous!r} and {item.column!r} both bind as :{name}"
            raise ParameterCollisionError(msg)
        seen[name] = item.column
        named.append(item)
    return raw, named
