from collections.abc import Mapping, Sequence
from typing import Any, Optional, TypedDict, Union

from typing_extensions import NotRequired, TypeAlias

__all__ = (
    "BatchRow",
    "ColumnDescriptor",
    "DictRow",
    "FieldsT",
    "RowData",
    "StatementParameters",
    "TupleRow",
)

DictRow: TypeAlias = "dict[str, Any]"
"""A row materialized as a column name to value mapping."""
TupleRow: TypeAlias = "tuple[Any, ...]"
"""A row materialized as a positional tuple."""
RowData: TypeAlias = "Mapping[str, Any]"
"""Column to value mapping used by insert and update."""
BatchRow: TypeAlias = "Union[Sequence[Any], Mapping[str, Any]]"
"""One row of an insert batch, positional or keyed by field name."""
FieldsT: TypeAlias = "Union[str, Sequence[str]]"
"""Selected columns: ``"*"``, a comma separated string or a sequence of names."""
StatementParameters: TypeAlias = "Union[dict[str, Any], tuple[Any, ...]]"
"""Bound values, named for ``:name`` placeholders or positional for ``?``."""


class ColumnDescriptor(TypedDict):
    """Column metadata returned by ``list_columns``."""

    name: str
    type: str
    nullable: bool
    default: NotRequired[Optional[Any]]
    primary_key: NotRequired[bool]
