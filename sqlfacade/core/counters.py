"""Per-operation execution counters."""

from enum import Enum
from typing import Optional, Union

__all__ = ("OperationCounters", "OperationKind")


class OperationKind(str, Enum):
    """Counted operation kinds."""

    SELECT = "select"
    SQL = "sql"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    CACHE_HIT = "cache-hit"

    def __str__(self) -> str:
        return self.value


class OperationCounters:
    """Monotonic counters keyed by ``OperationKind``.

    ``select`` counts statements that reached the driver; reads served from
    the cache count as ``cache-hit`` instead.
    """

    __slots__ = ("_counts",)

    def __init__(self) -> None:
        self._counts: dict[OperationKind, int] = dict.fromkeys(OperationKind, 0)

    def increment(self, kind: "Union[OperationKind, str]") -> int:
        key = OperationKind(kind)
        self._counts[key] += 1
        return self._counts[key]

    def reset(self) -> None:
        for key in self._counts:
            self._counts[key] = 0

    def get(self, kind: "Optional[Union[OperationKind, str]]" = None) -> "Union[int, dict[str, int]]":
        """Return one counter, or a copy of all counters.

        ``None``, ``"all"`` and unknown kinds return the full mapping.
        """
        if kind is None or kind == "all":
            return self.as_dict()
        try:
            key = OperationKind(kind)
        except ValueError:
            return self.as_dict()
        return self._counts[key]

    def as_dict(self) -> "dict[str, int]":
        return {key.value: value for key, value in self._counts.items()}

    def __getitem__(self, kind: "Union[OperationKind, str]") -> int:
        return self._counts[OperationKind(kind)]

    def __repr__(self) -> str:
        return f"OperationCounters({self.as_dict()!r})"
