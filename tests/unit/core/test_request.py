"""Unit tests for QueryRequest and FetchShape."""

import pytest

from sqlfacade.core.request import FetchShape, QueryRequest, render_fields
from sqlfacade.exceptions import MalformedRequestError


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, FetchShape.MAPPING),
        (FetchShape.NUMERIC, FetchShape.NUMERIC),
        ("assoc", FetchShape.MAPPING),
        ("num", FetchShape.NUMERIC),
        ("NUMERIC", FetchShape.NUMERIC),
        ("column", FetchShape.COLUMN),
        ("singleColumn", FetchShape.COLUMN),
        ("bogus", FetchShape.MAPPING),
    ],
)
def test_fetch_shape_coerce(value: object, expected: FetchShape) -> None:
    assert FetchShape.coerce(value) is expected  # type: ignore[arg-type]


def test_render_fields() -> None:
    assert render_fields("*") == "*"
    assert render_fields(["id", "name"]) == "id,name"
    assert render_fields("id, name") == "id, name"


def test_render_fields_rejects_empty() -> None:
    with pytest.raises(MalformedRequestError):
        render_fields([])


def test_single_implies_single_row_and_column_shape() -> None:
    request = QueryRequest("users", "COUNT(*)", single=True, fetch_shape="num")

    assert request.single_row is True
    assert request.fetch_shape is FetchShape.COLUMN


def test_cache_ttl_controls_use_cache() -> None:
    assert QueryRequest("users").use_cache is False
    assert QueryRequest("users", cache_ttl=30).use_cache is True
    assert QueryRequest("users", cache_ttl=-1).use_cache is False


def test_limit_is_stringified() -> None:
    assert QueryRequest("users", limit=5).limit == "5"


def test_empty_table_is_malformed() -> None:
    with pytest.raises(MalformedRequestError):
        QueryRequest("")


def test_requests_compare_by_value() -> None:
    assert QueryRequest("users", "*", {"id": 1}) == QueryRequest("users", "*", {"id": 1})
    assert QueryRequest("users", "*", {"id": 1}) != QueryRequest("users", "*", {"id": 2})
