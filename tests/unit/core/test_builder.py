"""Unit tests for QueryBuilder statement rendering."""

import pytest

from sqlfacade.core.builder import CompiledQuery, QueryBuilder
from sqlfacade.core.filters import NamedEquals, RawPredicate
from sqlfacade.core.request import QueryRequest
from sqlfacade.exceptions import MalformedRequestError, MissingParameterError, ParameterCollisionError

builder = QueryBuilder()


def test_select_with_order_and_limit_has_no_parameters() -> None:
    request = QueryRequest("Users", "*", limit="0,5", order_by="last_name ASC,first_name ASC")

    compiled = builder.select(request)

    assert compiled.sql == "SELECT * FROM Users ORDER BY last_name ASC,first_name ASC LIMIT 0,5"
    assert compiled.parameters == {}


def test_select_named_filters_bind_one_parameter_per_key() -> None:
    request = QueryRequest("users", ["id", "email"], {"first_name": "John", "last_name": "Doe"})

    compiled = builder.select(request)

    assert compiled.sql == "SELECT id,email FROM users WHERE first_name = :first_name AND last_name = :last_name"
    assert compiled.parameters == {"first_name": "John", "last_name": "Doe"}


def test_select_raw_fragments_come_before_named_filters() -> None:
    request = QueryRequest("users", "*", {"first_name": "John", 0: "created > 10405833", 1: "age < 40"})

    compiled = builder.select(request)

    assert compiled.sql == (
        "SELECT * FROM users WHERE created > 10405833 AND age < 40 AND first_name = :first_name"
    )
    assert compiled.parameters == {"first_name": "John"}


def test_select_strips_dots_from_bind_names() -> None:
    request = QueryRequest("users u, orders o", "u.id", {"u.id": 7})

    compiled = builder.select(request)

    assert compiled.sql == "SELECT u.id FROM users u, orders o WHERE u.id = :uid"
    assert compiled.parameters == {"uid": 7}


def test_select_rejects_bind_name_collisions() -> None:
    request = QueryRequest("t", "*", {"a.b": 1, "ab": 2})

    with pytest.raises(ParameterCollisionError):
        builder.select(request)


def test_select_null_raw_entry_adds_no_clause() -> None:
    assert builder.select(QueryRequest("users", "*", {0: None})).sql == "SELECT * FROM users"


def test_select_join_is_anded_onto_filters() -> None:
    request = QueryRequest("users u, orders o", "*", {"u.id": 1}, join="o.user_id = u.id")

    compiled = builder.select(request)

    assert compiled.sql == "SELECT * FROM users u, orders o WHERE u.id = :uid AND o.user_id = u.id"


def test_select_join_without_filters_forms_where_clause() -> None:
    request = QueryRequest("users u, orders o", "*", join="o.user_id = u.id")

    compiled = builder.select(request)

    assert compiled.sql == "SELECT * FROM users u, orders o WHERE o.user_id = u.id"
    assert compiled.parameters == {}


def test_select_clause_order() -> None:
    request = QueryRequest(
        "orders", "user_id,COUNT(*)", {"status": "paid"}, group_by="user_id", order_by="user_id", limit=10
    )

    compiled = builder.select(request)

    assert compiled.sql == (
        "SELECT user_id,COUNT(*) FROM orders WHERE status = :status GROUP BY user_id ORDER BY user_id LIMIT 10"
    )


def test_select_skips_empty_raw_fragments() -> None:
    request = QueryRequest("users", "*", [RawPredicate(""), NamedEquals("id", 3)])

    assert builder.select(request).sql == "SELECT * FROM users WHERE id = :id"


def test_tagged_and_mapping_filters_render_identically() -> None:
    legacy = QueryRequest("users", "*", {0: "age > 18", "email": "a@example.com"})
    tagged = QueryRequest("users", "*", [RawPredicate("age > 18"), NamedEquals("email", "a@example.com")])

    assert builder.select(legacy) == builder.select(tagged)


def test_insert_columns_and_placeholders_line_up() -> None:
    compiled = builder.insert("users", {"first_name": "Ada", "last_name": "Lovelace"})

    assert compiled.sql == "INSERT INTO users (first_name,last_name) VALUES (:first_name,:last_name)"
    assert compiled.parameters == {"first_name": "Ada", "last_name": "Lovelace"}


def test_insert_empty_row_is_malformed() -> None:
    with pytest.raises(MalformedRequestError):
        builder.insert("users", {})


def test_insert_rejects_bind_name_collisions() -> None:
    with pytest.raises(ParameterCollisionError):
        builder.insert("t", {"a.b": 1, "ab": 2})


def test_insert_batch_positional_rows() -> None:
    compiled = builder.insert_batch("users", ["first_name", "last_name"], [("Ada", "Lovelace"), ("Alan", "Turing")])

    assert compiled.sql == "INSERT INTO users (first_name,last_name) VALUES (?,?),(?,?)"
    assert compiled.parameters == ("Ada", "Lovelace", "Alan", "Turing")


def test_insert_batch_mapping_rows_follow_field_order() -> None:
    compiled = builder.insert_batch(
        "users", ["first_name", "last_name"], [{"last_name": "Lovelace", "first_name": "Ada"}]
    )

    assert compiled.parameters == ("Ada", "Lovelace")


@pytest.mark.parametrize(
    "rows",
    [
        pytest.param([], id="empty"),
        pytest.param([("Ada",)], id="short-row"),
        pytest.param([("Ada", "Lovelace", "extra")], id="long-row"),
    ],
)
def test_insert_batch_malformed(rows: list) -> None:
    with pytest.raises(MalformedRequestError):
        builder.insert_batch("users", ["first_name", "last_name"], rows)


def test_insert_batch_mapping_row_missing_field() -> None:
    with pytest.raises(MissingParameterError):
        builder.insert_batch("users", ["first_name", "last_name"], [{"first_name": "Ada"}])


def test_update_defaults_to_id_match() -> None:
    compiled = builder.update("users", {"id": 5, "first_name": "A"})

    assert compiled.sql == "UPDATE users SET id = :id,first_name = :first_name WHERE id = :id"
    assert compiled.parameters == {"id": 5, "first_name": "A"}


def test_update_explicit_id_match_renders_same_sql() -> None:
    data = {"id": 5, "first_name": "A"}

    assert builder.update("users", data) == builder.update("users", data, ["id"])


def test_update_multiple_match_columns() -> None:
    compiled = builder.update("users", {"first_name": "A", "last_name": "B", "age": 3}, ["first_name", "last_name"])

    assert compiled.sql.endswith("WHERE first_name = :first_name AND last_name = :last_name")


def test_update_rejects_bind_name_collisions() -> None:
    with pytest.raises(ParameterCollisionError):
        builder.update("t", {"id": 1, "a.b": 1, "ab": 2})


def test_update_missing_match_value() -> None:
    with pytest.raises(MissingParameterError):
        builder.update("users", {"first_name": "A"})


def test_delete_binds_named_values() -> None:
    compiled = builder.delete("users", {0: "age > 90", "last_name": "O'Brien"})

    assert compiled == CompiledQuery("DELETE FROM users WHERE age > 90 AND last_name = :last_name", {"last_name": "O'Brien"})


@pytest.mark.parametrize("filters", [None, {}, [RawPredicate("")]])
def test_delete_without_filters_is_refused(filters: object) -> None:
    with pytest.raises(MalformedRequestError):
        builder.delete("users", filters)  # type: ignore[arg-type]
