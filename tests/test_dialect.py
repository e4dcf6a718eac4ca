import json
import uuid
from datetime import datetime

import pytest

from crudbench.dialect import (
    AnsiSqlDialect,
    DefaultDialect,
    MySqlDialect,
    Neo4jDialect,
    flatten,
)


@pytest.mark.parametrize("value", [None, True, 3, 2.5, "text", [1, "a"], {"k": {"n": [1]}}])
def test_default_arg_string_round_trip(value):
    assert json.loads(DefaultDialect.arg_string(value)) == value


def test_default_escape_field_is_identity():
    assert DefaultDialect.escape_field("integer") == "integer"


def test_uuid_is_canonical_string():
    u = uuid.uuid4()
    assert DefaultDialect.uuid(u) == str(u)
    assert uuid.UUID(DefaultDialect.uuid(u)) == u


def test_date_time_epoch():
    assert DefaultDialect.date_time(0) == "1970-01-01T00:00:00+00:00"


def test_date_time_round_trip():
    stamp = DefaultDialect.date_time(1_700_000_000)
    assert datetime.fromisoformat(stamp).timestamp() == 1_700_000_000


def test_ansi_escape_field_wraps_in_double_quotes():
    escaped = AnsiSqlDialect.escape_field("text")
    assert escaped[0] == escaped[-1] == '"'
    assert escaped[1:-1] == "text"


def test_mysql_escape_field_wraps_in_backticks():
    escaped = MySqlDialect.escape_field("text")
    assert escaped[0] == escaped[-1] == "`"
    assert escaped[1:-1] == "text"


@pytest.mark.parametrize("dialect", [AnsiSqlDialect, MySqlDialect])
def test_sql_string_argument_is_quoted(dialect):
    assert dialect.arg_string("abc") == "'abc'"


@pytest.mark.parametrize("dialect", [AnsiSqlDialect, MySqlDialect])
def test_sql_object_argument_is_quoted_json(dialect):
    obj = {"text": "a", "array": [1, 2]}
    rendered = dialect.arg_string(obj)
    assert rendered[0] == rendered[-1] == "'"
    assert json.loads(rendered[1:-1]) == obj


@pytest.mark.parametrize("dialect", [AnsiSqlDialect, MySqlDialect])
def test_sql_scalar_and_array_arguments_are_json(dialect):
    assert dialect.arg_string(None) == "null"
    assert json.loads(dialect.arg_string(True)) is True
    assert json.loads(dialect.arg_string(42)) == 42
    assert json.loads(dialect.arg_string(["a", 1])) == ["a", 1]


@pytest.mark.parametrize("dialect", [AnsiSqlDialect, MySqlDialect])
def test_sql_create_clause(dialect):
    value = {"text": "hello", "integer": 7}
    fields, values = dialect.create_clause(value)
    assert fields.split(", ") == [dialect.escape_field(f) for f in value]
    assert values.split(", ") == [dialect.arg_string(v) for v in value.values()]


@pytest.mark.parametrize("dialect", [AnsiSqlDialect, MySqlDialect])
def test_sql_update_clause(dialect):
    value = {"text": "hello", "integer": 7}
    parts = dialect.update_clause(value).split(", ")
    assert [p.partition(" = ")[0] for p in parts] == [dialect.escape_field(f) for f in value]
    assert [p.partition(" = ")[2] for p in parts] == [
        dialect.arg_string(v) for v in value.values()
    ]


def test_sql_clauses_of_non_object_are_empty():
    assert AnsiSqlDialect.create_clause([1, 2]) == ("", "")
    assert MySqlDialect.update_clause("text") == ""


def test_flatten_nested_object():
    value = {"text": "a", "nested": {"text": "b", "array": ["x", "y"]}}
    assert flatten(value) == {
        "text": "a",
        "nested_text": "b",
        "nested_array_0": "x",
        "nested_array_1": "y",
    }


def test_flatten_drops_empty_containers():
    assert flatten({"a": [], "b": {}, "c": 1}) == {"c": 1}


def test_flatten_rejects_non_object():
    with pytest.raises(ValueError):
        flatten([1, 2])


def test_neo4j_create_clause_uses_flattened_keys():
    value = {"text": "a", "nested": {"n": 1, "array": [True]}}
    parts = Neo4jDialect.create_clause(value).split(", ")
    flat = flatten(value)
    assert [p.partition(": ")[0] for p in parts] == list(flat)
    assert [json.loads(p.partition(": ")[2]) for p in parts] == list(flat.values())


def test_neo4j_update_clause_targets_node():
    value = {"text": "a", "nested": {"n": 1}}
    parts = Neo4jDialect.update_clause(value).split(", ")
    assert all(p.startswith("r.") for p in parts)
    assert [p[2:].partition(" = ")[0] for p in parts] == list(flatten(value))