"""Conversion of generated values into database-specific representations."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any
from uuid import UUID


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class Dialect:
    """Default conversions shared by every dialect."""

    @classmethod
    def uuid(cls, value: UUID) -> str:
        """Represent a UUID as its canonical string."""
        return str(value)

    @classmethod
    def date_time(cls, secs_from_epoch: int) -> str:
        """Represent seconds since the epoch as an RFC 3339 UTC timestamp."""
        return datetime.fromtimestamp(secs_from_epoch, tz=timezone.utc).isoformat()

    @classmethod
    def escape_field(cls, field: str) -> str:
        """Escape a field name for use in a query."""
        return field

    @classmethod
    def arg_string(cls, value: Any) -> str:
        """Render a value as a query argument."""
        return _to_json(value)


class DefaultDialect(Dialect):
    """The dialect for stores that take values as they are."""


def _sql_arg_string(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, str):
        return f"'{value}'"
    if isinstance(value, dict):
        return f"'{_to_json(value)}'"
    return _to_json(value)


def _sql_create_clause(dialect: type[Dialect], value: Any) -> tuple[str, str]:
    if not isinstance(value, dict):
        return "", ""
    fields = ", ".join(dialect.escape_field(f) for f in value)
    values = ", ".join(dialect.arg_string(v) for v in value.values())
    return fields, values


def _sql_update_clause(dialect: type[Dialect], value: Any) -> str:
    if not isinstance(value, dict):
        return ""
    return ", ".join(
        f"{dialect.escape_field(f)} = {dialect.arg_string(v)}" for f, v in value.items()
    )


class AnsiSqlDialect(Dialect):
    """ANSI SQL: double-quoted identifiers."""

    @classmethod
    def escape_field(cls, field: str) -> str:
        return f'"{field}"'

    @classmethod
    def arg_string(cls, value: Any) -> str:
        return _sql_arg_string(value)

    @classmethod
    def create_clause(cls, value: Any) -> tuple[str, str]:
        """Return the field list and value list for an insert."""
        return _sql_create_clause(cls, value)

    @classmethod
    def update_clause(cls, value: Any) -> str:
        """Return the assignment list for an update."""
        return _sql_update_clause(cls, value)


class MySqlDialect(Dialect):
    """MySQL: backtick-quoted identifiers."""

    @classmethod
    def escape_field(cls, field: str) -> str:
        return f"`{field}`"

    @classmethod
    def arg_string(cls, value: Any) -> str:
        return _sql_arg_string(value)

    @classmethod
    def create_clause(cls, value: Any) -> tuple[str, str]:
        """Return the field list and value list for an insert."""
        return _sql_create_clause(cls, value)

    @classmethod
    def update_clause(cls, value: Any) -> str:
        """Return the assignment list for an update."""
        return _sql_update_clause(cls, value)


def _flatten_into(out: dict[str, Any], prefix: str, value: Any) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            _flatten_into(out, f"{prefix}_{key}" if prefix else key, item)
    elif isinstance(value, list):
        for index, item in enumerate(value):
            _flatten_into(out, f"{prefix}_{index}", item)
    else:
        out[prefix] = value


def flatten(value: Any) -> dict[str, Any]:
    """Flatten a nested object into one level, joining keys and indices with '_'.

    Empty arrays and objects are dropped.
    """
    if not isinstance(value, dict):
        raise ValueError("only JSON objects can be flattened")
    out: dict[str, Any] = {}
    _flatten_into(out, "", value)
    return out


class Neo4jDialect(Dialect):
    """Cypher: values are flattened into node properties."""

    @classmethod
    def create_clause(cls, value: Any) -> str:
        """Return the property map body for a node creation."""
        return ", ".join(
            f"{cls.escape_field(f)}: {cls.arg_string(v)}" for f, v in flatten(value).items()
        )

    @classmethod
    def update_clause(cls, value: Any) -> str:
        """Return the property assignments for a node update."""
        return ", ".join(
            f"r.{cls.escape_field(f)} = {cls.arg_string(v)}" for f, v in flatten(value).items()
        )