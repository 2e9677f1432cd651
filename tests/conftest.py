"""Shared test fixtures."""

import re

import pytest

from pyfilter2sql.dialect.mysql import MySQLDialect
from pyfilter2sql.dialect.postgres import PostgresDialect
from pyfilter2sql.schema import ColumnDescriptor


@pytest.fixture
def pg_dialect():
    return PostgresDialect()


@pytest.fixture
def mysql_dialect():
    return MySQLDialect()


ALL_DIALECTS = [
    pytest.param(PostgresDialect(), id="postgres"),
    pytest.param(MySQLDialect(), id="mysql"),
]

_PLACEHOLDER_RE = re.compile(r"[$:]([A-Za-z_][A-Za-z0-9_]*)")


def placeholder_names(sql: str) -> list[str]:
    """Named placeholders ($name or :name) in order of appearance."""
    return _PLACEHOLDER_RE.findall(sql)


def assert_params_match(query) -> None:
    """Every placeholder has exactly one parameter and vice versa."""
    names = placeholder_names(query.sql)
    assert len(names) == len(set(names)), f"duplicate placeholders in {query.sql!r}"
    assert set(names) == set(query.params)


@pytest.fixture
def user_columns():
    return [
        ColumnDescriptor(name="id", data_type="integer", is_nullable=False, is_primary_key=True),
        ColumnDescriptor(name="name", data_type="varchar"),
        ColumnDescriptor(name="email", data_type="character varying", is_unique=True),
        ColumnDescriptor(name="age", data_type="integer", min_value=0, max_value=150),
        ColumnDescriptor(
            name="status",
            data_type="varchar",
            enum_values=("active", "inactive", "pending"),
        ),
        ColumnDescriptor(name="is_admin", data_type="boolean"),
        ColumnDescriptor(name="created_at", data_type="timestamp"),
        ColumnDescriptor(name="password_hash", data_type="text", is_filterable=False),
        ColumnDescriptor(name="settings", data_type="jsonb"),
    ]
