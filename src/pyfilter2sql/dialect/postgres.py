"""PostgreSQL dialect implementation."""

from __future__ import annotations

from pyfilter2sql.dialect._base import Dialect, DialectName, escape_literal, lookup_type

# Generic type name -> PostgreSQL type name
_TYPE_MAP: dict[str, str] = {
    "string": "VARCHAR",
    "text": "TEXT",
    "int": "INTEGER",
    "integer": "INTEGER",
    "bigint": "BIGINT",
    "float": "REAL",
    "double": "DOUBLE PRECISION",
    "decimal": "DECIMAL",
    "boolean": "BOOLEAN",
    "bool": "BOOLEAN",
    "date": "DATE",
    "datetime": "TIMESTAMP",
    "timestamp": "TIMESTAMP",
    "json": "JSONB",
    "uuid": "UUID",
}


class PostgresDialect(Dialect):
    """PostgreSQL dialect: double-quoted identifiers, ``$name`` parameters."""

    name = DialectName.POSTGRESQL

    def quote_char(self) -> str:
        return '"'

    def map_data_type(self, generic_type: str) -> str:
        return lookup_type(_TYPE_MAP, generic_type)

    def generate_uuid(self) -> str:
        return "uuid_generate_v7()"

    def get_parameter_placeholder(self, index: int) -> str:
        return f"${index}"

    def named_placeholder(self, name: str) -> str:
        return f"${name}"

    def build_like(self, column: str, value: str) -> str:
        return f"{column} ILIKE {value}"

    def json_extract(self, column: str, path: str) -> str:
        return f"{column}->>'{escape_literal(path)}'"

    def array_contains(self, column: str, value: str) -> str:
        return f"{column} @> ARRAY['{escape_literal(value)}']"

    def month_extract(self, expr: str) -> str:
        return f"EXTRACT(MONTH FROM {expr})"

    def year_extract(self, expr: str) -> str:
        return f"EXTRACT(YEAR FROM {expr})"

    def supports_returning(self) -> bool:
        return True
