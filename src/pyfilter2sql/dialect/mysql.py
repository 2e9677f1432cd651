"""MySQL dialect implementation."""

from __future__ import annotations

from pyfilter2sql.dialect._base import Dialect, DialectName, escape_literal, lookup_type

# Generic type name -> MySQL type name
_TYPE_MAP: dict[str, str] = {
    "string": "VARCHAR",
    "text": "TEXT",
    "int": "INT",
    "integer": "INT",
    "bigint": "BIGINT",
    "float": "FLOAT",
    "double": "DOUBLE",
    "decimal": "DECIMAL",
    "boolean": "TINYINT(1)",
    "bool": "TINYINT(1)",
    "date": "DATE",
    "datetime": "DATETIME",
    "timestamp": "DATETIME",
    "json": "JSON",
    "uuid": "CHAR(36)",
}


class MySQLDialect(Dialect):
    """MySQL dialect: backtick identifiers, ``:name`` parameters, no RETURNING."""

    name = DialectName.MYSQL

    def quote_char(self) -> str:
        return "`"

    def map_data_type(self, generic_type: str) -> str:
        return lookup_type(_TYPE_MAP, generic_type)

    def generate_uuid(self) -> str:
        # MySQL 8.0+
        return "UUID()"

    def get_parameter_placeholder(self, index: int) -> str:
        return "?"

    def named_placeholder(self, name: str) -> str:
        return f":{name}"

    def build_like(self, column: str, value: str) -> str:
        # LIKE sensitivity depends on collation, so lower both sides
        return f"LOWER({column}) LIKE LOWER({value})"

    def json_extract(self, column: str, path: str) -> str:
        return f"JSON_UNQUOTE(JSON_EXTRACT({column}, '$.{escape_literal(path)}'))"

    def array_contains(self, column: str, value: str) -> str:
        # No native arrays; stored as JSON
        return f"JSON_CONTAINS({column}, '\"{escape_literal(value)}\"')"

    def month_extract(self, expr: str) -> str:
        return f"MONTH({expr})"

    def year_extract(self, expr: str) -> str:
        return f"YEAR({expr})"

    def supports_returning(self) -> bool:
        return False
