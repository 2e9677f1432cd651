"""Abstract base class for SQL dialects."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod


class DialectName(enum.StrEnum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"


class Dialect(ABC):
    """Abstract base class defining the SQL dialect interface.

    All database-specific syntax lives behind this interface. Methods
    receive already-rendered SQL fragments and return new fragments.
    """

    name: DialectName

    # --- Identifiers ---

    @abstractmethod
    def quote_char(self) -> str: ...

    def quote_identifier(self, identifier: str) -> str:
        """Quote an identifier, quoting each part of ``schema.table`` separately."""
        q = self.quote_char()
        return ".".join(
            f"{q}{part.replace(q, q + q)}{q}" for part in identifier.split(".")
        )

    # --- Types ---

    @abstractmethod
    def map_data_type(self, generic_type: str) -> str: ...

    @abstractmethod
    def generate_uuid(self) -> str: ...

    # --- Parameters ---

    @abstractmethod
    def get_parameter_placeholder(self, index: int) -> str:
        """Positional placeholder for the 1-based parameter ``index``."""

    @abstractmethod
    def named_placeholder(self, name: str) -> str:
        """Placeholder that binds the named parameter ``name``."""

    # --- Clauses ---

    def build_pagination(self, page: int, limit: int) -> str:
        return self.build_limit_offset(limit, (page - 1) * limit)

    def build_limit_offset(self, limit: int, offset: int) -> str:
        return f"LIMIT {limit} OFFSET {offset}"

    @abstractmethod
    def build_like(self, column: str, value: str) -> str:
        """Case-insensitive match of ``column`` against ``value``."""

    # --- Semi-structured data ---

    @abstractmethod
    def json_extract(self, column: str, path: str) -> str: ...

    @abstractmethod
    def array_contains(self, column: str, value: str) -> str: ...

    # --- Dates ---

    @abstractmethod
    def month_extract(self, expr: str) -> str: ...

    @abstractmethod
    def year_extract(self, expr: str) -> str: ...

    # --- Capabilities ---

    @abstractmethod
    def supports_returning(self) -> bool: ...


def escape_literal(value: str) -> str:
    """Escape a value for embedding inside a single-quoted SQL literal."""
    return value.replace("'", "''")


def lookup_type(type_map: dict[str, str], generic_type: str) -> str:
    t = generic_type.lower()
    return type_map.get(t, t.upper())
