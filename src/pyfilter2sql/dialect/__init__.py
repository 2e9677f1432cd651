"""SQL dialect system for query generation."""

from __future__ import annotations

from pyfilter2sql._errors import ERR_MSG_UNSUPPORTED_DIALECT, UnsupportedDialectError
from pyfilter2sql.dialect._base import Dialect, DialectName
from pyfilter2sql.dialect.mysql import MySQLDialect
from pyfilter2sql.dialect.postgres import PostgresDialect

__all__ = [
    "Dialect",
    "DialectName",
    "MySQLDialect",
    "PostgresDialect",
    "get_dialect",
    "resolve_dialect",
]

_REGISTRY: dict[DialectName, type[Dialect]] = {
    DialectName.POSTGRESQL: PostgresDialect,
    DialectName.MYSQL: MySQLDialect,
}

_ALIASES: dict[str, DialectName] = {
    "postgres": DialectName.POSTGRESQL,
    "pg": DialectName.POSTGRESQL,
    "mariadb": DialectName.MYSQL,
}


def get_dialect(name: str | DialectName) -> Dialect:
    """Get a dialect instance by name.

    Args:
        name: Dialect name (``"postgresql"`` or ``"mysql"``, plus the
            aliases ``"postgres"``, ``"pg"`` and ``"mariadb"``).

    Returns:
        A Dialect instance.

    Raises:
        UnsupportedDialectError: If the dialect name is unknown.
    """
    key = str(name).lower()
    dialect_name = _ALIASES.get(key)
    if dialect_name is None:
        try:
            dialect_name = DialectName(key)
        except ValueError as e:
            raise UnsupportedDialectError(
                ERR_MSG_UNSUPPORTED_DIALECT,
                f"unknown dialect: {name!r}. "
                f"Available: {', '.join(sorted(_REGISTRY))}",
                wrapped=e,
            ) from e
    return _REGISTRY[dialect_name]()


def resolve_dialect(dialect: Dialect | str | None) -> Dialect:
    """Accept a dialect instance, a dialect name, or None (PostgreSQL)."""
    if dialect is None:
        return PostgresDialect()
    if isinstance(dialect, Dialect):
        return dialect
    return get_dialect(dialect)
