"""Derive JOIN clauses from foreign-key column metadata."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from pyfilter2sql._constants import (
    DEFAULT_MAIN_ALIAS,
    DEFAULT_REF_COLUMN,
    DEFAULT_REF_SCHEMA,
    DISPLAY_COLUMN_CANDIDATES,
    MAX_DISPLAY_COLUMNS,
    SOFT_DELETE_COLUMN,
)
from pyfilter2sql.builder import QueryBuilder
from pyfilter2sql.dialect import resolve_dialect
from pyfilter2sql.dialect._base import Dialect
from pyfilter2sql.model import JoinClause, JoinKind
from pyfilter2sql.schema import ColumnDescriptor, ColumnLike, to_descriptors

logger = logging.getLogger(__name__)


class AliasRegistry:
    """Hands out join aliases, keyed by referenced ``schema.table``.

    The first join to a table gets ``<table>_alias``; later joins to the
    same table, or to a same-named table in another schema, are
    disambiguated by the referencing column name.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._issued: set[str] = set()

    def alias_for(self, col: ColumnDescriptor) -> str:
        key = f"{col.ref_schema or DEFAULT_REF_SCHEMA}.{col.ref_table}"
        seen = self._counts.get(key, 0)
        self._counts[key] = seen + 1
        alias = f"{col.ref_table}_alias"
        if seen or alias in self._issued:
            alias = f"{col.ref_table}_{col.name}"
        self._issued.add(alias)
        return alias

    def count(self, schema: str, table: str) -> int:
        return self._counts.get(f"{schema}.{table}", 0)

    def clear(self) -> None:
        self._counts.clear()
        self._issued.clear()


@dataclass(frozen=True)
class DerivedJoin:
    """One join synthesized from a foreign-key column."""

    kind: JoinKind
    main_alias: str
    column: str
    ref_schema: str
    ref_table: str
    ref_column: str
    alias: str
    display_columns: tuple[str, ...]
    guard: str | None
    dialect: Dialect = field(repr=False, compare=False)

    def render(self) -> str:
        q = self.dialect.quote_identifier
        sql = (
            f"{self.kind} JOIN {q(f'{self.ref_schema}.{self.ref_table}')} AS {q(self.alias)}"
            f" ON {q(f'{self.main_alias}.{self.column}')} = {q(f'{self.alias}.{self.ref_column}')}"
        )
        if self.guard:
            sql += f" AND {self.guard}"
        return sql

    def select_columns(self) -> list[str]:
        q = self.dialect.quote_identifier
        return [
            f"{q(f'{self.alias}.{c}')} AS {q(f'{self.ref_table}_{c}')}"
            for c in self.display_columns
        ]

    def to_join_clause(self) -> JoinClause:
        q = self.dialect.quote_identifier
        return JoinClause(
            kind=self.kind,
            table=q(f"{self.ref_schema}.{self.ref_table}"),
            left_column=q(f"{self.main_alias}.{self.column}"),
            right_column=q(f"{self.alias}.{self.ref_column}"),
            alias=q(self.alias),
            extra=(self.guard,) if self.guard else (),
        )


@dataclass
class JoinPlan:
    joins: list[DerivedJoin]
    select_columns: list[str]
    registry: AliasRegistry

    def render(self) -> list[str]:
        return [j.render() for j in self.joins]


class JoinDeriver:
    """Builds joins for every foreign-key column of a table.

    Nullable references become LEFT joins, required ones INNER joins.
    Unless ``include_deleted`` is set, each join also excludes
    soft-deleted rows of the referenced table.
    """

    def __init__(self, dialect: Dialect | str | None = None, include_deleted: bool = False) -> None:
        self._dialect = resolve_dialect(dialect)
        self._include_deleted = include_deleted
        self.registry = AliasRegistry()

    def derive(
        self,
        columns: Iterable[ColumnLike],
        main_alias: str = DEFAULT_MAIN_ALIAS,
        registry: AliasRegistry | None = None,
    ) -> JoinPlan:
        """Derive joins and display columns.

        Args:
            columns: Column metadata of the main table.
            main_alias: Alias of the main table in the final query.
            registry: Alias registry to continue from. A fresh one is
                used when omitted, so independent calls never share
                alias numbering.
        """
        return self._plan(columns, main_alias, registry, self._dialect)

    def generate_joins(
        self, columns: Iterable[ColumnLike], main_alias: str = DEFAULT_MAIN_ALIAS
    ) -> JoinPlan:
        """Like :meth:`derive`, but continues numbering in the deriver's own registry."""
        return self.derive(columns, main_alias, registry=self.registry)

    def apply(
        self,
        builder: QueryBuilder,
        columns: Iterable[ColumnLike],
        main_alias: str | None = None,
    ) -> JoinPlan:
        """Add every derived join and its display columns to ``builder``.

        Joins are quoted in the builder's dialect and reference the
        builder's alias, or its table name when it has none.
        """
        plan = self._plan(
            columns,
            main_alias or builder.alias or builder.table,
            None,
            builder.dialect,
        )
        for join in plan.joins:
            builder.add_join(join.to_join_clause())
        builder.add_columns(plan.select_columns)
        return plan

    def select_with_joins(
        self,
        main_alias: str,
        main_columns: Iterable[ColumnLike],
        join_columns: Iterable[str],
    ) -> str:
        q = self._dialect.quote_identifier
        selects = [q(f"{main_alias}.{c.name}") for c in to_descriptors(main_columns)]
        selects.extend(join_columns)
        return "SELECT " + ", ".join(selects)

    def reset(self) -> None:
        self.registry.clear()

    def _plan(
        self,
        columns: Iterable[ColumnLike],
        main_alias: str,
        registry: AliasRegistry | None,
        dialect: Dialect,
    ) -> JoinPlan:
        registry = registry if registry is not None else AliasRegistry()
        joins = [
            self._derive_one(col, main_alias, registry, dialect)
            for col in to_descriptors(columns)
            if col.has_reference
        ]
        select_columns = [c for j in joins for c in j.select_columns()]
        logger.debug("derived %d joins for alias %s", len(joins), main_alias)
        return JoinPlan(joins=joins, select_columns=select_columns, registry=registry)

    def _derive_one(
        self,
        col: ColumnDescriptor,
        main_alias: str,
        registry: AliasRegistry,
        dialect: Dialect,
    ) -> DerivedJoin:
        alias = registry.alias_for(col)
        guard = None
        if not self._include_deleted:
            guard = f"{dialect.quote_identifier(f'{alias}.{SOFT_DELETE_COLUMN}')} IS NULL"
        return DerivedJoin(
            kind=JoinKind.LEFT if col.is_nullable else JoinKind.INNER,
            main_alias=main_alias,
            column=col.name,
            ref_schema=col.ref_schema or DEFAULT_REF_SCHEMA,
            ref_table=col.ref_table or "",
            ref_column=col.ref_column or DEFAULT_REF_COLUMN,
            alias=alias,
            display_columns=_display_columns(col),
            guard=guard,
            dialect=dialect,
        )


def _display_columns(col: ColumnDescriptor) -> tuple[str, ...]:
    if col.ref_display_column:
        return (col.ref_display_column,)
    return DISPLAY_COLUMN_CANDIDATES[:MAX_DISPLAY_COLUMNS]
