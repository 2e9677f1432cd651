"""QueryGenerator: renders condition-model option bundles into parameterized SQL."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pyfilter2sql._constants import PARAM_PREFIX
from pyfilter2sql._errors import ERR_MSG_INVALID_ARGUMENTS, InvalidArgumentsError
from pyfilter2sql._operators import Operator, ParamShape
from pyfilter2sql.dialect import resolve_dialect
from pyfilter2sql.dialect._base import Dialect
from pyfilter2sql.model import (
    Condition,
    DeleteOptions,
    GeneratedQuery,
    InsertOptions,
    JoinClause,
    OrderBy,
    SelectOptions,
    UpdateOptions,
)

logger = logging.getLogger(__name__)


def is_sequence(value: Any) -> bool:
    """Lists and tuples count as value sequences; strings never do."""
    return isinstance(value, (list, tuple))


class _Bindings:
    """Parameter map for one generation call.

    Names come from a counter that starts at zero for every call, so two
    calls never share parameter numbering.
    """

    def __init__(self, dialect: Dialect) -> None:
        self._dialect = dialect
        self._count = 0
        self.params: dict[str, Any] = {}

    def next_name(self) -> str:
        self._count += 1
        return f"{PARAM_PREFIX}{self._count}"

    def bind(self, name: str, value: Any) -> str:
        """Record ``value`` under ``name`` and return its placeholder.

        Raises:
            InvalidArgumentsError: If ``name`` is already bound in this call.
        """
        if name in self.params:
            raise InvalidArgumentsError(
                ERR_MSG_INVALID_ARGUMENTS, f"parameter name {name!r} bound twice"
            )
        self.params[name] = value
        return self._dialect.named_placeholder(name)


class QueryGenerator:
    """Generates SELECT, COUNT, INSERT, UPDATE and DELETE statements.

    The generator trusts its input: malformed conditions produce no SQL
    fragment instead of raising. Validation belongs to FilterCompiler.
    """

    def __init__(self, dialect: Dialect | str | None = None) -> None:
        self._dialect = resolve_dialect(dialect)

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    # --- Statements ---

    def generate_select(self, options: SelectOptions) -> GeneratedQuery:
        b = _Bindings(self._dialect)
        columns = ", ".join(options.columns) if options.columns else "*"
        parts = [f"SELECT {columns} FROM {self._table_ref(options.table, options.alias)}"]
        parts.append(self._join_clauses(options.joins))
        parts.append(self._condition_clause("WHERE", options.where, b))
        if options.group_by:
            parts.append(f" GROUP BY {', '.join(options.group_by)}")
        parts.append(self._condition_clause("HAVING", options.having, b))
        parts.append(self._order_by_clause(options.order_by))
        if options.pagination is not None:
            p = options.pagination
            parts.append(f" {self._dialect.build_limit_offset(p.limit, p.offset)}")
        return self._result("select", "".join(parts), b)

    def generate_count(self, options: SelectOptions) -> GeneratedQuery:
        """COUNT(*) over the same FROM/JOIN/WHERE as ``generate_select``."""
        b = _Bindings(self._dialect)
        sql = (
            f"SELECT COUNT(*) as total FROM {self._table_ref(options.table, options.alias)}"
            f"{self._join_clauses(options.joins)}"
            f"{self._condition_clause('WHERE', options.where, b)}"
        )
        return self._result("count", sql, b)

    def generate_insert(self, options: InsertOptions) -> GeneratedQuery:
        b = _Bindings(self._dialect)
        self._check_pairs(options.columns, options.values)
        placeholders = ", ".join(b.bind(b.next_name(), v) for v in options.values)
        sql = (
            f"INSERT INTO {options.table} ({', '.join(options.columns)}) "
            f"VALUES ({placeholders})"
        )
        sql += self._returning_clause(options.returning)
        return self._result("insert", sql, b)

    def generate_update(self, options: UpdateOptions) -> GeneratedQuery:
        b = _Bindings(self._dialect)
        self._check_pairs(options.columns, options.values)
        assignments = ", ".join(
            f"{col} = {b.bind(b.next_name(), value)}"
            for col, value in zip(options.columns, options.values)
        )
        sql = f"UPDATE {options.table} SET {assignments}"
        sql += self._condition_clause("WHERE", options.where, b)
        sql += self._returning_clause(options.returning)
        return self._result("update", sql, b)

    def generate_delete(self, options: DeleteOptions) -> GeneratedQuery:
        b = _Bindings(self._dialect)
        sql = f"DELETE FROM {options.table}"
        sql += self._condition_clause("WHERE", options.where, b)
        sql += self._returning_clause(options.returning)
        return self._result("delete", sql, b)

    # --- Conditions ---

    def render_condition(self, cond: Condition, b: _Bindings) -> str:
        """Render one condition, binding its parameters. Returns "" if malformed."""
        name = cond.param_name or b.next_name()
        col = cond.column
        shape = cond.operator.param_shape

        if shape is ParamShape.NONE:
            return f"{col} IS NULL" if cond.value is True else f"{col} IS NOT NULL"

        if shape is ParamShape.SINGLE:
            if cond.operator is Operator.LIKE:
                return f"{col} LIKE {b.bind(name, f'%{cond.value}%')}"
            return f"{col} {cond.operator.sql_symbol} {b.bind(name, cond.value)}"

        if shape is ParamShape.MANY:
            if not is_sequence(cond.value) or not cond.value:
                return ""
            placeholders = [
                b.bind(f"{name}_{i}", v) for i, v in enumerate(cond.value)
            ]
            return f"{col} IN ({', '.join(placeholders)})"

        # ParamShape.PAIR
        if not is_sequence(cond.value) or len(cond.value) != 2:
            return ""
        start, end = cond.value
        return (
            f"{col} BETWEEN {b.bind(f'{name}_start', start)}"
            f" AND {b.bind(f'{name}_end', end)}"
        )

    def _condition_clause(
        self, keyword: str, conditions: Sequence[Condition], b: _Bindings
    ) -> str:
        rendered = [self.render_condition(c, b) for c in conditions]
        rendered = [r for r in rendered if r]
        if not rendered:
            return ""
        return f" {keyword} {' AND '.join(rendered)}"

    # --- Clauses ---

    @staticmethod
    def _table_ref(table: str, alias: str | None) -> str:
        return f"{table} {alias}" if alias else table

    def _join_clauses(self, joins: Sequence[JoinClause]) -> str:
        out = []
        for j in joins:
            on = f"{j.left_column} = {j.right_column}"
            for predicate in j.extra:
                on += f" AND {predicate}"
            out.append(f" {j.kind} JOIN {self._table_ref(j.table, j.alias)} ON {on}")
        return "".join(out)

    @staticmethod
    def _order_by_clause(order_by: Sequence[OrderBy]) -> str:
        if not order_by:
            return ""
        return " ORDER BY " + ", ".join(f"{o.column} {o.direction}" for o in order_by)

    def _returning_clause(self, returning: Sequence[str]) -> str:
        if not returning:
            return ""
        if not self._dialect.supports_returning():
            logger.debug(
                "dropping RETURNING %s: not supported by %s",
                list(returning),
                self._dialect.name,
            )
            return ""
        return f" RETURNING {', '.join(returning)}"

    @staticmethod
    def _check_pairs(columns: Sequence[str], values: Sequence[Any]) -> None:
        if len(columns) != len(values):
            raise InvalidArgumentsError(
                ERR_MSG_INVALID_ARGUMENTS,
                f"{len(columns)} columns but {len(values)} values",
            )

    def _result(self, kind: str, sql: str, b: _Bindings) -> GeneratedQuery:
        logger.debug("generated %s query with %d parameters", kind, len(b.params))
        return GeneratedQuery(sql=sql, params=b.params)
