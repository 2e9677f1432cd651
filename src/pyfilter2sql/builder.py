"""Fluent query builder bound to a single table."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pyfilter2sql._constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    RESERVED_REQUEST_KEYS,
)
from pyfilter2sql._errors import (
    ERR_MSG_DUPLICATE_ALIAS,
    ERR_MSG_INVALID_ARGUMENTS,
    DuplicateAliasError,
    InvalidArgumentsError,
)
from pyfilter2sql._generator import QueryGenerator
from pyfilter2sql._operators import Operator, ParamShape, parse_filter_key
from pyfilter2sql.dialect._base import Dialect
from pyfilter2sql.model import (
    Condition,
    DeleteOptions,
    GeneratedQuery,
    InsertOptions,
    JoinClause,
    JoinKind,
    OrderBy,
    Pagination,
    SelectOptions,
    SortDirection,
    SortParam,
    UpdateOptions,
)


def clamp_limit(limit: int | None) -> int:
    """Clamp a requested page size into ``[1, MAX_PAGE_LIMIT]``."""
    if not limit:
        limit = DEFAULT_PAGE_LIMIT
    return min(MAX_PAGE_LIMIT, max(1, limit))


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class QueryBuilder:
    """Accumulates columns, conditions, joins, ordering and pagination for one table.

    A builder belongs to one caller for one query. Call :meth:`reset` to
    reuse it for another query on the same table.

    Example::

        qb = QueryBuilder("users", alias="u")
        qb.where("status", Operator.EQUALS, "active").order_by("created_at", "desc")
        query = qb.paginate(page=2, limit=20).build_select()
    """

    def __init__(
        self,
        table: str,
        dialect: Dialect | str | None = None,
        alias: str | None = None,
    ) -> None:
        self._table = table
        self._alias = alias
        self._generator = QueryGenerator(dialect)
        self.reset()

    @classmethod
    def create(
        cls,
        table: str,
        dialect: Dialect | str | None = None,
        alias: str | None = None,
    ) -> QueryBuilder:
        return cls(table, dialect, alias)

    @property
    def table(self) -> str:
        return self._table

    @property
    def alias(self) -> str | None:
        return self._alias

    @property
    def dialect(self) -> Dialect:
        return self._generator.dialect

    @property
    def conditions(self) -> tuple[Condition, ...]:
        return tuple(self._where)

    # --- Columns ---

    def select(self, columns: Iterable[str]) -> QueryBuilder:
        self._columns = [self._qualify(c) for c in columns]
        return self

    def add_columns(self, columns: Iterable[str]) -> QueryBuilder:
        """Append already-rendered select expressions (e.g. joined display columns)."""
        self._columns.extend(columns)
        return self

    # --- Conditions ---

    def where(self, column: str, operator: Operator | str, value: Any = None) -> QueryBuilder:
        self._where.append(Condition(self._qualify(column), Operator.from_suffix(operator), value))
        return self

    def and_where(self, column: str, operator: Operator | str, value: Any = None) -> QueryBuilder:
        return self.where(column, operator, value)

    def having(self, column: str, operator: Operator | str, value: Any = None) -> QueryBuilder:
        # HAVING usually targets aggregates, so the column is left unqualified
        self._having.append(Condition(column, Operator.from_suffix(operator), value))
        return self

    def add_filters(self, filters: Mapping[str, Any]) -> QueryBuilder:
        """Add one condition per filter key using the ``field_op`` suffix convention.

        ``None`` values mean "no filter on this field" and are skipped.
        """
        for key, value in filters.items():
            if value is None:
                continue
            field, operator = parse_filter_key(key)
            self.where(field, operator, value)
        return self

    def apply_request(self, params: Mapping[str, Any]) -> QueryBuilder:
        """Apply raw request parameters: filters plus ``_page``/``_limit``/``_offset``/``_sort``/``_order``.

        Values arrive as strings from query strings, so ``in`` and
        ``between`` accept comma-separated lists and empty strings are
        ignored.
        """
        filters: dict[str, Any] = {}
        for key, value in params.items():
            if key in RESERVED_REQUEST_KEYS or value is None or value == "":
                continue
            _, operator = parse_filter_key(key)
            if operator.param_shape in (ParamShape.MANY, ParamShape.PAIR) and isinstance(value, str):
                value = [v.strip() for v in value.split(",") if v.strip()]
            filters[key] = value
        self.add_filters(filters)

        sort = params.get("_sort")
        if sort:
            self.order_by(str(sort), SortDirection.parse(params.get("_order")))

        limit = _to_int(params.get("_limit"))
        offset = _to_int(params.get("_offset"))
        page = _to_int(params.get("_page"))
        if offset is not None:
            # an explicit offset wins over _page; a missing limit still gets the default
            self.limit(clamp_limit(limit), max(0, offset))
        elif limit is not None or page is not None:
            self.paginate(page=page, limit=limit)
        return self

    # --- Joins ---

    def join(
        self,
        kind: JoinKind | str,
        table: str,
        left_column: str,
        right_column: str,
        alias: str | None = None,
    ) -> QueryBuilder:
        target = alias or table
        return self.add_join(
            JoinClause(
                kind=JoinKind(str(kind).upper()),
                table=table,
                left_column=self._qualify(left_column),
                right_column=right_column if "." in right_column else f"{target}.{right_column}",
                alias=alias,
            )
        )

    def inner_join(
        self, table: str, left_column: str, right_column: str, alias: str | None = None
    ) -> QueryBuilder:
        return self.join(JoinKind.INNER, table, left_column, right_column, alias)

    def left_join(
        self, table: str, left_column: str, right_column: str, alias: str | None = None
    ) -> QueryBuilder:
        return self.join(JoinKind.LEFT, table, left_column, right_column, alias)

    def add_join(self, clause: JoinClause) -> QueryBuilder:
        if clause.alias is not None:
            taken = {self._alias} | {j.alias for j in self._joins}
            if clause.alias in taken:
                raise DuplicateAliasError(
                    ERR_MSG_DUPLICATE_ALIAS,
                    f"alias {clause.alias!r} already used in query on {self._table!r}",
                )
        self._joins.append(clause)
        return self

    # --- Ordering, grouping, pagination ---

    def order_by(self, column: str, direction: SortDirection | str = SortDirection.ASC) -> QueryBuilder:
        self._order_by.append(OrderBy(self._qualify(column), SortDirection.parse(direction)))
        return self

    def add_sort(self, sort_params: Iterable[SortParam]) -> QueryBuilder:
        for sort in sort_params:
            self.order_by(sort.field, sort.direction)
        return self

    def group_by(self, columns: Iterable[str]) -> QueryBuilder:
        self._group_by = [self._qualify(c) for c in columns]
        return self

    def paginate(self, page: int | None = None, limit: int | None = None) -> QueryBuilder:
        self._pagination = Pagination(
            page=max(DEFAULT_PAGE, page or DEFAULT_PAGE),
            limit=clamp_limit(limit),
        )
        return self

    def limit(self, limit: int, offset: int | None = None) -> QueryBuilder:
        """Window by exact row offset. ``limit`` is capped at MAX_PAGE_LIMIT.

        Raises:
            InvalidArgumentsError: If ``limit`` is below 1 or ``offset`` is negative.
        """
        if limit < 1:
            raise InvalidArgumentsError(
                ERR_MSG_INVALID_ARGUMENTS, f"limit must be positive, got {limit}"
            )
        if offset is not None and offset < 0:
            raise InvalidArgumentsError(
                ERR_MSG_INVALID_ARGUMENTS, f"offset must not be negative, got {offset}"
            )
        limit = min(limit, MAX_PAGE_LIMIT)
        start = offset or 0
        self._pagination = Pagination(page=start // limit + 1, limit=limit, start=start)
        return self

    # --- Terminal operations ---

    def to_select_options(self) -> SelectOptions:
        return SelectOptions(
            table=self._table,
            alias=self._alias,
            columns=tuple(self._columns),
            where=tuple(self._where),
            joins=tuple(self._joins),
            order_by=tuple(self._order_by),
            pagination=self._pagination,
            group_by=tuple(self._group_by),
            having=tuple(self._having),
        )

    def build_select(self) -> GeneratedQuery:
        return self._generator.generate_select(self.to_select_options())

    def build_count(self) -> GeneratedQuery:
        return self._generator.generate_count(
            SelectOptions(
                table=self._table,
                alias=self._alias,
                where=tuple(self._where),
                joins=tuple(self._joins),
            )
        )

    def build_insert(
        self, data: Mapping[str, Any], returning: Sequence[str] | None = None
    ) -> GeneratedQuery:
        return self._generator.generate_insert(
            InsertOptions(
                table=self._table,
                columns=tuple(data.keys()),
                values=tuple(data.values()),
                returning=tuple(returning or ()),
            )
        )

    def build_update(
        self, data: Mapping[str, Any], returning: Sequence[str] | None = None
    ) -> GeneratedQuery:
        return self._generator.generate_update(
            UpdateOptions(
                table=self._table,
                columns=tuple(data.keys()),
                values=tuple(data.values()),
                where=tuple(self._where),
                returning=tuple(returning or ()),
            )
        )

    def build_delete(self, returning: Sequence[str] | None = None) -> GeneratedQuery:
        return self._generator.generate_delete(
            DeleteOptions(
                table=self._table,
                where=tuple(self._where),
                returning=tuple(returning or ()),
            )
        )

    def reset(self) -> QueryBuilder:
        self._columns: list[str] = []
        self._where: list[Condition] = []
        self._joins: list[JoinClause] = []
        self._order_by: list[OrderBy] = []
        self._group_by: list[str] = []
        self._having: list[Condition] = []
        self._pagination: Pagination | None = None
        return self

    def _qualify(self, column: str) -> str:
        """Prefix a bare column with the table alias; qualified names pass through."""
        if "." in column or not self._alias:
            return column
        return f"{self._alias}.{column}"
