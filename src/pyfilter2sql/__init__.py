"""pyfilter2sql - Compile structured queries and filter maps to parameterized SQL."""

from __future__ import annotations

try:
    from pyfilter2sql._version import __version__
except ModuleNotFoundError:  # editable install without build metadata
    __version__ = "0.0.0.dev0"

from collections.abc import Iterable, Mapping
from typing import Any

from pyfilter2sql._errors import (
    DuplicateAliasError,
    FilterValidationError,
    InvalidArgumentsError,
    InvalidGroupByError,
    InvalidOperatorError,
    QueryBuildError,
    UnsupportedDialectError,
)
from pyfilter2sql._generator import QueryGenerator
from pyfilter2sql._operators import Operator, ParamShape, parse_filter_key
from pyfilter2sql.builder import QueryBuilder
from pyfilter2sql.dialect import (
    Dialect,
    DialectName,
    MySQLDialect,
    PostgresDialect,
    get_dialect,
)
from pyfilter2sql.filters import CompiledFilter, FilterCompiler, FilterCompilerOptions
from pyfilter2sql.joins import AliasRegistry, DerivedJoin, JoinDeriver, JoinPlan
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
from pyfilter2sql.recap import RecapQueryBuilder
from pyfilter2sql.schema import ColumnDescriptor, ColumnLike, TableSchema, TypeFamily

__all__ = [
    "build_select",
    "compile_filters",
    "get_dialect",
    "AliasRegistry",
    "ColumnDescriptor",
    "CompiledFilter",
    "Condition",
    "DeleteOptions",
    "DerivedJoin",
    "Dialect",
    "DialectName",
    "DuplicateAliasError",
    "FilterCompiler",
    "FilterCompilerOptions",
    "FilterValidationError",
    "GeneratedQuery",
    "InsertOptions",
    "InvalidArgumentsError",
    "InvalidGroupByError",
    "InvalidOperatorError",
    "JoinClause",
    "JoinDeriver",
    "JoinKind",
    "JoinPlan",
    "MySQLDialect",
    "Operator",
    "OrderBy",
    "Pagination",
    "ParamShape",
    "PostgresDialect",
    "QueryBuildError",
    "QueryBuilder",
    "QueryGenerator",
    "RecapQueryBuilder",
    "SelectOptions",
    "SortDirection",
    "SortParam",
    "TableSchema",
    "TypeFamily",
    "UnsupportedDialectError",
    "UpdateOptions",
    "parse_filter_key",
]


def compile_filters(
    table: str,
    filters: Mapping[str, Any],
    *,
    columns: Iterable[ColumnLike] = (),
    dialect: Dialect | str | None = None,
    strict: bool = False,
    alias: str | None = None,
    sort: Iterable[SortParam] = (),
    page: int | None = None,
    limit: int | None = None,
) -> GeneratedQuery:
    """Validate a filter map and compile it into a SELECT statement.

    Args:
        table: Table to select from.
        filters: Flat filter map using the ``field_op`` suffix convention.
        columns: Column metadata used for validation. Without metadata
            every filter is accepted as-is.
        dialect: SQL dialect to use. Defaults to PostgreSQL.
        strict: If True, raise FilterValidationError for invalid filters
            instead of dropping them.
        alias: Optional alias for ``table``; bare columns are qualified with it.
        sort: Sort keys, highest priority first.
        page: Page number (1-based). Pagination is applied when either
            ``page`` or ``limit`` is given.
        limit: Page size, clamped to 1..100.

    Returns:
        GeneratedQuery with SQL text and its named parameters.

    Raises:
        FilterValidationError: If strict is True and a filter is invalid.
        UnsupportedDialectError: If ``dialect`` names an unknown dialect.
    """
    builder = QueryBuilder(table, dialect, alias)
    compiler = FilterCompiler(strict_type_checking=strict, columns=columns)
    compiler.compile(filters, builder)
    builder.add_sort(sort)
    if page is not None or limit is not None:
        builder.paginate(page=page, limit=limit)
    return builder.build_select()


def build_select(
    options: SelectOptions, *, dialect: Dialect | str | None = None
) -> GeneratedQuery:
    """Render a SelectOptions bundle. Dialect defaults to PostgreSQL."""
    return QueryGenerator(dialect).generate_select(options)
