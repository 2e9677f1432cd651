"""Yearly recap queries: per-month row counts grouped by one or two fields."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pyfilter2sql._constants import (
    DEFAULT_DATE_COLUMN,
    MAX_GROUP_BY_FIELDS,
    MONTHS,
    SOFT_DELETE_COLUMN,
)
from pyfilter2sql._errors import ERR_MSG_INVALID_GROUP_BY, InvalidGroupByError
from pyfilter2sql.dialect import resolve_dialect
from pyfilter2sql.dialect._base import Dialect
from pyfilter2sql.model import GeneratedQuery
from pyfilter2sql.schema import ColumnLike, TableSchema

logger = logging.getLogger(__name__)

# Filter keys that configure the recap rather than filter it
_IGNORED_FILTER_KEYS = frozenset({"year", "group_by"})


class RecapQueryBuilder:
    """Builds yearly recap queries for one table.

    Group-by and filter fields are restricted to a whitelist: either
    ``allowed_fields`` or, by default, the filterable non-primary-key
    columns of ``columns``.
    """

    def __init__(
        self,
        dialect: Dialect | str | None,
        table: str,
        schema: str | None = None,
        date_column: str = DEFAULT_DATE_COLUMN,
        columns: Iterable[ColumnLike] = (),
        allowed_fields: Iterable[str] | None = None,
    ) -> None:
        self._dialect = resolve_dialect(dialect)
        self._table = f"{schema}.{table}" if schema else table
        self._date_column = date_column
        if allowed_fields is None:
            allowed_fields = TableSchema(columns).groupable_fields()
        self._allowed = [f.lower() for f in allowed_fields]

    @property
    def allowed_fields(self) -> list[str]:
        return list(self._allowed)

    def build(
        self,
        year: int,
        group_by: Iterable[str],
        filters: Mapping[str, Any] | None = None,
    ) -> GeneratedQuery:
        """Build the recap query for ``year``.

        Raises:
            InvalidGroupByError: If none of the first two ``group_by``
                fields is whitelisted.
        """
        requested = [f.lower() for f in list(group_by)[:MAX_GROUP_BY_FIELDS]]
        fields = [f for f in requested if f in self._allowed]
        if not fields:
            raise InvalidGroupByError(
                ERR_MSG_INVALID_GROUP_BY,
                f"none of {requested!r} in allowed fields {self._allowed!r}",
            )
        if len(fields) != len(requested):
            logger.debug("ignoring group_by fields %s", sorted(set(requested) - set(fields)))

        q = self._dialect.quote_identifier
        ph = self._dialect.named_placeholder
        date_col = q(self._date_column)
        params: dict[str, Any] = {"year": year}

        selects = [f"{q(f)} AS field_{i}" for i, f in enumerate(fields, start=1)]
        selects.extend(
            f"COUNT(CASE WHEN {self._dialect.month_extract(date_col)} = {n} THEN 1 END) AS {month}"
            for n, month in enumerate(MONTHS, start=1)
        )
        selects.append("COUNT(*) AS total")

        where = [
            f"{self._dialect.year_extract(date_col)} = {ph('year')}",
            f"{SOFT_DELETE_COLUMN} IS NULL",
        ]
        for key, value in (filters or {}).items():
            if key in _IGNORED_FILTER_KEYS or not value:
                continue
            column = key.removesuffix("_eq")
            name = f"filter_{column}"
            if column not in self._allowed or name in params:
                continue
            params[name] = value
            where.append(f"{q(column)} = {ph(name)}")

        group_fields = ", ".join(f"field_{i}" for i in range(1, len(fields) + 1))
        sql = (
            f"SELECT {', '.join(selects)}"
            f" FROM {q(self._table)}"
            f" WHERE {' AND '.join(where)}"
            f" GROUP BY {group_fields}"
            f" ORDER BY {group_fields}"
        )
        return GeneratedQuery(sql=sql, params=params)
