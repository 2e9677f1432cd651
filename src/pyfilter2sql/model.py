"""Condition model: plain data shapes consumed by the query generator."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from pyfilter2sql._operators import Operator


class JoinKind(enum.StrEnum):
    INNER = "INNER"
    LEFT = "LEFT"


class SortDirection(enum.StrEnum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: str | SortDirection | None) -> SortDirection:
        """Lenient parse: anything other than ``desc`` sorts ascending."""
        if value is not None and str(value).lower() == "desc":
            return cls.DESC
        return cls.ASC


@dataclass(frozen=True)
class Condition:
    """A single WHERE/HAVING predicate."""

    column: str
    operator: Operator
    value: Any = None
    param_name: str | None = None


@dataclass(frozen=True)
class JoinClause:
    """A JOIN against another table.

    ``extra`` holds raw predicates ANDed into the ON clause, such as a
    soft-delete guard.
    """

    kind: JoinKind
    table: str
    left_column: str
    right_column: str
    alias: str | None = None
    extra: tuple[str, ...] = ()


@dataclass(frozen=True)
class OrderBy:
    column: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class SortParam:
    """Sort request as it arrives from a caller (field plus direction)."""

    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class Pagination:
    """Page window. ``start`` pins an exact row offset instead of a page boundary."""

    page: int
    limit: int
    start: int | None = None

    @property
    def offset(self) -> int:
        if self.start is not None:
            return self.start
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class SelectOptions:
    table: str
    alias: str | None = None
    columns: Sequence[str] = ()
    where: Sequence[Condition] = ()
    joins: Sequence[JoinClause] = ()
    order_by: Sequence[OrderBy] = ()
    pagination: Pagination | None = None
    group_by: Sequence[str] = ()
    having: Sequence[Condition] = ()


@dataclass(frozen=True)
class InsertOptions:
    table: str
    columns: Sequence[str]
    values: Sequence[Any]
    returning: Sequence[str] = ()


@dataclass(frozen=True)
class UpdateOptions:
    table: str
    columns: Sequence[str]
    values: Sequence[Any]
    where: Sequence[Condition] = ()
    returning: Sequence[str] = ()


@dataclass(frozen=True)
class DeleteOptions:
    table: str
    where: Sequence[Condition] = ()
    returning: Sequence[str] = ()


@dataclass(frozen=True)
class GeneratedQuery:
    """SQL text plus the named parameters bound by its placeholders."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)
