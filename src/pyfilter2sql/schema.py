"""Column metadata used for filter validation and join derivation."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any


class TypeFamily(enum.StrEnum):
    NUMERIC = "numeric"
    STRING = "string"
    DATE = "date"
    BOOLEAN = "boolean"
    OTHER = "other"


NUMERIC_TYPES = frozenset({
    "integer", "bigint", "smallint", "decimal", "numeric", "real",
    "double precision", "float", "int", "tinyint", "mediumint",
})
STRING_TYPES = frozenset({"varchar", "char", "text", "string", "character varying"})
DATE_TYPES = frozenset({"date", "timestamp", "datetime", "time"})
BOOLEAN_TYPES = frozenset({"boolean", "bool"})


def type_family(data_type: str) -> TypeFamily:
    """Normalize a free-form declared type into its family."""
    t = data_type.strip().lower()
    if t in NUMERIC_TYPES:
        return TypeFamily.NUMERIC
    if t in STRING_TYPES:
        return TypeFamily.STRING
    if t in DATE_TYPES:
        return TypeFamily.DATE
    if t in BOOLEAN_TYPES:
        return TypeFamily.BOOLEAN
    return TypeFamily.OTHER


@dataclass(frozen=True)
class ColumnDescriptor:
    """Metadata for a single column, supplied by the caller."""

    name: str
    data_type: str = "text"
    is_nullable: bool = True
    is_filterable: bool = True
    is_unique: bool = False
    is_primary_key: bool = False
    enum_values: tuple[Any, ...] = ()
    min_value: Any = None
    max_value: Any = None
    ref_schema: str | None = None
    ref_table: str | None = None
    ref_column: str | None = None
    ref_display_column: str | None = None

    @property
    def type_family(self) -> TypeFamily:
        return type_family(self.data_type)

    @property
    def has_reference(self) -> bool:
        return bool(self.ref_table and self.ref_column)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> ColumnDescriptor:
        """Build a descriptor from a metadata row (``column_name``, ``data_type``, ...)."""
        enum_values = row.get("enum_values") or ()
        return cls(
            name=row["column_name"],
            data_type=row.get("data_type") or "text",
            is_nullable=bool(row.get("is_nullable", True)),
            is_filterable=row.get("is_filterable", True) is not False,
            is_unique=bool(row.get("is_unique", False)),
            is_primary_key=bool(row.get("is_primary_key", False)),
            enum_values=tuple(enum_values),
            min_value=row.get("min_value"),
            max_value=row.get("max_value"),
            ref_schema=row.get("ref_schema"),
            ref_table=row.get("ref_table"),
            ref_column=row.get("ref_column"),
            ref_display_column=row.get("ref_display_column"),
        )


ColumnLike = ColumnDescriptor | Mapping[str, Any]


def to_descriptors(columns: Iterable[ColumnLike]) -> list[ColumnDescriptor]:
    return [
        c if isinstance(c, ColumnDescriptor) else ColumnDescriptor.from_mapping(c)
        for c in columns
    ]


class TableSchema:
    """Table columns with O(1) lookup by name."""

    def __init__(self, columns: Iterable[ColumnLike]) -> None:
        self._columns = to_descriptors(columns)
        self._index: dict[str, ColumnDescriptor] = {c.name: c for c in self._columns}

    @property
    def columns(self) -> list[ColumnDescriptor]:
        return list(self._columns)

    def find_column(self, name: str) -> ColumnDescriptor | None:
        return self._index.get(name)

    def foreign_keys(self) -> list[ColumnDescriptor]:
        return [c for c in self._columns if c.has_reference]

    def groupable_fields(self) -> list[str]:
        """Lower-cased names of filterable, non-primary-key columns."""
        return [
            c.name.lower()
            for c in self._columns
            if c.is_filterable and not c.is_primary_key
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._columns)
