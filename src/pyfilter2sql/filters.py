"""FilterCompiler: validates flat filter maps against column metadata.

Valid filters become QueryBuilder conditions. Invalid ones are dropped,
or raise FilterValidationError when strict type checking is enabled.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pyfilter2sql._errors import FilterValidationError
from pyfilter2sql._generator import is_sequence
from pyfilter2sql._operators import Operator, parse_filter_key
from pyfilter2sql.builder import QueryBuilder
from pyfilter2sql.schema import ColumnDescriptor, ColumnLike, TableSchema, TypeFamily

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterCompilerOptions:
    """Filter compilation settings.

    Attributes:
        strict_type_checking: Raise on invalid filters and check value
            types against numeric/boolean columns.
        allow_unknown_columns: Accept filters on columns missing from
            ``columns`` (no further validation is applied to them).
        columns: Column metadata used for validation.
    """

    strict_type_checking: bool = False
    allow_unknown_columns: bool = True
    columns: tuple[ColumnLike, ...] = ()


@dataclass(frozen=True)
class CompiledFilter:
    """Validation record for one filter entry."""

    field: str
    operator: Operator
    value: Any
    is_valid: bool
    error: str | None = None


@dataclass(frozen=True)
class _Check:
    is_valid: bool
    error: str | None = None


_OK = _Check(True)


def _fail(error: str) -> _Check:
    return _Check(False, error)


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    if is_sequence(value):
        return "array"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _compare(value: Any, bound: Any, below: bool) -> bool:
    """True if ``value`` lies below (or above) ``bound``; unorderable pairs never fail."""
    try:
        return value < bound if below else value > bound
    except TypeError:
        return False


class FilterCompiler:
    """Validates filter maps and applies the valid entries to a QueryBuilder."""

    def __init__(
        self,
        options: FilterCompilerOptions | None = None,
        *,
        strict_type_checking: bool | None = None,
        allow_unknown_columns: bool | None = None,
        columns: Iterable[ColumnLike] | None = None,
    ) -> None:
        options = options or FilterCompilerOptions()
        self._strict = (
            options.strict_type_checking
            if strict_type_checking is None
            else strict_type_checking
        )
        self._allow_unknown = (
            options.allow_unknown_columns
            if allow_unknown_columns is None
            else allow_unknown_columns
        )
        self._schema = TableSchema(options.columns if columns is None else columns)

    @property
    def strict(self) -> bool:
        return self._strict

    def compile(self, filters: Mapping[str, Any], builder: QueryBuilder) -> QueryBuilder:
        """Validate ``filters`` and add every valid entry to ``builder``.

        Raises:
            FilterValidationError: In strict mode, for the first invalid filter.
        """
        for compiled in self.compile_filters(filters):
            if compiled.is_valid:
                builder.where(compiled.field, compiled.operator, compiled.value)
            elif self._strict:
                raise FilterValidationError(
                    compiled.field,
                    str(compiled.operator),
                    compiled.error or "Invalid filter",
                )
            else:
                logger.debug(
                    "dropping filter %s_%s: %s",
                    compiled.field,
                    compiled.operator,
                    compiled.error,
                )
        return builder

    def compile_filters(self, filters: Mapping[str, Any]) -> list[CompiledFilter]:
        """Validate ``filters`` without touching a builder."""
        results: list[CompiledFilter] = []
        for key, value in filters.items():
            if value is None:
                continue
            field_name, operator = parse_filter_key(key)
            check = self._validate(field_name, operator, value)
            results.append(
                CompiledFilter(
                    field=field_name,
                    operator=operator,
                    value=value,
                    is_valid=check.is_valid,
                    error=check.error,
                )
            )
        return results

    # --- Metadata queries ---

    def get_column_metadata(self, column: str) -> ColumnDescriptor | None:
        return self._schema.find_column(column)

    def is_filterable(self, column: str) -> bool:
        col = self._schema.find_column(column)
        return col.is_filterable if col is not None else True

    def get_available_operators(self, column: str) -> list[Operator]:
        col = self._schema.find_column(column)
        if col is None:
            return list(Operator)

        family = col.type_family
        operators = [Operator.EQUALS, Operator.NOT_EQUALS, Operator.IS_NULL]
        if family is TypeFamily.STRING:
            operators.append(Operator.LIKE)
        if family in (TypeFamily.NUMERIC, TypeFamily.DATE, TypeFamily.STRING):
            operators.extend([
                Operator.GREATER_THAN,
                Operator.GREATER_THAN_OR_EQUAL,
                Operator.LESS_THAN,
                Operator.LESS_THAN_OR_EQUAL,
            ])
        if family in (TypeFamily.NUMERIC, TypeFamily.DATE):
            operators.append(Operator.BETWEEN)
        operators.append(Operator.IN)
        return operators

    # --- Validation ---

    def _validate(self, field_name: str, operator: Operator, value: Any) -> _Check:
        col = self._schema.find_column(field_name)
        if col is None:
            if not self._allow_unknown:
                return _fail(f"Column '{field_name}' not found in metadata")
            return _OK

        if not col.is_filterable:
            return _fail(f"Column '{field_name}' is not filterable")

        check = self._check_operator_for_type(col, operator)
        if check.is_valid:
            check = self._check_value_shape(col, operator, value)
        if check.is_valid:
            check = self._check_enum(col, operator, value)
        if check.is_valid:
            check = self._check_range(col, operator, value)
        return check

    @staticmethod
    def _check_operator_for_type(col: ColumnDescriptor, operator: Operator) -> _Check:
        family = col.type_family
        if operator is Operator.LIKE and family is not TypeFamily.STRING:
            return _fail(f"LIKE operator not supported for type '{col.data_type}'")
        if operator.is_range and family not in (
            TypeFamily.NUMERIC, TypeFamily.DATE, TypeFamily.STRING,
        ):
            return _fail(f"Comparison operators not supported for type '{col.data_type}'")
        if operator is Operator.BETWEEN and family not in (TypeFamily.NUMERIC, TypeFamily.DATE):
            return _fail(f"BETWEEN operator not supported for type '{col.data_type}'")
        return _OK

    def _check_value_shape(
        self, col: ColumnDescriptor, operator: Operator, value: Any
    ) -> _Check:
        if operator is Operator.IN:
            if not is_sequence(value):
                return _fail(f"IN operator requires array value, got {_type_name(value)}")
            if not value:
                return _fail("IN operator requires non-empty array")

        if operator is Operator.BETWEEN:
            if not is_sequence(value):
                return _fail(f"BETWEEN operator requires array value, got {_type_name(value)}")
            if len(value) != 2:
                return _fail(
                    f"BETWEEN operator requires array with 2 elements, got {len(value)}"
                )

        if operator is Operator.IS_NULL and not isinstance(value, bool):
            return _fail(f"IS_NULL operator requires boolean value, got {_type_name(value)}")

        if not self._strict:
            return _OK

        family = col.type_family
        if family is TypeFamily.NUMERIC and operator not in (
            Operator.IN, Operator.BETWEEN, Operator.IS_NULL,
        ):
            if not _is_number(value):
                return _fail(
                    f"Expected number for type '{col.data_type}', got {_type_name(value)}"
                )
        if family is TypeFamily.BOOLEAN and operator not in (Operator.IN, Operator.IS_NULL):
            if not isinstance(value, bool):
                return _fail(
                    f"Expected boolean for type '{col.data_type}', got {_type_name(value)}"
                )
        return _OK

    @staticmethod
    def _check_enum(col: ColumnDescriptor, operator: Operator, value: Any) -> _Check:
        if not col.enum_values:
            return _OK
        allowed = ", ".join(str(v) for v in col.enum_values)
        if operator is Operator.EQUALS and value not in col.enum_values:
            return _fail(f"Value '{value}' not in enum: [{allowed}]")
        if operator is Operator.IN:
            invalid = [v for v in value if v not in col.enum_values]
            if invalid:
                return _fail(f"Invalid enum values: [{', '.join(str(v) for v in invalid)}]")
        return _OK

    @staticmethod
    def _check_range(col: ColumnDescriptor, operator: Operator, value: Any) -> _Check:
        if not operator.is_range:
            return _OK
        if col.min_value is not None and _compare(value, col.min_value, below=True):
            return _fail(f"Value {value} is less than minimum {col.min_value}")
        if col.max_value is not None and _compare(value, col.max_value, below=False):
            return _fail(f"Value {value} is greater than maximum {col.max_value}")
        return _OK

