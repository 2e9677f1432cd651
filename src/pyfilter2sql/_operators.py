"""Filter operators, their parameter shapes, and the suffix grammar."""

from __future__ import annotations

import enum
import re

from pyfilter2sql._errors import ERR_MSG_INVALID_OPERATOR, InvalidOperatorError


class ParamShape(enum.Enum):
    """How many bound parameters an operator consumes."""

    NONE = "none"
    SINGLE = "single"
    MANY = "many"
    PAIR = "pair"


class Operator(enum.StrEnum):
    """Closed set of filter operators, valued by their filter-key suffix."""

    EQUALS = "eq"
    NOT_EQUALS = "ne"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"
    LIKE = "like"
    IN = "in"
    BETWEEN = "between"
    IS_NULL = "null"

    @property
    def param_shape(self) -> ParamShape:
        return _PARAM_SHAPES[self]

    @property
    def sql_symbol(self) -> str | None:
        """SQL symbol for plain binary comparisons, None otherwise."""
        return COMPARISON_OPERATORS.get(self)

    @property
    def is_range(self) -> bool:
        return self in RANGE_OPERATORS

    @classmethod
    def from_suffix(cls, suffix: str | Operator) -> Operator:
        try:
            return cls(suffix)
        except ValueError as e:
            raise InvalidOperatorError(
                ERR_MSG_INVALID_OPERATOR,
                f"unknown operator suffix: {suffix!r}",
                wrapped=e,
            ) from e


# Operator -> SQL symbol for single-parameter comparisons
COMPARISON_OPERATORS: dict[Operator, str] = {
    Operator.EQUALS: "=",
    Operator.NOT_EQUALS: "!=",
    Operator.GREATER_THAN: ">",
    Operator.GREATER_THAN_OR_EQUAL: ">=",
    Operator.LESS_THAN: "<",
    Operator.LESS_THAN_OR_EQUAL: "<=",
}

# Ordering comparisons subject to min/max range checks
RANGE_OPERATORS = frozenset({
    Operator.GREATER_THAN,
    Operator.GREATER_THAN_OR_EQUAL,
    Operator.LESS_THAN,
    Operator.LESS_THAN_OR_EQUAL,
})

_PARAM_SHAPES: dict[Operator, ParamShape] = {
    Operator.EQUALS: ParamShape.SINGLE,
    Operator.NOT_EQUALS: ParamShape.SINGLE,
    Operator.GREATER_THAN: ParamShape.SINGLE,
    Operator.GREATER_THAN_OR_EQUAL: ParamShape.SINGLE,
    Operator.LESS_THAN: ParamShape.SINGLE,
    Operator.LESS_THAN_OR_EQUAL: ParamShape.SINGLE,
    Operator.LIKE: ParamShape.SINGLE,
    Operator.IN: ParamShape.MANY,
    Operator.BETWEEN: ParamShape.PAIR,
    Operator.IS_NULL: ParamShape.NONE,
}

FILTER_KEY_RE = re.compile(r"^(.+)_(eq|ne|gt|gte|lt|lte|like|in|between|null)$")


def parse_filter_key(key: str) -> tuple[str, Operator]:
    """Split a filter key such as ``age_gte`` into field and operator.

    Keys without a recognized suffix are equality filters on the whole key.
    """
    match = FILTER_KEY_RE.match(key)
    if match is None:
        return key, Operator.EQUALS
    return match.group(1), Operator(match.group(2))
