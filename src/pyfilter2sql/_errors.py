"""Exception hierarchy for query and filter compilation."""

from __future__ import annotations


class QueryBuildError(Exception):
    """Base exception for query building errors.

    Provides dual messaging: a sanitized user-facing message and
    internal details for logging.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped

    def internal(self) -> str:
        return self.internal_details


class UnsupportedDialectError(QueryBuildError):
    """Raised when an unknown database dialect is requested."""


class InvalidOperatorError(QueryBuildError):
    """Raised when an operator suffix is not recognized."""


class InvalidArgumentsError(QueryBuildError):
    """Raised when builder or generator arguments are inconsistent."""


class DuplicateAliasError(QueryBuildError):
    """Raised when a table alias is used twice in one query."""


class InvalidGroupByError(QueryBuildError):
    """Raised when no requested group-by field survives the whitelist."""


class FilterValidationError(QueryBuildError):
    """Raised in strict mode when a filter fails validation."""

    def __init__(self, field: str, operator: str, reason: str) -> None:
        super().__init__(
            f"Filter validation failed for {field}_{operator}: {reason}",
            f"field={field!r} operator={operator!r} reason={reason!r}",
        )
        self.field = field
        self.operator = operator
        self.reason = reason


# Sanitized user-facing error message constants
ERR_MSG_UNSUPPORTED_DIALECT = "unsupported database dialect"
ERR_MSG_INVALID_OPERATOR = "invalid filter operator"
ERR_MSG_INVALID_ARGUMENTS = "invalid query arguments"
ERR_MSG_DUPLICATE_ALIAS = "duplicate table alias"
ERR_MSG_INVALID_GROUP_BY = "Invalid group_by fields"
