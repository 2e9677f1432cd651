"""Defaults and limits for query building."""

DEFAULT_PAGE = 1
"""Page used when pagination is requested without one."""

DEFAULT_PAGE_LIMIT = 10
"""Page size used when pagination is requested without a limit."""

MAX_PAGE_LIMIT = 100
"""Upper bound for any page size; callers cannot request more rows."""

PARAM_PREFIX = "param"
"""Base name for generated parameters (param1, param2, ...)."""

SOFT_DELETE_COLUMN = "deleted_at"

DEFAULT_DATE_COLUMN = "created_at"
"""Date column aggregated by the recap builder."""

DEFAULT_MAIN_ALIAS = "t"

DEFAULT_REF_SCHEMA = "public"

DEFAULT_REF_COLUMN = "id"

DISPLAY_COLUMN_CANDIDATES: tuple[str, ...] = ("name", "title", "code", "description")

MAX_DISPLAY_COLUMNS = 2

MAX_GROUP_BY_FIELDS = 2

MONTHS: tuple[str, ...] = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)

# Request keys consumed by QueryBuilder.apply_request instead of filtering
RESERVED_REQUEST_KEYS = frozenset({"_page", "_limit", "_offset", "_sort", "_order"})
