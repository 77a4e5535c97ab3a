"""
Query parameter sanitisation for evaluation reads.

Why this module exists
----------------------
List and performance endpoints receive raw query-string values.
Nothing raw is allowed to reach SQL:
- `page`, `limit`, `days` become plain positive integers (bad input -> default)
- `limit` and `days` are bounded only so they cannot overflow SQL integers or datetimes
- `sort` is looked up in an allow-list; unknown values fall back to `updated_at`
- `order` is either "asc" or "desc"

Invalid input is never an error here. It is silently replaced by a safe default,
so every caller always gets a usable query.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_DAYS = 30
DEFAULT_SORT = "updated_at"

# Largest value a signed 64-bit SQL integer (LIMIT / OFFSET) can hold.
MAX_SQL_INT = 2**63 - 1
# Widest performance window; keeps `now - days` above datetime.min.
MAX_DAYS = 36500

# Column names callers may sort by. Storage backends map these to real columns;
# a sort value that is not a key here never reaches a query.
SORT_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "status",
    "score",
    "test_cases",
    "created_at",
    "updated_at",
    "last_run",
)


def parse_positive_int(raw: Any, default: int) -> int:
    """
    Coerce `raw` to an integer >= 1, or return `default`.

    Accepts ints and decimal-digit strings (surrounding whitespace allowed).
    Anything else (floats as text, negatives, zero, None, garbage) yields `default`.
    """

    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw if raw >= 1 else default
    if isinstance(raw, str):
        text = raw.strip()
        if text.isdigit() and text.isascii():
            value = int(text)
            return value if value >= 1 else default
    return default


def resolve_sort(raw: Any) -> str:
    """Return `raw` if it is an allow-listed sort field, else the default."""

    if isinstance(raw, str) and raw in SORT_FIELDS:
        return raw
    return DEFAULT_SORT


def resolve_order(raw: Any) -> str:
    """'asc' (case-insensitive) -> 'asc'; everything else -> 'desc'."""

    if isinstance(raw, str) and raw.strip().lower() == "asc":
        return "asc"
    return "desc"


def resolve_days(raw: Any) -> int:
    """Window size in days; bad input -> default, very large input -> MAX_DAYS."""

    return min(parse_positive_int(raw, DEFAULT_DAYS), MAX_DAYS)


@dataclass(frozen=True)
class ListQuery:
    """A fully sanitised list request. Construct it with `from_params`."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    status: str | None = None
    sort: str = DEFAULT_SORT
    order: str = "desc"

    @classmethod
    def from_params(
        cls,
        *,
        page: Any = None,
        limit: Any = None,
        status: Any = None,
        sort: Any = None,
        order: Any = None,
    ) -> "ListQuery":
        size = min(parse_positive_int(limit, DEFAULT_LIMIT), MAX_SQL_INT)
        # Past this page the offset no longer fits a SQL integer; every such page is empty.
        last_page = MAX_SQL_INT // size + 1
        return cls(
            page=min(parse_positive_int(page, DEFAULT_PAGE), last_page),
            limit=size,
            status=status if isinstance(status, str) and status else None,
            sort=resolve_sort(sort),
            order=resolve_order(order),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def descending(self) -> bool:
        return self.order == "desc"

    def total_pages(self, total: int) -> int:
        return -(-total // self.limit)
