"""
Listing SQL (raw).

Builds one filtered, ordered, range-limited SELECT over `molt_onboard` plus
a matching exact COUNT(*), and runs both in a single read-only transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from core import db

from . import policy
from .params import ListingParams

TABLE = "molt_onboard"

BASE_COLUMNS = (
    "registered_at",
    "registered_at_utc8",
    "username",
    "handle",
    "followers_count",
    "bio",
    "category",
    "wallet_address",
)

ENRICHMENT_COLUMNS = (
    "grok_summary",
    "grok_recent_focus",
    "grok_experience",
    "grok_highlights",
    "grok_crypto_attitude",
    "grok_checked_at",
)

ORDER_BY = {
    policy.SORT_FOLLOWERS_DESC: (
        "followers_count DESC NULLS LAST",
        "registered_at DESC",
        "handle ASC",
    ),
    policy.SORT_REGISTERED_DESC: ("registered_at DESC", "handle ASC"),
    policy.SORT_REGISTERED_ASC: ("registered_at ASC", "handle ASC"),
}


def escape_like(token: str) -> str:
    """
    Escape LIKE wildcards so a category token matches literally.
    """
    return token.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class _Params:
    """Collects positional arguments and hands out their $n placeholders."""

    def __init__(self) -> None:
        self.values: list[Any] = []

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


@dataclass(frozen=True)
class ListingQuery:
    columns: tuple[str, ...]
    where: tuple[str, ...]
    args: tuple[Any, ...]
    order_by: tuple[str, ...]
    limit: int
    offset: int

    def _where_sql(self) -> str:
        if not self.where:
            return ""
        return "WHERE " + "\n  AND ".join(self.where)

    def count_sql(self) -> str:
        return f"SELECT count(*) FROM {TABLE}\n{self._where_sql()}"

    def rows_sql(self) -> str:
        n = len(self.args)
        return (
            f"SELECT {', '.join(self.columns)}\n"
            f"FROM {TABLE}\n"
            f"{self._where_sql()}\n"
            f"ORDER BY {', '.join(self.order_by)}\n"
            f"LIMIT ${n + 1} OFFSET ${n + 2}"
        )

    def rows_args(self) -> tuple[Any, ...]:
        return (*self.args, self.limit, self.offset)


def _category_clause(params: ListingParams, args: _Params) -> str | None:
    if not params.categories:
        return None
    if params.category_match == policy.CATEGORY_MATCH_EXACT:
        tokens = [token.lower() for token in params.categories]
        return f"lower(category) = ANY({args.add(tokens)}::text[])"
    parts = [f"category ILIKE {args.add('%' + escape_like(token) + '%')}" for token in params.categories]
    return "(" + " OR ".join(parts) + ")"


def build_listing_query(
    params: ListingParams,
    *,
    eligibility: policy.EligibilityPolicy,
    columns: tuple[str, ...] = BASE_COLUMNS,
    now: datetime | None = None,
) -> ListingQuery:
    now = now or datetime.now(timezone.utc)
    args = _Params()
    where: list[str] = []

    if eligibility.min_followers_exclusive is not None:
        where.append(f"followers_count > {args.add(eligibility.min_followers_exclusive)}")
    if eligibility.exclude_unclassified:
        where.append(f"category <> {args.add(policy.UNCLASSIFIED_CATEGORY)}")
    if eligibility.require_enrichment:
        where.append("grok_checked_at IS NOT NULL")
    where.append(f"registered_at >= {args.add(now - timedelta(hours=eligibility.window_hours))}")

    if params.start:
        where.append(f"registered_at_utc8 >= {args.add(params.start)}")
    if params.end:
        where.append(f"registered_at_utc8 <= {args.add(params.end)}")
    if params.min_followers is not None:
        where.append(f"followers_count >= {args.add(params.min_followers)}")
    if params.max_followers is not None:
        where.append(f"followers_count <= {args.add(params.max_followers)}")

    category_clause = _category_clause(params, args)
    if category_clause:
        where.append(category_clause)

    return ListingQuery(
        columns=columns,
        where=tuple(where),
        args=tuple(args.values),
        order_by=ORDER_BY.get(params.sort, ORDER_BY[policy.DEFAULT_SORT]),
        limit=params.page_size,
        offset=params.offset,
    )


async def fetch_listing(query: ListingQuery) -> tuple[list[dict[str, Any]], int]:
    """
    Return (rows for the requested range, exact count of all matching rows).
    """
    async with db.read_only_transaction() as conn:
        total = await db.fetch_value(query.count_sql(), *query.args, conn=conn)
        rows = await db.fetch_all(query.rows_sql(), *query.rows_args(), conn=conn)
    return rows, int(total or 0)
