"""
Query serializer: committed filters + page -> canonical query string.

Parameters are always emitted in the same order and omitted at their
default, so equal inputs produce an identical string. Results are cached,
which also makes them the same object for repeated inputs.
"""

from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlencode

from .filters import DEFAULT_CATEGORY_MATCH, DEFAULT_SORT, VIEW_FEATURED, Filters, FilterState

# Minute-truncated datetime-local form.
TIME_FORMAT = "%Y-%m-%dT%H:%M"


@lru_cache(maxsize=128)
def serialize_query(filters: Filters, *, page: int, page_size: int, sort: str | None = None) -> str:
    """
    Build the listing query string.

    `sort` is only sent by the featured view; pass "" there to get the
    default token, or None to leave it out entirely.
    """
    params: list[tuple[str, str]] = [
        ("page", str(page)),
        ("pageSize", str(page_size)),
    ]
    if filters.start is not None:
        params.append(("start", filters.start.strftime(TIME_FORMAT)))
    if filters.end is not None:
        params.append(("end", filters.end.strftime(TIME_FORMAT)))
    if filters.min_followers is not None:
        params.append(("minFollowers", str(filters.min_followers)))
    if filters.max_followers is not None:
        params.append(("maxFollowers", str(filters.max_followers)))
    if filters.categories:
        params.append(("categories", ",".join(filters.categories)))
    if filters.category_match != DEFAULT_CATEGORY_MATCH:
        params.append(("categoryMatch", filters.category_match))
    if sort is not None:
        params.append(("sort", sort or DEFAULT_SORT))
    return urlencode(params)


def query_for_state(state: FilterState) -> str:
    # Only the featured endpoint takes a sort token, and it always gets one.
    sort = state.sort if state.view == VIEW_FEATURED else None
    return serialize_query(state.committed, page=state.page, page_size=state.page_size, sort=sort)
