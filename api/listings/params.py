"""
Query-string parsing for the listing endpoints.

Every parameter is lenient: bad input is clamped or ignored, never a 4xx.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from core import timefmt
from core.env import env_int

from . import policy

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

BIGINT_MIN = -(2**63)
BIGINT_MAX = 2**63 - 1


def max_page_size() -> int:
    return max(1, env_int("LISTING_MAX_PAGE_SIZE", MAX_PAGE_SIZE))


def default_page_size() -> int:
    return max(1, min(env_int("LISTING_DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE), max_page_size()))


@dataclass(frozen=True)
class ListingParams:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    start: str | None = None
    end: str | None = None
    min_followers: int | None = None
    max_followers: int | None = None
    categories: tuple[str, ...] = ()
    category_match: str = policy.DEFAULT_CATEGORY_MATCH
    sort: str = policy.DEFAULT_SORT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _finite_number(raw: str | None) -> int | float | None:
    text = (raw or "").strip()
    if not text:
        return None
    # Whole numbers stay exact past 2**53.
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def _clamp_bigint(value: int) -> int:
    return max(BIGINT_MIN, min(value, BIGINT_MAX))


def max_page(page_size: int) -> int:
    """Largest page whose OFFSET still fits a bigint."""
    return BIGINT_MAX // page_size


def parse_page(raw: str | None, *, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    value = _finite_number(raw)
    if value is None:
        return 1
    return max(1, min(math.floor(value), max_page(page_size)))


def parse_page_size(raw: str | None) -> int:
    value = _finite_number(raw)
    if value is None:
        return default_page_size()
    return max(1, min(math.floor(value), max_page_size()))


def parse_follower_bound(raw: str | None, *, lower: bool) -> int | None:
    """
    Inclusive follower bound, or None when `raw` is not a finite number.

    Fractional bounds round inward since followers_count is an integer.
    """
    value = _finite_number(raw)
    if value is None:
        if (raw or "").strip():
            logger.debug("ignoring non-numeric follower bound %r", raw)
        return None
    return _clamp_bigint(math.ceil(value) if lower else math.floor(value))


def parse_time_bound(raw: str | None) -> str | None:
    value = timefmt.normalize_display_minute(raw)
    if value is None and (raw or "").strip():
        logger.debug("ignoring malformed time bound %r", raw)
    return value


def parse_categories(raw: str | None) -> tuple[str, ...]:
    text = (raw or "").strip()
    if not text:
        return ()
    return tuple(token.strip() for token in text.split(",") if token.strip())


def parse_category_match(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    if value in policy.CATEGORY_MATCH_MODES:
        return value
    if value:
        logger.debug("unknown categoryMatch %r, using %s", raw, policy.DEFAULT_CATEGORY_MATCH)
    return policy.DEFAULT_CATEGORY_MATCH


def parse_sort(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    if value in policy.SORT_TOKENS:
        return value
    if value:
        logger.debug("unknown sort %r, using %s", raw, policy.DEFAULT_SORT)
    return policy.DEFAULT_SORT


def parse_listing_params(
    *,
    page: str | None = None,
    page_size: str | None = None,
    start: str | None = None,
    end: str | None = None,
    min_followers: str | None = None,
    max_followers: str | None = None,
    categories: str | None = None,
    category_match: str | None = None,
    sort: str | None = None,
) -> ListingParams:
    size = parse_page_size(page_size)
    return ListingParams(
        page=parse_page(page, page_size=size),
        page_size=size,
        start=parse_time_bound(start),
        end=parse_time_bound(end),
        min_followers=parse_follower_bound(min_followers, lower=True),
        max_followers=parse_follower_bound(max_followers, lower=False),
        categories=parse_categories(categories),
        category_match=parse_category_match(category_match),
        sort=parse_sort(sort),
    )
