"""
Filter state for one dashboard view.

The draft holds raw input text and never triggers a request. `apply()`
parses it into the committed `Filters` and goes back to page 1. Category
toggles and sort changes skip the draft and commit straight away.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone

VIEW_DISCOVER = "discover"
VIEW_FEATURED = "featured"
VIEWS = (VIEW_DISCOVER, VIEW_FEATURED)

SORT_TOKENS = ("followers_desc", "registered_desc", "registered_asc")
DEFAULT_SORT = "followers_desc"

CATEGORY_MATCH_MODES = ("contains", "exact")
DEFAULT_CATEGORY_MATCH = "contains"

DEFAULT_PAGE_SIZE = 20
# The listing API clamps pageSize to this range.
MAX_PAGE_SIZE = 100

# (label, value) in display order; "/" is the unclassified sentinel.
CATEGORY_OPTIONS = (
    ("Crypto", "Crypto"),
    ("AI", "AI"),
    ("Artist", "Artist"),
    ("TradFi", "TradFi"),
    ("Unclassified (/)", "/"),
)

DISPLAY_TZ = timezone(timedelta(hours=8))


class FilterValidationError(ValueError):
    pass


@dataclass(frozen=True)
class Filters:
    start: datetime | None = None
    end: datetime | None = None
    min_followers: int | None = None
    max_followers: int | None = None
    categories: tuple[str, ...] = ()
    category_match: str = DEFAULT_CATEGORY_MATCH


@dataclass
class FilterDraft:
    start: str = ""
    end: str = ""
    min_followers: str = ""
    max_followers: str = ""


def canonical_categories(values) -> tuple[str, ...]:
    """
    Deduplicate and order categories: known options first, in display
    order, then unknown values sorted.
    """
    known = [value for _, value in CATEGORY_OPTIONS]
    unique = {value.strip() for value in values if value and value.strip()}
    ordered = [value for value in known if value in unique]
    ordered.extend(sorted(unique.difference(known)))
    return tuple(ordered)


def parse_time_input(label: str, raw: str) -> datetime | None:
    text = (raw or "").strip()
    if not text:
        return None
    try:
        value = datetime.fromisoformat(text)
    except ValueError as exc:
        raise FilterValidationError(f"{label}: not a date/time: {raw!r}") from exc
    if value.tzinfo is not None:
        value = value.astimezone(DISPLAY_TZ).replace(tzinfo=None)
    return value.replace(second=0, microsecond=0)


def parse_count_input(label: str, raw: str) -> int | None:
    text = (raw or "").strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError as exc:
        raise FilterValidationError(f"{label}: not a whole number: {raw!r}") from exc


@dataclass
class FilterState:
    view: str = VIEW_DISCOVER
    page_size: int = DEFAULT_PAGE_SIZE
    draft: FilterDraft = field(default_factory=FilterDraft)
    committed: Filters = field(default_factory=Filters)
    page: int = 1
    sort: str = DEFAULT_SORT
    auto_refresh: bool = False

    def __post_init__(self) -> None:
        self.page_size = max(1, min(self.page_size, MAX_PAGE_SIZE))

    def apply(self) -> Filters:
        """
        Commit the draft. Raises FilterValidationError and keeps the previous
        committed filters when any draft field does not parse.
        """
        self.committed = replace(
            self.committed,
            start=parse_time_input("start", self.draft.start),
            end=parse_time_input("end", self.draft.end),
            min_followers=parse_count_input("min followers", self.draft.min_followers),
            max_followers=parse_count_input("max followers", self.draft.max_followers),
        )
        self.page = 1
        return self.committed

    def toggle_category(self, value: str) -> tuple[str, ...]:
        current = set(self.committed.categories)
        if value in current:
            current.discard(value)
        else:
            current.add(value)
        self.committed = replace(self.committed, categories=canonical_categories(current))
        self.page = 1
        return self.committed.categories

    def set_category_match(self, mode: str) -> None:
        if mode not in CATEGORY_MATCH_MODES:
            raise FilterValidationError(f"category match must be one of {CATEGORY_MATCH_MODES}")
        self.committed = replace(self.committed, category_match=mode)
        self.page = 1

    def set_sort(self, token: str) -> None:
        if self.view != VIEW_FEATURED:
            raise FilterValidationError("only the featured view can be sorted")
        if token not in SORT_TOKENS:
            raise FilterValidationError(f"sort must be one of {SORT_TOKENS}")
        self.sort = token
        self.page = 1

    def total_pages(self, total: int) -> int:
        return max(1, math.ceil(total / self.page_size))

    def go_to_page(self, page: int, total: int | None = None) -> int:
        upper = self.total_pages(total) if total is not None else page
        self.page = max(1, min(page, upper))
        return self.page

    def next_page(self, total: int) -> int:
        return self.go_to_page(self.page + 1, total)

    def prev_page(self) -> int:
        self.page = max(1, self.page - 1)
        return self.page
