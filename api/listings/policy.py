"""
Listing policies: which rows a view may show, how categories match, and
the accepted sort tokens.

The eligibility gate is a named policy rather than hardcoded SQL so the
discover view can be switched off the featured gate (DISCOVER_POLICY=recent)
without touching the query builder.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from core.env import env_int

UNCLASSIFIED_CATEGORY = "/"

SORT_FOLLOWERS_DESC = "followers_desc"
SORT_REGISTERED_DESC = "registered_desc"
SORT_REGISTERED_ASC = "registered_asc"
SORT_TOKENS = (SORT_FOLLOWERS_DESC, SORT_REGISTERED_DESC, SORT_REGISTERED_ASC)
DEFAULT_SORT = SORT_FOLLOWERS_DESC

# contains: case-insensitive substring, OR across tokens.
# exact: case-insensitive equality, OR across tokens.
CATEGORY_MATCH_CONTAINS = "contains"
CATEGORY_MATCH_EXACT = "exact"
CATEGORY_MATCH_MODES = (CATEGORY_MATCH_CONTAINS, CATEGORY_MATCH_EXACT)
DEFAULT_CATEGORY_MATCH = CATEGORY_MATCH_CONTAINS

DEFAULT_FEATURED_MIN_FOLLOWERS = 5000
DEFAULT_RECENT_WINDOW_HOURS = 72


@dataclass(frozen=True)
class EligibilityPolicy:
    """
    Server-side predicates applied on top of the caller's filters.

    - min_followers_exclusive: keep rows with followers_count strictly above this
    - exclude_unclassified: drop rows whose category is the "/" sentinel (or null)
    - require_enrichment: drop rows the enrichment job has not checked yet
    - window_hours: rolling registration floor (now - window); callers cannot widen it
    """

    name: str
    min_followers_exclusive: int | None
    exclude_unclassified: bool
    require_enrichment: bool
    window_hours: int


def recent_window_hours() -> int:
    return max(1, env_int("RECENT_WINDOW_HOURS", DEFAULT_RECENT_WINDOW_HOURS))


def featured_policy() -> EligibilityPolicy:
    return EligibilityPolicy(
        name="featured",
        min_followers_exclusive=env_int("FEATURED_MIN_FOLLOWERS", DEFAULT_FEATURED_MIN_FOLLOWERS),
        exclude_unclassified=True,
        require_enrichment=True,
        window_hours=recent_window_hours(),
    )


def recent_policy() -> EligibilityPolicy:
    return EligibilityPolicy(
        name="recent",
        min_followers_exclusive=None,
        exclude_unclassified=False,
        require_enrichment=False,
        window_hours=recent_window_hours(),
    )


def discover_policy() -> EligibilityPolicy:
    """
    Policy for /api/records.

    Defaults to the featured gate, which is what the deployed discover
    endpoint enforces today. DISCOVER_POLICY=recent lists every signup inside
    the recency window instead.
    """
    name = os.environ.get("DISCOVER_POLICY", "featured").strip().lower()
    if name == "recent":
        return recent_policy()
    return featured_policy()
