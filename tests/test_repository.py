"""Tests for listing SQL construction."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from listings import policy, repository
from listings.params import ListingParams

NOW = datetime(2026, 2, 3, 12, 0, tzinfo=timezone.utc)


def _featured(params: ListingParams, **kwargs) -> repository.ListingQuery:
    return repository.build_listing_query(params, eligibility=policy.featured_policy(), now=NOW, **kwargs)


def test_gate_is_strictly_greater_than_5000(monkeypatch):
    monkeypatch.delenv("FEATURED_MIN_FOLLOWERS", raising=False)
    query = _featured(ListingParams())
    assert query.where[0] == "followers_count > $1"
    assert query.args[0] == 5000


def test_unclassified_sentinel_and_enrichment_gate():
    query = _featured(ListingParams(categories=("/",)))
    assert "category <> $2" in query.where
    assert query.args[1] == "/"
    assert "grok_checked_at IS NOT NULL" in query.where


def test_recent_window_cannot_be_widened(monkeypatch):
    monkeypatch.delenv("RECENT_WINDOW_HOURS", raising=False)
    query = _featured(ListingParams(start="2020-01-01 00:00"))
    assert "registered_at >= $3" in query.where
    assert query.args[2] == NOW - timedelta(hours=72)
    assert "registered_at_utc8 >= $4" in query.where
    assert query.args[3] == "2020-01-01 00:00"


def test_recent_policy_has_only_the_window():
    query = repository.build_listing_query(ListingParams(), eligibility=policy.recent_policy(), now=NOW)
    assert query.where == ("registered_at >= $1",)


def test_follower_bounds_are_inclusive():
    query = _featured(ListingParams(min_followers=6000, max_followers=9000))
    assert "followers_count >= $4" in query.where
    assert "followers_count <= $5" in query.where
    assert query.args[3:] == (6000, 9000)


def test_category_contains_escapes_wildcards():
    query = _featured(ListingParams(categories=("50%_off",)))
    assert query.where[-1] == "(category ILIKE $4)"
    assert query.args[-1] == "%50\\%\\_off%"


def test_category_exact_match():
    query = _featured(ListingParams(categories=("AI", "Crypto"), category_match=policy.CATEGORY_MATCH_EXACT))
    assert query.where[-1] == "lower(category) = ANY($4::text[])"
    assert query.args[-1] == ["ai", "crypto"]


def test_escape_like():
    assert repository.escape_like("a\\b%c_d") == "a\\\\b\\%c\\_d"
    assert repository.escape_like("Crypto") == "Crypto"


def test_rows_sql_appends_range():
    query = _featured(ListingParams(page=3, page_size=10))
    sql = query.rows_sql()
    assert sql.startswith("SELECT registered_at, registered_at_utc8, username, handle")
    assert "FROM molt_onboard" in sql
    assert "ORDER BY followers_count DESC NULLS LAST, registered_at DESC, handle ASC" in sql
    assert sql.endswith("LIMIT $4 OFFSET $5")
    assert query.rows_args()[-2:] == (10, 20)


def test_count_sql_has_no_order_or_range():
    sql = _featured(ListingParams()).count_sql()
    assert sql.startswith("SELECT count(*) FROM molt_onboard")
    assert "ORDER BY" not in sql
    assert "LIMIT" not in sql
    assert "WHERE followers_count > $1" in sql


def test_enrichment_columns_only_when_requested():
    base = _featured(ListingParams())
    full = _featured(ListingParams(), columns=repository.BASE_COLUMNS + repository.ENRICHMENT_COLUMNS)
    assert "grok_summary" not in base.rows_sql()
    assert "grok_summary" in full.rows_sql()
