"""Tests for the dashboard query serializer and its agreement with the endpoint parser."""

from __future__ import annotations

from datetime import datetime
from urllib.parse import parse_qsl

from dashboard.filters import FilterState, Filters
from dashboard.query import query_for_state, serialize_query
from listings.params import parse_listing_params


def test_defaults_are_omitted_but_paging_is_always_sent():
    assert serialize_query(Filters(), page=1, page_size=20) == "page=1&pageSize=20"


def test_featured_always_sends_sort():
    assert serialize_query(Filters(), page=1, page_size=20, sort="") == "page=1&pageSize=20&sort=followers_desc"
    state = FilterState(view="featured")
    assert query_for_state(state).endswith("&sort=followers_desc")
    assert "sort=" not in query_for_state(FilterState(view="discover"))


def test_full_filter_set():
    filters = Filters(
        start=datetime(2026, 2, 1, 9, 30),
        end=datetime(2026, 2, 2, 18, 0),
        min_followers=100,
        max_followers=10000,
        categories=("Crypto", "AI"),
    )
    qs = serialize_query(filters, page=2, page_size=50)
    assert qs == (
        "page=2&pageSize=50&start=2026-02-01T09%3A30&end=2026-02-02T18%3A00"
        "&minFollowers=100&maxFollowers=10000&categories=Crypto%2CAI"
    )


def test_identical_inputs_give_the_same_string_object():
    a = serialize_query(Filters(min_followers=5), page=3, page_size=20)
    b = serialize_query(Filters(min_followers=5), page=3, page_size=20)
    assert a == b
    assert a is b


def test_round_trip_through_endpoint_parser():
    filters = Filters(
        start=datetime(2026, 2, 1, 9, 30),
        end=datetime(2026, 2, 2, 18, 0),
        min_followers=100,
        max_followers=10000,
        categories=("Crypto", "AI"),
        category_match="exact",
    )
    qs = serialize_query(filters, page=3, page_size=50, sort="registered_asc")
    raw = dict(parse_qsl(qs))
    parsed = parse_listing_params(
        page=raw.get("page"),
        page_size=raw.get("pageSize"),
        start=raw.get("start"),
        end=raw.get("end"),
        min_followers=raw.get("minFollowers"),
        max_followers=raw.get("maxFollowers"),
        categories=raw.get("categories"),
        category_match=raw.get("categoryMatch"),
        sort=raw.get("sort"),
    )
    assert parsed.page == 3
    assert parsed.page_size == 50
    assert parsed.start == "2026-02-01 09:30"
    assert parsed.end == "2026-02-02 18:00"
    assert parsed.min_followers == 100
    assert parsed.max_followers == 10000
    assert parsed.categories == ("Crypto", "AI")
    assert parsed.category_match == "exact"
    assert parsed.sort == "registered_asc"


def test_empty_filters_parse_to_endpoint_defaults():
    raw = dict(parse_qsl(serialize_query(Filters(), page=1, page_size=20)))
    parsed = parse_listing_params(page=raw.get("page"), page_size=raw.get("pageSize"))
    assert (parsed.page, parsed.page_size, parsed.start, parsed.min_followers, parsed.categories) == (
        1,
        20,
        None,
        None,
        (),
    )


def test_huge_follower_bound_survives_the_round_trip():
    qs = serialize_query(Filters(min_followers=9007199254740993), page=1, page_size=20)
    raw = dict(parse_qsl(qs))
    parsed = parse_listing_params(min_followers=raw["minFollowers"])
    assert parsed.min_followers == 9007199254740993
