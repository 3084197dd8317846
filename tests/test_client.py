"""Tests for the dashboard HTTP client, using httpx.MockTransport."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from dashboard import client


def _fetch(handler, view: str = "featured", query: str = "page=1&pageSize=20&sort=followers_desc"):
    return asyncio.run(
        client.fetch_page(
            view,
            query,
            base_url="http://tracker.test/",
            transport=httpx.MockTransport(handler),
        )
    )


def test_fetch_page_parses_envelope():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"items": [{"handle": "alice"}], "total": 41, "page": 1, "pageSize": 20},
        )

    result = _fetch(handler)
    assert result.items == [{"handle": "alice"}]
    assert result.total == 41
    assert result.page_size == 20

    request = seen[0]
    assert request.url.path == "/api/featured"
    assert request.url.params["sort"] == "followers_desc"
    assert request.headers["cache-control"] == "no-store"


def test_discover_uses_records_endpoint():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/records"
        return httpx.Response(200, json={"items": [], "total": 0, "page": 1, "pageSize": 20})

    assert _fetch(handler, view="discover", query="page=1&pageSize=20").items == []


def test_server_error_message_is_surfaced():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "column grok_summary does not exist"})

    with pytest.raises(client.ListingClientError, match="grok_summary"):
        _fetch(handler)


def test_non_json_error_gets_generic_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    with pytest.raises(client.ListingClientError, match="status 502"):
        _fetch(handler)


def test_network_error_is_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(client.ListingClientError, match="Request failed"):
        _fetch(handler)


def test_unknown_view_is_rejected():
    with pytest.raises(client.ListingClientError, match="Unknown view"):
        asyncio.run(client.fetch_page("trending", "page=1"))


@pytest.mark.parametrize(
    "body",
    [
        [{"handle": "x"}],
        "just a string",
        {"items": [], "total": "many", "page": 1, "pageSize": 20},
        {"items": [], "total": 3, "page": {"n": 1}, "pageSize": 20},
    ],
)
def test_malformed_ok_body_is_a_client_error(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    with pytest.raises(client.ListingClientError, match="Listing API returned"):
        _fetch(handler)
