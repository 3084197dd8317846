"""
Listing API HTTP client.

Used endpoints:
- GET /api/records   -> {"items": [...], "total": n, "page": p, "pageSize": s}
- GET /api/featured  -> same envelope, items carry the enrichment block
Failures come back as {"error": "..."} with a 5xx status.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import httpx

from .filters import VIEW_DISCOVER, VIEW_FEATURED

DEFAULT_API_URL = "http://localhost:8000"

PATHS = {
    VIEW_DISCOVER: "/api/records",
    VIEW_FEATURED: "/api/featured",
}


# Fetch failures are explicit and separable from programming errors.
class ListingClientError(RuntimeError):
    pass


@dataclass(frozen=True)
class PageResult:
    items: list[dict[str, Any]]
    total: int
    page: int
    page_size: int


def api_base_url() -> str:
    return os.environ.get("TRACKER_API_URL", DEFAULT_API_URL).strip() or DEFAULT_API_URL


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise ListingClientError("TRACKER_API_URL is empty.")
    return base_url.rstrip("/")


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"Request failed with status {resp.status_code}"


async def fetch_page(
    view: str,
    query_string: str,
    *,
    base_url: str | None = None,
    timeout_s: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PageResult:
    """
    GET one listing page for `view` using an already-serialized query string.
    """
    path = PATHS.get(view)
    if path is None:
        raise ListingClientError(f"Unknown view {view!r}.")
    base_url = _normalize_base_url(base_url or api_base_url())

    try:
        async with httpx.AsyncClient(base_url=base_url, timeout=timeout_s, transport=transport) as client:
            resp = await client.get(f"{path}?{query_string}", headers={"Cache-Control": "no-store"})
    except httpx.HTTPError as exc:
        raise ListingClientError(f"Request failed: {exc}") from exc

    if resp.status_code != 200:
        raise ListingClientError(_error_message(resp))

    try:
        data = resp.json()
    except ValueError as exc:
        raise ListingClientError("Listing API returned a non-JSON body.") from exc
    if not isinstance(data, dict):
        raise ListingClientError("Listing API returned an unexpected body.")

    items = data.get("items")
    if not isinstance(items, list):
        raise ListingClientError("Listing API returned no items list.")

    try:
        return PageResult(
            items=[item for item in items if isinstance(item, dict)],
            total=int(data.get("total") or 0),
            page=int(data.get("page") or 1),
            page_size=int(data.get("pageSize") or len(items)),
        )
    except (TypeError, ValueError) as exc:
        raise ListingClientError(f"Listing API returned a malformed page envelope: {exc}") from exc
