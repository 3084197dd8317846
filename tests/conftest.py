"""
Pytest fixtures. The listing repository is replaced by an in-memory page
source, so no database is needed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

NOW = datetime(2026, 2, 3, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_row():
    def _make(handle: str, followers: int | None = 6000, *, minutes_ago: int = 0, **extra) -> dict:
        row = {
            "registered_at": NOW - timedelta(minutes=minutes_ago),
            "username": handle.title(),
            "handle": handle,
            "followers_count": followers,
            "bio": f"bio of {handle}",
            "category": "AI",
            "wallet_address": None,
        }
        row.update(extra)
        return row

    return _make


@pytest.fixture
def fake_store(monkeypatch):
    """
    Serve pages from `fake_store.rows` and record each ListingQuery.

    Rows are assumed to already be in result order; the fake only applies
    the requested range, like the database would after filtering.
    """
    from listings import repository

    class FakeStore:
        def __init__(self) -> None:
            self.rows: list[dict] = []
            self.queries: list[repository.ListingQuery] = []
            self.error: Exception | None = None

        @property
        def last(self) -> repository.ListingQuery:
            return self.queries[-1]

        async def fetch_listing(self, query: repository.ListingQuery):
            self.queries.append(query)
            if self.error is not None:
                raise self.error
            page = self.rows[query.offset : query.offset + query.limit]
            return page, len(self.rows)

    store = FakeStore()
    monkeypatch.setattr(repository, "fetch_listing", store.fetch_listing)
    return store


@pytest.fixture
def client():
    """FastAPI TestClient. Used without `with`, so the DB pool lifespan never runs."""
    from fastapi.testclient import TestClient

    from main import app

    return TestClient(app)
