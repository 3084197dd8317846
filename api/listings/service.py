"""
Listing service (orchestration).

This is where we:
- pick the eligibility policy and column set for a view
- build and run the listing query (repository)
- turn store failures into a single ListingError the app reports as 500
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import asyncpg

from . import policy, repository, schemas
from .params import ListingParams

logger = logging.getLogger(__name__)

MISSING_ENRICHMENT_MESSAGE = (
    "Featured columns are not in the database yet: "
    "run supabase/grok_profile_migration.sql, then retry."
)


class ListingError(RuntimeError):
    pass


def is_missing_enrichment_error(message: str) -> bool:
    return "does not exist" in message and "grok_" in message


def _store_error(exc: Exception) -> ListingError:
    message = str(exc) or "Unknown error"
    if is_missing_enrichment_error(message):
        logger.error("enrichment columns missing: %s", message)
        return ListingError(MISSING_ENRICHMENT_MESSAGE)
    logger.error("listing query failed: %s", message)
    return ListingError(message)


async def _run(
    query: repository.ListingQuery,
) -> tuple[list[dict[str, Any]], int]:
    try:
        return await repository.fetch_listing(query)
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as exc:
        raise _store_error(exc) from exc


async def list_featured(params: ListingParams, *, now: datetime | None = None) -> schemas.FeaturedPage:
    query = repository.build_listing_query(
        params,
        eligibility=policy.featured_policy(),
        columns=repository.BASE_COLUMNS + repository.ENRICHMENT_COLUMNS,
        now=now,
    )
    rows, total = await _run(query)
    logger.info("featured page=%s size=%s sort=%s total=%s", params.page, params.page_size, params.sort, total)
    return schemas.FeaturedPage(
        items=[schemas.FeaturedAccountRecord.model_validate(row) for row in rows],
        total=total,
        page=params.page,
        page_size=params.page_size,
    )


async def list_discover(params: ListingParams, *, now: datetime | None = None) -> schemas.DiscoverPage:
    eligibility = policy.discover_policy()
    query = repository.build_listing_query(
        params,
        eligibility=eligibility,
        columns=repository.BASE_COLUMNS,
        now=now,
    )
    rows, total = await _run(query)
    logger.info(
        "discover policy=%s page=%s size=%s total=%s",
        eligibility.name,
        params.page,
        params.page_size,
        total,
    )
    return schemas.DiscoverPage(
        items=[schemas.AccountRecord.model_validate(row) for row in rows],
        total=total,
        page=params.page,
        page_size=params.page_size,
    )
