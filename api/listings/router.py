"""
Listing API endpoints.

Both endpoints take the same filters; only /api/featured accepts `sort`.
Parameters are read as raw strings and clamped or ignored by `params`,
so a malformed value never turns into a 422.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from . import params as listing_params
from . import schemas, service

router = APIRouter()

ERROR_RESPONSES = {500: {"model": schemas.ErrorResponse}}


def discover_params(
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    min_followers: str | None = Query(default=None, alias="minFollowers"),
    max_followers: str | None = Query(default=None, alias="maxFollowers"),
    categories: str | None = Query(default=None),
    category_match: str | None = Query(default=None, alias="categoryMatch"),
) -> listing_params.ListingParams:
    return listing_params.parse_listing_params(
        page=page,
        page_size=page_size,
        start=start,
        end=end,
        min_followers=min_followers,
        max_followers=max_followers,
        categories=categories,
        category_match=category_match,
    )


def featured_params(
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    min_followers: str | None = Query(default=None, alias="minFollowers"),
    max_followers: str | None = Query(default=None, alias="maxFollowers"),
    categories: str | None = Query(default=None),
    category_match: str | None = Query(default=None, alias="categoryMatch"),
    sort: str | None = Query(default=None),
) -> listing_params.ListingParams:
    return listing_params.parse_listing_params(
        page=page,
        page_size=page_size,
        start=start,
        end=end,
        min_followers=min_followers,
        max_followers=max_followers,
        categories=categories,
        category_match=category_match,
        sort=sort,
    )


@router.get("/api/records", responses=ERROR_RESPONSES)
async def list_records(
    params: listing_params.ListingParams = Depends(discover_params),
) -> dict:
    result = await service.list_discover(params)
    return result.model_dump(mode="json", by_alias=True)


@router.get("/api/featured", responses=ERROR_RESPONSES)
async def list_featured(
    params: listing_params.ListingParams = Depends(featured_params),
) -> dict:
    result = await service.list_featured(params)
    return result.model_dump(mode="json", by_alias=True)
