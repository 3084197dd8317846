"""
Pydantic schemas for the listing endpoints.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core import timefmt


class AccountRecord(BaseModel):
    registered_at: datetime
    registered_at_utc8: str = ""
    username: str | None = None
    handle: str
    followers_count: int | None = None
    bio: str | None = None
    category: str | None = None
    wallet_address: str | None = None

    @model_validator(mode="after")
    def _fill_display_time(self) -> "AccountRecord":
        # The display string is always derivable from the instant.
        if not self.registered_at_utc8:
            self.registered_at_utc8 = timefmt.to_display_minute(self.registered_at)
        return self


class FeaturedAccountRecord(AccountRecord):
    """
    Account plus the enrichment block.

    List fields keep None ("not analyzed yet") distinct from [] ("analyzed,
    nothing found").
    """

    grok_summary: str | None = None
    grok_recent_focus: list[str] | None = None
    grok_experience: list[str] | None = None
    grok_highlights: list[str] | None = None
    grok_crypto_attitude: str | None = None
    grok_checked_at: datetime | None = None

    @field_validator("grok_recent_focus", "grok_experience", "grok_highlights", mode="before")
    @classmethod
    def _decode_json_list(cls, value: Any) -> Any:
        # jsonb columns come back from asyncpg as text.
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except json.JSONDecodeError:
                return [value]
            return decoded
        return value


class _Page(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    page_size: int = Field(..., alias="pageSize")


class DiscoverPage(_Page):
    items: list[AccountRecord]


class FeaturedPage(_Page):
    items: list[FeaturedAccountRecord]


class ErrorResponse(BaseModel):
    error: str
