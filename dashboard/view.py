"""
View controller: owns one tab's fetched page, its selections and its
auto-refresh task.

Each fetch takes the next request generation. A response is applied only
while its generation is still the latest, so a slow older request can never
overwrite a newer page. Nothing is cancelled; stale responses are dropped.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from typing import Any, AsyncIterator, Awaitable, Callable

from . import client
from .filters import VIEW_DISCOVER, FilterState
from .query import query_for_state

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_S = 60.0

Fetcher = Callable[[str, str], Awaitable[client.PageResult]]


def refresh_interval_s() -> float:
    raw = os.environ.get("DASHBOARD_REFRESH_S", "").strip()
    if not raw:
        return DEFAULT_REFRESH_S
    try:
        return max(1.0, float(raw))
    except ValueError:
        return DEFAULT_REFRESH_S


def row_key(item: dict[str, Any]) -> str:
    return f"{item.get('handle')}-{item.get('registered_at')}"


class Selection:
    """At most one selected row key (expanded card, open wallet panel)."""

    def __init__(self) -> None:
        self.key: str | None = None

    def toggle(self, key: str) -> None:
        self.key = None if self.key == key else key

    def clear(self) -> None:
        self.key = None

    def is_selected(self, key: str) -> bool:
        return self.key is not None and self.key == key


class ListingView:
    def __init__(
        self,
        state: FilterState,
        *,
        fetcher: Fetcher | None = None,
        on_change: Callable[["ListingView"], None] | None = None,
    ) -> None:
        self.state = state
        self.on_change = on_change
        self._fetch = fetcher or client.fetch_page

        self.items: list[dict[str, Any]] = []
        self.total = 0
        self.loading = False
        self.error = ""

        self.expanded = Selection()
        self.wallet = Selection()

        self._issued = 0
        self._applied_query: str | None = None
        self._refresh_task: asyncio.Task | None = None

    @property
    def name(self) -> str:
        return self.state.view

    @property
    def generation(self) -> int:
        return self._issued

    @property
    def total_pages(self) -> int:
        return self.state.total_pages(self.total)

    def close_wallet(self) -> None:
        # A click anywhere outside the open panel.
        self.wallet.clear()

    def _is_current(self, generation: int) -> bool:
        return generation == self._issued

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def _apply(self, result: client.PageResult, query: str) -> None:
        old_keys = [row_key(item) for item in self.items]
        new_keys = [row_key(item) for item in result.items]
        if old_keys != new_keys:
            self.expanded.clear()
        if self.wallet.key is not None and self.wallet.key not in new_keys:
            self.wallet.clear()

        self.items = result.items
        self.total = result.total
        self.error = ""
        self._applied_query = query

    async def refresh(self, *, force: bool = False) -> bool:
        """
        Fetch the committed query. Returns True when a page was applied.

        Without `force`, nothing is sent if the serialized query equals the
        one behind the page already shown.
        """
        query = query_for_state(self.state)
        if not force and query == self._applied_query:
            return False

        self._issued += 1
        generation = self._issued
        self.loading = True

        result: client.PageResult | None = None
        error = ""
        try:
            result = await self._fetch(self.state.view, query)
        except client.ListingClientError as exc:
            error = str(exc) or "Failed to load."
        finally:
            if self._is_current(generation):
                self.loading = False

        if not self._is_current(generation):
            logger.debug("dropping superseded %s response (gen %s < %s)", self.name, generation, self._issued)
            return False

        if result is None:
            # Keep the previous page visible.
            self.error = error
        else:
            self._apply(result, query)
        self._notify()
        return result is not None

    async def _refresh_loop(self, interval_s: float) -> None:
        while True:
            await asyncio.sleep(interval_s)
            await self.refresh(force=True)

    def start_auto_refresh(self, interval_s: float | None = None) -> None:
        self.state.auto_refresh = True
        if self._refresh_task is not None and not self._refresh_task.done():
            return
        self._refresh_task = asyncio.create_task(self._refresh_loop(interval_s or refresh_interval_s()))

    async def stop_auto_refresh(self) -> None:
        self.state.auto_refresh = False
        task, self._refresh_task = self._refresh_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    @contextlib.asynccontextmanager
    async def auto_refresh(self, interval_s: float | None = None) -> AsyncIterator["ListingView"]:
        self.start_auto_refresh(interval_s)
        try:
            yield self
        finally:
            await self.stop_auto_refresh()

    async def deactivate(self) -> None:
        """
        Stop the timer and supersede any in-flight request.
        """
        await self.stop_auto_refresh()
        self._issued += 1
        self.loading = False


class Dashboard:
    """The two tabs; only the active one polls."""

    def __init__(self, views: dict[str, ListingView], *, active: str = VIEW_DISCOVER) -> None:
        if active not in views:
            raise ValueError(f"unknown view {active!r}")
        self.views = views
        self.active_name = active

    @property
    def active(self) -> ListingView:
        return self.views[self.active_name]

    async def switch_tab(self, name: str) -> ListingView:
        if name not in self.views:
            raise ValueError(f"unknown view {name!r}")
        if name == self.active_name:
            return self.active

        previous = self.active
        keep_polling = previous.state.auto_refresh
        await previous.deactivate()

        self.active_name = name
        current = self.active
        await current.refresh(force=True)
        if keep_polling:
            current.start_auto_refresh()
        return current

    async def close(self) -> None:
        for view in self.views.values():
            await view.deactivate()
