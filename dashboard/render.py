"""
Plain-text rendering for the two views.

Discover is a table; featured is a list of cards with one expandable at a
time. Both show a loading line while a fetch is pending and a placeholder
when the page is empty.
"""

from __future__ import annotations

from typing import Any

from .filters import VIEW_FEATURED
from .view import ListingView, row_key

LOADING_TEXT = "Loading..."
EMPTY_TEXT = "No data (only the last 3 days are shown by default)"
NOT_ANALYZED_TEXT = "not analyzed yet"

BIO_WIDTH = 60

TABLE_COLUMNS = (
    ("Registered (UTC+8)", "<"),
    ("Username", "<"),
    ("Handle", "<"),
    ("Followers", ">"),
    ("Bio", "<"),
    ("Category", "<"),
    ("Wallet", "<"),
)


def format_number(value: int | None) -> str:
    if value is None:
        return ""
    return f"{value:,}"


def shorten(text: str | None, width: int) -> str:
    text = " ".join((text or "").split())
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"


def short_wallet(address: str | None) -> str:
    address = (address or "").strip()
    if len(address) <= 12:
        return address
    return f"{address[:6]}…{address[-4:]}"


def _table_row(item: dict[str, Any], *, wallet_open: bool) -> list[str]:
    wallet = item.get("wallet_address") or ""
    return [
        str(item.get("registered_at_utc8") or ""),
        str(item.get("username") or ""),
        f"@{item.get('handle')}",
        format_number(item.get("followers_count")),
        shorten(item.get("bio"), BIO_WIDTH),
        str(item.get("category") or "/"),
        wallet if wallet_open else short_wallet(wallet),
    ]


def render_table(view: ListingView) -> str:
    headers = [title for title, _ in TABLE_COLUMNS]
    rows = [_table_row(item, wallet_open=view.wallet.is_selected(row_key(item))) for item in view.items]

    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

    def line(cells: list[str]) -> str:
        parts = [f"{cell:{align}{width}}" for cell, (_, align), width in zip(cells, TABLE_COLUMNS, widths)]
        return "  ".join(parts).rstrip()

    out = [line(headers), "  ".join("-" * w for w in widths)]
    if not rows:
        out.append(LOADING_TEXT if view.loading else EMPTY_TEXT)
    out.extend(line(row) for row in rows)
    return "\n".join(out)


def _list_section(title: str, values: list[str] | None) -> list[str]:
    if values is None:
        return [f"    {title}: {NOT_ANALYZED_TEXT}"]
    if not values:
        return [f"    {title}: (none)"]
    return [f"    {title}:"] + [f"      - {value}" for value in values]


def render_card(index: int, item: dict[str, Any], *, expanded: bool) -> str:
    name = f" ({item['username']})" if item.get("username") else ""
    header = (
        f"[{index}] @{item.get('handle')}{name} · "
        f"{format_number(item.get('followers_count'))} followers · "
        f"{item.get('category') or '/'} · {item.get('registered_at_utc8') or ''}"
    )
    summary = item.get("grok_summary")
    lines = [header, f"    {summary if summary else NOT_ANALYZED_TEXT}"]
    if expanded:
        lines += _list_section("Recent focus", item.get("grok_recent_focus"))
        lines += _list_section("Experience", item.get("grok_experience"))
        lines += _list_section("Highlights", item.get("grok_highlights"))
        attitude = item.get("grok_crypto_attitude")
        lines.append(f"    Crypto attitude: {attitude if attitude else NOT_ANALYZED_TEXT}")
    return "\n".join(lines)


def render_cards(view: ListingView) -> str:
    if not view.items:
        return LOADING_TEXT if view.loading else EMPTY_TEXT
    first = (view.state.page - 1) * view.state.page_size + 1
    cards = [
        render_card(first + i, item, expanded=view.expanded.is_selected(row_key(item)))
        for i, item in enumerate(view.items)
    ]
    return "\n\n".join(cards)


def render_footer(view: ListingView) -> str:
    if view.loading:
        return LOADING_TEXT
    return f"Total {view.total}, page {view.state.page} / {view.total_pages}"


def render(view: ListingView) -> str:
    body = render_cards(view) if view.name == VIEW_FEATURED else render_table(view)
    parts = [body, "", render_footer(view)]
    if view.error:
        parts.append(f"Error: {view.error}")
    return "\n".join(parts)
