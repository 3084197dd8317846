"""
Terminal dashboard.

    tracker-dashboard discover --min-followers 10000 --category AI
    tracker-dashboard featured --sort registered_desc --expand some_handle --watch
    tracker-dashboard featured --interactive
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from functools import partial

from . import client
from .filters import (
    CATEGORY_MATCH_MODES,
    DEFAULT_PAGE_SIZE,
    SORT_TOKENS,
    VIEW_FEATURED,
    VIEWS,
    FilterDraft,
    FilterState,
    FilterValidationError,
)
from .render import render
from .view import Dashboard, ListingView, row_key

HELP_TEXT = """commands:
  n / p          next / previous page
  g PAGE         go to page
  t [VIEW]       switch tab (discover, featured)
  e HANDLE       expand or collapse a card
  w HANDLE       open or close a wallet panel
  c              close the wallet panel
  r              reload
  a              toggle auto-refresh
  q              quit"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tracker-dashboard", description="Browse newly registered accounts.")
    parser.add_argument("view", choices=VIEWS, nargs="?", default=VIEWS[0])
    parser.add_argument("--api-url", default=None, help="listing API base URL (default: $TRACKER_API_URL)")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE)
    parser.add_argument("--start", default="", help="registered from, UTC+8 (YYYY-MM-DDTHH:MM)")
    parser.add_argument("--end", default="", help="registered until, UTC+8 (YYYY-MM-DDTHH:MM)")
    parser.add_argument("--min-followers", default="")
    parser.add_argument("--max-followers", default="")
    parser.add_argument("--category", action="append", default=[], help="toggle a category; repeatable")
    parser.add_argument("--category-match", choices=CATEGORY_MATCH_MODES, default=None)
    parser.add_argument("--sort", choices=SORT_TOKENS, default=None, help="featured view only")
    parser.add_argument("--expand", metavar="HANDLE", default=None, help="expand this account's card")
    parser.add_argument("--show-wallet", metavar="HANDLE", default=None, help="show this account's full wallet")
    parser.add_argument("--watch", action="store_true", help="re-fetch on an interval until interrupted")
    parser.add_argument("--interactive", action="store_true", help="read navigation commands from stdin")
    parser.add_argument("--interval", type=float, default=None, help="auto-refresh seconds (default 60)")
    parser.add_argument("--log-level", default="WARNING")
    return parser


def build_state(args: argparse.Namespace) -> FilterState:
    state = FilterState(view=args.view, page_size=args.page_size)
    state.draft = FilterDraft(
        start=args.start,
        end=args.end,
        min_followers=args.min_followers,
        max_followers=args.max_followers,
    )
    state.apply()
    for category in args.category:
        state.toggle_category(category)
    if args.category_match:
        state.set_category_match(args.category_match)
    if args.sort and args.view == VIEW_FEATURED:
        state.set_sort(args.sort)
    state.go_to_page(args.page)
    return state


def _select(view: ListingView, args: argparse.Namespace) -> None:
    for item in view.items:
        if args.expand and item.get("handle") == args.expand and not view.expanded.is_selected(row_key(item)):
            view.expanded.toggle(row_key(item))
        if args.show_wallet and item.get("handle") == args.show_wallet and not view.wallet.is_selected(row_key(item)):
            view.wallet.toggle(row_key(item))


def _print(view: ListingView, args: argparse.Namespace) -> None:
    _select(view, args)
    print(render(view), flush=True)


async def run(args: argparse.Namespace) -> int:
    state = build_state(args)
    view = ListingView(state, fetcher=partial(client.fetch_page, base_url=args.api_url))
    await view.refresh(force=True)
    _print(view, args)
    if not args.watch:
        return 1 if view.error else 0

    view.on_change = lambda v: _print(v, args)
    async with view.auto_refresh(args.interval):
        # Runs until the process is interrupted.
        await asyncio.Event().wait()
    return 0


def build_dashboard(args: argparse.Namespace, fetcher=None) -> Dashboard:
    """Both tabs; the one named on the command line carries the flags."""
    fetcher = fetcher or partial(client.fetch_page, base_url=args.api_url)
    first = build_state(args)
    views = {first.view: ListingView(first, fetcher=fetcher)}
    for name in VIEWS:
        if name not in views:
            views[name] = ListingView(FilterState(view=name, page_size=first.page_size), fetcher=fetcher)
    return Dashboard(views, active=first.view)


def _toggle_handle(view: ListingView, handle: str, *, wallet: bool) -> bool:
    handle = handle.lstrip("@")
    for item in view.items:
        if item.get("handle") == handle:
            (view.wallet if wallet else view.expanded).toggle(row_key(item))
            return True
    return False


async def handle_command(dashboard: Dashboard, line: str) -> str | None:
    """
    Apply one interactive command to the active tab.

    Returns the text to print, or None to quit.
    """
    parts = line.split()
    if not parts:
        return render(dashboard.active)
    cmd, rest = parts[0].lower(), parts[1:]
    view = dashboard.active

    if cmd in ("q", "quit"):
        return None
    if cmd in ("h", "help", "?"):
        return HELP_TEXT
    if cmd in ("n", "next"):
        view.state.next_page(view.total)
        await view.refresh()
    elif cmd in ("p", "prev"):
        view.state.prev_page()
        await view.refresh()
    elif cmd == "g" and rest:
        try:
            page = int(rest[0])
        except ValueError:
            return f"not a page number: {rest[0]!r}"
        view.state.go_to_page(page, view.total)
        await view.refresh()
    elif cmd in ("t", "tab"):
        if rest:
            name = rest[0].lower()
        else:
            name = next(other for other in VIEWS if other != dashboard.active_name)
        if name not in dashboard.views:
            return f"unknown view {name!r}"
        view = await dashboard.switch_tab(name)
    elif cmd in ("e", "w") and rest:
        if not _toggle_handle(view, rest[0], wallet=cmd == "w"):
            return f"@{rest[0].lstrip('@')} is not on this page"
    elif cmd == "c":
        view.close_wallet()
    elif cmd == "r":
        await view.refresh(force=True)
    elif cmd == "a":
        if view.state.auto_refresh:
            await view.stop_auto_refresh()
        else:
            view.start_auto_refresh()
    else:
        return f"unknown command {line.strip()!r}\n{HELP_TEXT}"
    return render(view)


async def interactive(args: argparse.Namespace) -> int:
    dashboard = build_dashboard(args)

    def on_change(view: ListingView) -> None:
        # Command results are printed by the loop; this covers timer ticks.
        if view is dashboard.active and view.state.auto_refresh:
            print(render(view), flush=True)

    for view in dashboard.views.values():
        view.on_change = on_change
    try:
        await dashboard.active.refresh(force=True)
        print(render(dashboard.active), flush=True)
        print(HELP_TEXT, flush=True)
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            text = await handle_command(dashboard, line)
            if text is None:
                break
            print(text, flush=True)
    finally:
        await dashboard.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))
    try:
        return asyncio.run(interactive(args) if args.interactive else run(args))
    except FilterValidationError as exc:
        print(f"Invalid filter: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
