"""
Command-line access to feeds, favorites and trash.

Usage:
    python -m worldmedia codes fra
    python -m worldmedia channels --country FR --type tv --search news
    python -m worldmedia categories --search music
    python -m worldmedia open "?country=FR&channel=tf1"
    python -m worldmedia favorites add FR tf1
    python -m worldmedia trash list
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional

from .config import Settings, settings
from .favorites import walk
from .filters import ChannelFilter, apply_filters
from .loaders.catalog import filter_categories
from .loaders.fragments import HttpFragmentSource
from .models import Channel, FavoriteFolder, display_iso
from .playback import plan_playback, source_label
from .resolution import UNAVAILABLE_MESSAGE, find_by_slug, resolve
from .session import Session, open_session
from .taxonomy.country_codes import resolve_codes

logger = logging.getLogger(__name__)


def format_channel(channel: Channel) -> str:
    line = f"  {channel.display_iso:3} {channel.slug:30} {channel.type.value:8} {channel.name}"
    label = source_label(channel)
    if label:
        line += f"  [{label}]"
    return line


async def find_channel(session: Session, country: str, slug: str) -> Optional[Channel]:
    """Channel by country + slug from that country's feed."""
    view = await session.select_country(country)
    if view is None:
        return None
    return resolve(view.channels, country, slug) or find_by_slug(view.channels, slug)


def cmd_codes(session: Session, args: argparse.Namespace) -> int:
    codes = resolve_codes(args.code)
    print(" ".join(codes) if codes else "(no candidate codes)")
    return 0


async def cmd_channels(session: Session, args: argparse.Namespace) -> int:
    if args.category:
        view = await session.select_category(args.category)
        empty_text = "No channels for this category."
    else:
        view = await session.select_country(args.country)
        empty_text = "No channels for this country."

    if view is None or view.empty:
        print(empty_text)
        return 0

    channel_filter = ChannelFilter(type=args.type, source=args.source, text=args.search)
    channels = apply_filters(view.channels, channel_filter)
    print(f"{len(channels)}/{len(view.channels)} channels")
    print(f"  types:   {', '.join(view.facets.type_options())}")
    print(f"  sources: {', '.join(view.facets.source_options())}")
    for channel in channels:
        print(format_channel(channel))
    return 0


async def cmd_categories(session: Session, args: argparse.Namespace) -> int:
    if session.catalog is None:
        return 0
    names = filter_categories(await session.catalog.load_categories(), args.search)
    if not names:
        print("No categories.")
    for name in names:
        print(name)
    return 0


async def cmd_open(session: Session, args: argparse.Namespace) -> int:
    channel = await session.apply_deep_link(args.query)
    if session.selection is None:
        print("No country in link.")
        return 0
    if channel is None:
        view = session.view
        count = len(view.channels) if view is not None else 0
        print(f"{session.selection.value}: {count} channels, nothing to open")
        return 0

    plan = plan_playback(channel)
    print(format_channel(channel))
    print(f"  player: {plan.kind.value}")
    print(f"  src:    {plan.src or '-'}")
    if plan.error:
        print(f"  ⚠️  {plan.error}")
    print(f"  link:   ?{session.deep_link.to_query()}")
    return 0


async def cmd_favorites(session: Session, args: argparse.Namespace) -> int:
    store = session.favorites
    action = args.action

    if action == "list":
        if not store.items:
            print("No favorites.")
            return 0
        catalog = await session.catalog.load_all_channels() if session.catalog else []
        depth = {}
        for entry, parent, _ in walk(store.items):
            indent = depth.get(id(parent), 0)
            if isinstance(entry, FavoriteFolder):
                print(f"{'  ' * indent}📁 {entry.name} ({entry.id})")
                depth[id(entry.children)] = indent + 1
                continue
            live = resolve(catalog, entry.iso, entry.slug)
            status = "" if live else f"  ({UNAVAILABLE_MESSAGE})"
            print(f"{'  ' * indent}★ {display_iso(entry.iso)}/{entry.slug} {entry.name} ({entry.id}){status}")
        return 0

    if action == "add":
        channel = await find_channel(session, args.iso, args.slug)
        if channel is None:
            print(UNAVAILABLE_MESSAGE)
            return 0
        entry = store.add(channel)
        print(f"Added {entry.id}" if entry else "Already in favorites.")
        return 0

    if action == "folder":
        folder = store.add_folder(args.name)
        print(f"Created folder {folder.id}")
        return 0

    if action == "remove":
        changed = store.remove(args.id)
    elif action == "move":
        changed = store.move_to_folder(args.id, args.folder_id)
    elif action == "top":
        changed = store.move_to_top_level(args.id)
    else:
        changed = store.move_up_down(args.id, action)
    print("Done." if changed else "Nothing changed.")
    return 0


async def cmd_trash(session: Session, args: argparse.Namespace) -> int:
    store = session.trash
    action = args.action

    if action == "list":
        if not len(store):
            print("Trash is empty.")
        for entry in store.entries:
            print(f"  {entry.iso}/{entry.slug} {entry.name}")
        return 0

    if action == "add":
        channel = await find_channel(session, args.iso, args.slug)
        if channel is None:
            print(UNAVAILABLE_MESSAGE)
            return 0
        print("Trashed." if store.add(channel) else "Already in trash.")
    elif action == "restore":
        print("Restored." if store.remove(args.iso, args.slug) else "Not in trash.")
    else:
        store.clear()
        print("Trash emptied.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="worldmedia", description="Browse WorldMedia channel data")
    parser.add_argument("--data-root", help="data directory or base URL (default from settings)")
    parser.add_argument("--state-url", help="state database URL, or 'memory'")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("codes", help="country codes probed for a country")
    p.add_argument("code")

    p = sub.add_parser("channels", help="list a country's or category's channels")
    scope = p.add_mutually_exclusive_group(required=True)
    scope.add_argument("--country")
    scope.add_argument("--category")
    p.add_argument("--type", default="all", choices=["all", "tv", "radio", "youtube", "webcam"])
    p.add_argument("--source", default="all")
    p.add_argument("--search", default="")

    p = sub.add_parser("categories", help="list category names")
    p.add_argument("--search", default="")

    p = sub.add_parser("open", help="resolve a ?country=..&channel=.. link")
    p.add_argument("query")

    fav = sub.add_parser("favorites", help="manage favorites").add_subparsers(dest="action", required=True)
    fav.add_parser("list")
    p = fav.add_parser("add")
    p.add_argument("iso")
    p.add_argument("slug")
    p = fav.add_parser("remove")
    p.add_argument("id")
    p = fav.add_parser("folder")
    p.add_argument("name", nargs="?", default="")
    p = fav.add_parser("move")
    p.add_argument("id")
    p.add_argument("folder_id")
    for name in ("top", "up", "down"):
        p = fav.add_parser(name)
        p.add_argument("id")

    trash = sub.add_parser("trash", help="manage trash").add_subparsers(dest="action", required=True)
    trash.add_parser("list")
    trash.add_parser("empty")
    for name in ("add", "restore"):
        p = trash.add_parser(name)
        p.add_argument("iso")
        p.add_argument("slug")

    return parser


COMMANDS = {
    "channels": cmd_channels,
    "categories": cmd_categories,
    "open": cmd_open,
    "favorites": cmd_favorites,
    "trash": cmd_trash,
}


async def dispatch(session: Session, args: argparse.Namespace) -> int:
    command = COMMANDS[args.command]
    source = session.loader.source
    if isinstance(source, HttpFragmentSource):
        # One connection pool for every fragment the command fetches
        async with source:
            return await command(session, args)
    return await command(session, args)


def run(args: argparse.Namespace, config: Settings) -> int:
    overrides = {}
    if args.data_root:
        overrides["data_root"] = args.data_root
    if args.state_url:
        overrides["state_url"] = args.state_url
    session = open_session(config.model_copy(update=overrides))

    try:
        if args.command == "codes":
            return cmd_codes(session, args)
        return asyncio.run(dispatch(session, args))
    finally:
        session.close()


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s [%(levelname)s] %(message)s')
    return run(args, settings)


if __name__ == "__main__":
    sys.exit(main())
