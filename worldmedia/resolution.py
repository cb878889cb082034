"""
Reconnect stored references and deep links to live channel records.

Favorites, trash entries and shareable links keep only the composite
(country, slug) key, never the record itself, so they are matched against
the current feed (or the aggregate catalog) each time they are used.
When several channels share a key, the first one in feed order wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Union
from urllib.parse import parse_qs, urlencode

from .models import Channel, FavoriteChannel, TrashEntry, channel_key
from .taxonomy.country_codes import to_map_iso2

UNAVAILABLE_MESSAGE = "This channel is no longer available."


def resolve(feed: Iterable[Channel], iso: str, slug: str) -> Optional[Channel]:
    """First channel whose country and slug match, case-insensitively."""
    key = channel_key(iso, slug)
    for channel in feed:
        if channel.key == key:
            return channel
    return None


def find_by_slug(feed: Iterable[Channel], slug: str) -> Optional[Channel]:
    """First channel with the slug, whatever its country."""
    wanted = (slug or "").strip().lower()
    if not wanted:
        return None
    for channel in feed:
        if channel.slug == wanted:
            return channel
    return None


def resolve_entry(catalog: Iterable[Channel], entry: Union[FavoriteChannel, TrashEntry]) -> Optional[Channel]:
    return resolve(catalog, entry.iso, entry.slug)


@dataclass(frozen=True)
class DeepLink:
    """?country=<ISO2 or XX>&channel=<slug>"""

    country: Optional[str] = None
    channel: Optional[str] = None

    def to_query(self) -> str:
        return build_deep_link(self.country, self.channel)


def _first(values: Union[str, list[str], None]) -> str:
    if isinstance(values, list):
        return values[0] if values else ""
    return values or ""


def parse_deep_link(query: Union[str, Mapping[str, Union[str, list[str]]]]) -> DeepLink:
    """
    Parse deep-link state from a query string or a parameter mapping.

    The country must come out as a 2-letter code (3-letter codes are mapped
    to their 2-letter form when known); anything else means no selection.
    """
    if isinstance(query, str):
        params: Mapping[str, Union[str, list[str]]] = parse_qs(query.lstrip("?"), keep_blank_values=True)
    else:
        params = query

    country = to_map_iso2(_first(params.get("country")))
    channel = _first(params.get("channel")).strip()
    return DeepLink(
        country=country if len(country) == 2 else None,
        channel=channel or None,
    )


def build_deep_link(country: Optional[str] = None, channel: Optional[str] = None) -> str:
    """Query string (without '?') for the current selection."""
    params = {}
    code = (country or "").strip().upper()
    if len(code) == 2:
        params["country"] = code
    if channel:
        params["channel"] = channel
    return urlencode(params)


def resolve_deep_link(feed: list[Channel], link: DeepLink) -> Optional[Channel]:
    """
    Channel a deep link points at within an already loaded country feed.

    The full (country, slug) key is tried first; the feed is already scoped
    to the country, so a slug-only match is accepted next (channels from the
    3-letter folder may carry the 3-letter code).
    """
    if not link.channel:
        return None
    if link.country:
        channel = resolve(feed, link.country, link.channel)
        if channel is not None:
            return channel
    return find_by_slug(feed, link.channel)
