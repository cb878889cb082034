"""Merge per-source fragments for a country or category into one feed."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional, Protocol, Sequence

from ..errors import FragmentError
from ..models import Channel
from ..taxonomy.country_codes import resolve_codes
from .fragments import (
    FragmentPath,
    FragmentSource,
    category_fragment_path,
    country_fragment_path,
    format_path,
    parse_fragment,
)

logger = logging.getLogger(__name__)


class ChannelExclusions(Protocol):
    def filter(self, channels: list[Channel]) -> list[Channel]:
        ...


def country_plan(codes: Sequence[str], source_names: Sequence[str]) -> list[FragmentPath]:
    """Fragment paths in merge order: candidate code major, source name minor."""
    return [country_fragment_path(code, name) for code in codes for name in source_names]


def category_plan(category: str, source_names: Sequence[str]) -> list[FragmentPath]:
    return [category_fragment_path(category, name) for name in source_names]


def merge_channels(fragments: Iterable[list[Channel]]) -> list[Channel]:
    """
    Concatenate fragments, keeping the first channel seen for each url.

    Channels without a url are always kept; they are never duplicates of
    each other.
    """
    seen_urls: set[str] = set()
    merged: list[Channel] = []
    for channels in fragments:
        for channel in channels:
            if not channel.url:
                merged.append(channel)
                continue
            if channel.url in seen_urls:
                continue
            seen_urls.add(channel.url)
            merged.append(channel)
    return merged


class FeedLoader:
    """
    Load the deduplicated, trash-filtered channel list for one selection.

    Missing fragments are normal (not every source covers every country or
    category) and contribute nothing; unreadable ones are logged and skipped.
    """

    def __init__(
        self,
        source: FragmentSource,
        source_names: Sequence[str],
        exclusions: Optional[ChannelExclusions] = None,
        parallel: bool = False,
        max_concurrent: int = 8,
    ):
        self.source = source
        self.source_names = list(source_names)
        self.exclusions = exclusions
        self.parallel = parallel
        self.max_concurrent = max(1, max_concurrent)

    async def load_country(self, code: str) -> list[Channel]:
        """Channels for a 2- or 3-letter country code (both ISO forms probed)."""
        return self.exclude(await self.fetch_country(code))

    async def load_category(self, category: str) -> list[Channel]:
        return self.exclude(await self.fetch_category(category))

    async def load_paths(self, paths: Sequence[FragmentPath]) -> list[Channel]:
        return self.exclude(await self.fetch_paths(paths))

    async def fetch_country(self, code: str) -> list[Channel]:
        """Merged country feed before trash filtering."""
        return await self.fetch_paths(country_plan(resolve_codes(code), self.source_names))

    async def fetch_category(self, category: str) -> list[Channel]:
        category = (category or "").strip()
        if not category:
            return []
        return await self.fetch_paths(category_plan(category, self.source_names))

    async def fetch_paths(self, paths: Sequence[FragmentPath]) -> list[Channel]:
        if not paths:
            return []

        fragments = await self._fetch_all(paths)
        channels = merge_channels(fragments)
        logger.info(
            f"Merged {len(channels)} channels from "
            f"{sum(1 for f in fragments if f)}/{len(paths)} fragments"
        )
        return channels

    def exclude(self, channels: list[Channel]) -> list[Channel]:
        """Apply the trash (or any other exclusion list) to a merged feed."""
        if self.exclusions is None:
            return list(channels)
        return self.exclusions.filter(channels)

    async def fetch_fragment(self, path: FragmentPath) -> list[Channel]:
        """Channels of one fragment; missing or broken fragments are empty."""
        try:
            data = await self.source.fetch_json(path)
        except FragmentError as e:
            logger.warning(f"Skipping fragment {e}")
            return []

        if data is None:
            logger.debug(f"No fragment at {format_path(path)}")
            return []
        if not isinstance(data, dict) or not isinstance(data.get("channels"), list):
            logger.warning(f"Fragment {format_path(path)} has no channel list")
            return []
        return parse_fragment(data)

    async def _fetch_all(self, paths: Sequence[FragmentPath]) -> list[list[Channel]]:
        if not self.parallel:
            return [await self.fetch_fragment(path) for path in paths]

        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def bounded(path: FragmentPath) -> list[Channel]:
            async with semaphore:
                return await self.fetch_fragment(path)

        # gather returns results in plan order, whatever the arrival order
        return list(await asyncio.gather(*(bounded(path) for path in paths)))
