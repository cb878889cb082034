"""Global documents: category name list and the flattened channel catalog."""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import FragmentError
from ..models import Channel
from .fragments import CATALOG_PATH, CATEGORIES_PATH, FragmentSource, parse_fragment

logger = logging.getLogger(__name__)


def filter_categories(names: list[str], text: str = "") -> list[str]:
    """Case-insensitive substring search used by the category picker."""
    query = (text or "").strip().lower()
    if not query:
        return list(names)
    return [name for name in names if query in name.lower()]


class CatalogLoader:
    """Reads data/cat_channels/categories.json and data/channels.json."""

    def __init__(self, source: FragmentSource):
        self.source = source
        self._channels: Optional[list[Channel]] = None

    async def load_categories(self) -> list[str]:
        try:
            data = await self.source.fetch_json(CATEGORIES_PATH)
        except FragmentError as e:
            logger.warning(f"Could not load categories: {e}")
            return []
        if not isinstance(data, list):
            return []

        names: list[str] = []
        for item in data:
            if isinstance(item, str) and item.strip() and item not in names:
                names.append(item)
        return names

    async def load_all_channels(self) -> list[Channel]:
        """
        Every channel across sources and countries, for resolving favorites.

        Cached after the first successful load; a failed load returns an
        empty list and is retried on the next call.
        """
        if self._channels is not None:
            return self._channels

        try:
            data = await self.source.fetch_json(CATALOG_PATH)
        except FragmentError as e:
            logger.warning(f"Could not load channel catalog: {e}")
            return []
        if data is None:
            logger.debug("No channel catalog available")
            return []

        self._channels = parse_fragment(data)
        logger.info(f"Channel catalog: {len(self._channels)} channels")
        return self._channels

    @property
    def cached_channels(self) -> list[Channel]:
        return self._channels or []

    def invalidate(self) -> None:
        self._channels = None
