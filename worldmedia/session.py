"""
Browsing session: current selection, its feed, the open channel, and the
stores that act on them.

Every selection change bumps a generation counter. A load that finishes
after a newer selection has started is discarded, so a slow fetch can never
overwrite the view of the selection the user is looking at now.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Literal, Mapping, Optional, Union

from .config import Settings
from .favorites import FavoritesStore
from .filters import ChannelFilter, Facets, apply_filters, collect_facets
from .loaders.catalog import CatalogLoader
from .loaders.feed import FeedLoader
from .loaders.fragments import open_source
from .models import UNKNOWN_ISO, Channel, FavoriteChannel, TrashEntry
from .playback import PlaybackPlan, plan_playback
from .resolution import DeepLink, parse_deep_link, resolve, resolve_deep_link
from .signals import Signal
from .storage import open_state_store
from .trash import TrashStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    kind: Literal["country", "category"]
    value: str

    @property
    def is_country(self) -> bool:
        return self.kind == "country"


@dataclass
class FeedView:
    """What the channel list shows for one selection."""

    selection: Selection
    generation: int
    merged: list[Channel] = field(default_factory=list)  # before trash filtering
    channels: list[Channel] = field(default_factory=list)
    facets: Facets = field(default_factory=Facets)

    @property
    def empty(self) -> bool:
        return not self.channels


class Session:
    def __init__(
        self,
        loader: FeedLoader,
        favorites: FavoritesStore,
        trash: TrashStore,
        catalog: Optional[CatalogLoader] = None,
    ):
        self.loader = loader
        self.favorites = favorites
        self.trash = trash
        self.catalog = catalog

        self.generation = 0
        self.selection: Optional[Selection] = None
        self.view: Optional[FeedView] = None
        self.channel_filter = ChannelFilter()
        self.current_channel: Optional[Channel] = None

        self.updated: Signal[FeedView] = Signal("feed-updated")
        self._unlisten_trash = trash.changed.listen(self._on_trash_changed)

    def close(self) -> None:
        self._unlisten_trash()

    # -------------------------
    # Selection
    # -------------------------
    async def select_country(self, code: str) -> Optional[FeedView]:
        code = (code or "").strip().upper()
        return await self._select(Selection("country", code), lambda: self.loader.fetch_country(code))

    async def select_unknown(self) -> Optional[FeedView]:
        return await self.select_country(UNKNOWN_ISO)

    async def select_category(self, name: str) -> Optional[FeedView]:
        name = (name or "").strip()
        return await self._select(Selection("category", name), lambda: self.loader.fetch_category(name))

    async def refresh(self) -> Optional[FeedView]:
        """Reload the current selection (retry on demand)."""
        if self.selection is None:
            return None
        if self.selection.is_country:
            return await self.select_country(self.selection.value)
        return await self.select_category(self.selection.value)

    async def _select(
        self, selection: Selection, fetch: Callable[[], Awaitable[list[Channel]]]
    ) -> Optional[FeedView]:
        self.generation += 1
        generation = self.generation
        self.selection = selection

        merged = await fetch()
        if generation != self.generation:
            logger.debug(f"Discarding stale feed for {selection.kind} {selection.value!r}")
            return None

        self.view = self._build_view(selection, generation, merged)
        self.updated.emit(self.view)
        return self.view

    def _build_view(self, selection: Selection, generation: int, merged: list[Channel]) -> FeedView:
        channels = self.loader.exclude(merged)
        return FeedView(
            selection=selection,
            generation=generation,
            merged=merged,
            channels=channels,
            facets=collect_facets(channels),
        )

    def _on_trash_changed(self, entries: list[TrashEntry]) -> None:
        # Trash is global: re-filter whatever is currently shown
        if self.view is None:
            return
        self.view = self._build_view(self.view.selection, self.view.generation, self.view.merged)
        self.updated.emit(self.view)

    # -------------------------
    # Filtering
    # -------------------------
    def set_filter(self, type: Optional[str] = None, source: Optional[str] = None, text: Optional[str] = None) -> None:
        current = self.channel_filter
        self.channel_filter = ChannelFilter(
            type=current.type if type is None else type,
            source=current.source if source is None else source,
            text=current.text if text is None else text,
        )

    def visible_channels(self) -> list[Channel]:
        if self.view is None:
            return []
        return apply_filters(self.view.channels, self.channel_filter)

    # -------------------------
    # Player
    # -------------------------
    def open_channel(self, channel: Channel) -> PlaybackPlan:
        self.current_channel = channel
        return plan_playback(channel)

    def close_channel(self) -> None:
        self.current_channel = None

    @property
    def deep_link(self) -> DeepLink:
        """URL state: the selected country, plus the open channel's slug."""
        if self.selection is None or not self.selection.is_country or len(self.selection.value) != 2:
            return DeepLink()
        slug = self.current_channel.slug if self.current_channel is not None else None
        return DeepLink(country=self.selection.value, channel=slug)

    async def apply_deep_link(self, query: Union[str, Mapping]) -> Optional[Channel]:
        """Restore a shared link: select its country, then open its channel if still listed."""
        link = parse_deep_link(query)
        if not link.country:
            return None
        view = await self.select_country(link.country)
        if view is None:
            return None

        channel = resolve_deep_link(view.channels, link)
        if channel is not None:
            self.open_channel(channel)
        elif link.channel:
            logger.info(f"Deep link channel {link.channel!r} not found in {link.country}")
        return channel

    # -------------------------
    # Favorites / trash
    # -------------------------
    def toggle_favorite(self, channel: Channel) -> bool:
        """Add or remove a channel; returns the new membership."""
        iso, slug = channel.key
        if self.favorites.is_favorite(iso, slug):
            self.favorites.remove_channel(iso, slug)
            return False
        self.favorites.add(channel)
        return True

    def toggle_trash(self, channel: Channel) -> bool:
        """Trash or restore a channel; trashing the open channel closes the player."""
        iso, slug = channel.key
        if self.trash.has(iso, slug):
            self.trash.remove(iso, slug)
            return False
        if self.current_channel is not None and self.current_channel.key == channel.key:
            self.close_channel()
        self.trash.add(channel)
        return True

    async def resolve_favorite(self, entry: FavoriteChannel) -> Optional[Channel]:
        """
        Live record for a favorite, or None ("no longer available").

        Looks in the aggregate catalog when one is configured, otherwise in
        the feed currently shown.
        """
        if self.catalog is not None:
            candidates = await self.catalog.load_all_channels()
        else:
            candidates = self.view.channels if self.view is not None else []
        return resolve(candidates, entry.iso, entry.slug)


def open_session(config: Settings) -> Session:
    """Wire a session from configuration (fragment source, state store, stores)."""
    source = open_source(config.data_root, timeout_seconds=config.request_timeout_seconds)
    state = open_state_store(config.state_url)
    trash = TrashStore(state, key=config.trash_key)
    favorites = FavoritesStore(state, key=config.favorites_key)
    loader = FeedLoader(
        source,
        config.source_names,
        exclusions=trash,
        parallel=config.parallel_fetch,
        max_concurrent=config.max_concurrent_fetches,
    )
    return Session(loader, favorites, trash, catalog=CatalogLoader(source))
