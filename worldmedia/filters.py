"""In-memory type / source / text filtering of a loaded channel list."""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import Channel

ALL = "all"


def _is_all(value: str) -> bool:
    return not value or value.strip().lower() == ALL


@dataclass(frozen=True)
class ChannelFilter:
    """Current filter control selections ("all" or "" means no restriction)."""

    type: str = ALL
    source: str = ALL
    text: str = ""

    def matches(self, channel: Channel) -> bool:
        if not _is_all(self.type) and channel.type.value != self.type.strip().lower():
            return False

        source_name = channel.source_name or ""
        if not _is_all(self.source) and source_name != self.source:
            return False

        search = self.text.strip().lower()
        if search and search not in channel.name.lower() and search not in source_name.lower():
            return False
        return True


def apply_filters(channels: list[Channel], channel_filter: ChannelFilter) -> list[Channel]:
    return [channel for channel in channels if channel_filter.matches(channel)]


@dataclass
class Facets:
    """Values offered by the type and source toggles (after the "all" option)."""

    types: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)

    def type_options(self) -> list[str]:
        return [ALL] + self.types

    def source_options(self) -> list[str]:
        return [ALL] + self.sources


def collect_facets(channels: list[Channel]) -> Facets:
    """Types in first-seen order, non-empty source names sorted."""
    types: list[str] = []
    sources: set[str] = set()
    for channel in channels:
        if channel.type.value not in types:
            types.append(channel.type.value)
        if channel.source_name:
            sources.add(channel.source_name)
    return Facets(types=types, sources=sorted(sources))
