"""Trash: a flat list of (country, slug) pairs hidden from every channel list."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from .models import Channel, TrashEntry, channel_key
from .signals import Signal
from .storage import DocumentStore, load_json, save_json

logger = logging.getLogger(__name__)


def decode_trash(data: object) -> list[TrashEntry]:
    """Trash list from a decoded document; malformed entries are skipped."""
    if not isinstance(data, list):
        return []

    entries = []
    dropped = 0
    for item in data:
        try:
            entries.append(TrashEntry.model_validate(item))
        except ValidationError:
            dropped += 1
    if dropped:
        logger.warning(f"Ignoring {dropped} malformed trash entries")
    return entries


class TrashStore:
    """
    Persistent exclusion list.

    Every mutation persists the whole list and then emits `changed` with the
    new entries; observers are expected to reload the current feed.
    """

    def __init__(self, store: DocumentStore, key: str = "worldmedia-trash"):
        self.store = store
        self.key = key
        self.changed: Signal[list[TrashEntry]] = Signal("trash-changed")
        self._entries = decode_trash(load_json(store, key))

    @property
    def entries(self) -> list[TrashEntry]:
        return list(self._entries)

    def has(self, iso: str, slug: str) -> bool:
        key = channel_key(iso, slug)
        return any(entry.key == key for entry in self._entries)

    def contains(self, channel: Channel) -> bool:
        return self.has(channel.iso, channel.slug)

    def add(self, channel: Channel) -> bool:
        """Trash a channel; no-op when its composite key is already present."""
        iso, slug = channel.key
        if self.has(iso, slug):
            return False
        entries = self._entries + [TrashEntry(iso=iso, slug=slug, name=channel.name or "Channel")]
        self._commit(entries)
        logger.debug(f"Trashed {iso}/{slug}")
        return True

    def remove(self, iso: str, slug: str) -> bool:
        """Restore a channel."""
        key = channel_key(iso, slug)
        entries = [entry for entry in self._entries if entry.key != key]
        if len(entries) == len(self._entries):
            return False
        self._commit(entries)
        logger.debug(f"Restored {key[0]}/{key[1]}")
        return True

    def clear(self) -> None:
        self._commit([])

    def filter(self, channels: list[Channel]) -> list[Channel]:
        """Drop every channel whose composite key is trashed."""
        if not self._entries:
            return list(channels)
        keys = {entry.key for entry in self._entries}
        return [ch for ch in channels if ch.key not in keys]

    def _commit(self, entries: list[TrashEntry]) -> None:
        save_json(self.store, self.key, [entry.model_dump() for entry in entries])
        self._entries = entries
        self.changed.emit(self.entries)

    def __len__(self) -> int:
        return len(self._entries)
