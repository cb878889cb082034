"""
Favorites: an ordered forest of channel references and folders.

The module-level functions are pure tree transforms over a list of top-level
entries. They mutate the list they are given and report whether anything
changed. FavoritesStore applies them to a copy of the persisted document and
commits the copy only when the transform succeeded, so every store operation
is one read-modify-write.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator, Literal, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from .models import (
    Channel,
    FavoriteChannel,
    FavoriteEntry,
    FavoriteFolder,
    FavoritesDocument,
    channel_key,
)
from .signals import Signal
from .storage import DocumentStore, load_json, save_json

logger = logging.getLogger(__name__)

Direction = Literal["up", "down"]
T = TypeVar("T")

FAVORITE_ENTRY: TypeAdapter[FavoriteEntry] = TypeAdapter(FavoriteEntry)


def walk(items: list[FavoriteEntry]) -> Iterator[tuple[FavoriteEntry, list[FavoriteEntry], int]]:
    """Depth-first (entry, parent list, index): a folder comes right before its children."""
    for index, entry in enumerate(items):
        yield entry, items, index
        if isinstance(entry, FavoriteFolder):
            yield from walk(entry.children)


def flatten_channels(items: list[FavoriteEntry]) -> list[FavoriteChannel]:
    return [entry for entry, _, _ in walk(items) if isinstance(entry, FavoriteChannel)]


def find_entry(items: list[FavoriteEntry], entry_id: str) -> Optional[tuple[list[FavoriteEntry], int]]:
    """Parent list and index of an entry, wherever it sits in the forest."""
    for entry, parent, index in walk(items):
        if entry.id == entry_id:
            return parent, index
    return None


def find_folder(items: list[FavoriteEntry], folder_id: str) -> Optional[FavoriteFolder]:
    for entry, _, _ in walk(items):
        if isinstance(entry, FavoriteFolder) and entry.id == folder_id:
            return entry
    return None


def contains_key(items: list[FavoriteEntry], iso: str, slug: str) -> bool:
    key = channel_key(iso, slug)
    return any(entry.key == key for entry in flatten_channels(items))


def detach(items: list[FavoriteEntry], entry_id: str) -> Optional[FavoriteEntry]:
    """Remove an entry (with its subtree) and return it."""
    location = find_entry(items, entry_id)
    if location is None:
        return None
    parent, index = location
    return parent.pop(index)


def add_channel(items: list[FavoriteEntry], channel: Channel) -> Optional[FavoriteChannel]:
    iso, slug = channel.key
    if contains_key(items, iso, slug):
        return None
    entry = FavoriteChannel(iso=iso, slug=slug, name=channel.name or "Channel")
    items.append(entry)
    return entry


def add_folder(items: list[FavoriteEntry], name: str = "") -> FavoriteFolder:
    folder = FavoriteFolder(name=name.strip() or "New folder")
    items.append(folder)
    return folder


def remove_entry(items: list[FavoriteEntry], entry_id: str) -> bool:
    return detach(items, entry_id) is not None


def move_to_folder(items: list[FavoriteEntry], entry_id: str, folder_id: str) -> bool:
    """
    Move an entry into a folder's children.

    When the folder cannot be found after detaching (unknown id, or the
    entry itself / one of its descendants) the entry goes back to the top
    level instead of being dropped.
    """
    moved = detach(items, entry_id)
    if moved is None:
        return False
    folder = find_folder(items, folder_id)
    if folder is None:
        logger.debug(f"Folder {folder_id} not found, moving {entry_id} to top level")
        items.append(moved)
    else:
        folder.children.append(moved)
    return True


def move_to_top_level(items: list[FavoriteEntry], entry_id: str) -> bool:
    moved = detach(items, entry_id)
    if moved is None:
        return False
    items.append(moved)
    return True


def move_up_down(items: list[FavoriteEntry], entry_id: str, direction: Direction) -> bool:
    """
    Swap an entry with its neighbour in depth-first order.

    Refused when the neighbour lives in another container, so an entry is
    never reparented by a move up/down.
    """
    if direction not in ("up", "down"):
        raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")

    flat = list(walk(items))
    position = next((i for i, (entry, _, _) in enumerate(flat) if entry.id == entry_id), None)
    if position is None:
        return False

    target = position - 1 if direction == "up" else position + 1
    if target < 0 or target >= len(flat):
        return False

    _, parent_a, i = flat[position]
    _, parent_b, j = flat[target]
    if parent_a is not parent_b:
        return False

    parent_a[i], parent_a[j] = parent_a[j], parent_a[i]
    return True


def decode_entries(items: list) -> tuple[list[FavoriteEntry], int]:
    """
    Validate stored entries one by one.

    Returns the usable entries and the number dropped. Children of a folder
    that is itself unusable are kept in the folder's place.
    """
    entries: list[FavoriteEntry] = []
    dropped = 0
    for item in items:
        children: Optional[list[FavoriteEntry]] = None
        if isinstance(item, dict) and item.get("type") == "folder":
            raw_children = item.get("children")
            children, bad = decode_entries(raw_children if isinstance(raw_children, list) else [])
            dropped += bad
            item = {**item, "children": []}

        try:
            entry = FAVORITE_ENTRY.validate_python(item)
        except ValidationError:
            dropped += 1
            entries.extend(children or [])
            continue

        if children is not None:
            entry.children = children
        entries.append(entry)
    return entries, dropped


def decode_favorites(data: object) -> FavoritesDocument:
    """Favorites document from decoded JSON; malformed entries are skipped."""
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        return FavoritesDocument()
    items, dropped = decode_entries(data["items"])
    if dropped:
        logger.warning(f"Ignoring {dropped} malformed favorites entries")
    return FavoritesDocument(items=items)


class FavoritesStore:
    """Persistent favorites forest with change notification."""

    def __init__(self, store: DocumentStore, key: str = "worldmedia-favorites"):
        self.store = store
        self.key = key
        self.changed: Signal[FavoritesDocument] = Signal("favorites-changed")
        self._document = decode_favorites(load_json(store, key))

    @property
    def items(self) -> list[FavoriteEntry]:
        """Deep copy of the top-level entries."""
        return self._document.model_copy(deep=True).items

    def channels(self) -> list[FavoriteChannel]:
        return [entry.model_copy() for entry in flatten_channels(self._document.items)]

    def folders(self) -> list[tuple[str, str]]:
        """(id, name) of every folder, depth-first."""
        return [
            (entry.id, entry.name or "Folder")
            for entry, _, _ in walk(self._document.items)
            if isinstance(entry, FavoriteFolder)
        ]

    def is_favorite(self, iso: str, slug: str) -> bool:
        return contains_key(self._document.items, iso, slug)

    def find_channel(self, iso: str, slug: str) -> Optional[FavoriteChannel]:
        key = channel_key(iso, slug)
        for entry in flatten_channels(self._document.items):
            if entry.key == key:
                return entry.model_copy()
        return None

    def add(self, channel: Channel) -> Optional[FavoriteChannel]:
        return self._mutate(lambda items: add_channel(items, channel))

    def remove(self, entry_id: str) -> bool:
        return self._mutate(lambda items: remove_entry(items, entry_id))

    def remove_channel(self, iso: str, slug: str) -> bool:
        entry = self.find_channel(iso, slug)
        return entry is not None and self.remove(entry.id)

    def add_folder(self, name: str = "") -> FavoriteFolder:
        return self._mutate(lambda items: add_folder(items, name))

    def move_to_folder(self, entry_id: str, folder_id: str) -> bool:
        return self._mutate(lambda items: move_to_folder(items, entry_id, folder_id))

    def move_to_top_level(self, entry_id: str) -> bool:
        return self._mutate(lambda items: move_to_top_level(items, entry_id))

    def move_up_down(self, entry_id: str, direction: Direction) -> bool:
        return self._mutate(lambda items: move_up_down(items, entry_id, direction))

    def replace(self, items: list[FavoriteEntry]) -> None:
        """Store a reordered forest as-is (drag and drop)."""
        document = FavoritesDocument.model_validate(
            {"items": [entry.model_dump() for entry in items]}
        )
        self._commit(document)

    def _mutate(self, transform: Callable[[list[FavoriteEntry]], T]) -> T:
        document = self._document.model_copy(deep=True)
        result = transform(document.items)
        if result:
            self._commit(document)
        return result

    def _commit(self, document: FavoritesDocument) -> None:
        save_json(self.store, self.key, document.model_dump())
        self._document = document
        logger.debug(f"Favorites saved ({len(flatten_channels(document.items))} channels)")
        self.changed.emit(document.model_copy(deep=True))
