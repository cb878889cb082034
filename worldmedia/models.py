"""Pydantic models for channels, favorites and trash entries"""

from __future__ import annotations

import re
import time
import uuid
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Placeholder country for channels with no resolvable country
UNKNOWN_ISO = "XX"


class ChannelType(str, Enum):
    TV = "tv"
    RADIO = "radio"
    YOUTUBE = "youtube"
    WEBCAM = "webcam"


TYPE_LABELS = {
    ChannelType.TV: "TV",
    ChannelType.RADIO: "Radio",
    ChannelType.YOUTUBE: "YouTube",
    ChannelType.WEBCAM: "Webcam",
}

# Display name used when a feed entry has no usable name
TYPE_PLACEHOLDERS = {
    ChannelType.TV: "Channel",
    ChannelType.RADIO: "Radio station",
    ChannelType.YOUTUBE: "YouTube video",
    ChannelType.WEBCAM: "Webcam",
}

WHITESPACE_RE = re.compile(r"\s+")
SLUG_INVALID_RE = re.compile(r"[^a-z0-9-]")
DASH_RUN_RE = re.compile(r"-+")


def slugify(name: Any) -> str:
    """
    Derive the channel slug from a display name.

    Examples:
        "Al Jazeera English" -> "al-jazeera-english"
        "Canal+"             -> "canal"
        "  "                 -> "channel"
    """
    text = "" if name is None else str(name)
    text = WHITESPACE_RE.sub("-", text.lower())
    text = SLUG_INVALID_RE.sub("", text)
    text = DASH_RUN_RE.sub("-", text).strip("-")
    return text or "channel"


def normalize_type(raw: Any) -> ChannelType:
    """Map a raw feed type to a ChannelType, defaulting to tv."""
    if isinstance(raw, ChannelType):
        return raw
    value = str(raw or "").strip().lower()
    try:
        return ChannelType(value)
    except ValueError:
        return ChannelType.TV


def display_iso(iso: Any) -> str:
    """Uppercase country code; empty or absent becomes the unknown sentinel."""
    code = str(iso or "").strip().upper()
    return code or UNKNOWN_ISO


def channel_key(iso: Any, slug: Any) -> tuple[str, str]:
    """Composite (country, slug) key used by favorites, trash and deep links."""
    return display_iso(iso), str(slug or "").strip().lower()


def new_entry_id() -> str:
    """Time + random identifier for favorites entries."""
    return f"f_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def _clean_optional(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class Channel(BaseModel):
    """One playable entry from a source fragment."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    iso: str = ""
    name: str = ""
    description: Optional[str] = None
    logo: Optional[str] = None
    type: ChannelType = ChannelType.TV
    url: str = ""
    source: Optional[str] = None
    source_name: Optional[str] = None
    # False when the feed gave no name and `name` holds the type placeholder
    has_name: bool = Field(default=True, exclude=True, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _fill_name(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        name = data.get("name")
        data = dict(data)
        data["has_name"] = name is not None and bool(str(name).strip())
        if not data["has_name"]:
            data["name"] = TYPE_PLACEHOLDERS[normalize_type(data.get("type"))]
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> ChannelType:
        return normalize_type(value)

    @field_validator("iso", "url", "name", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("description", "logo", "source", "source_name", mode="before")
    @classmethod
    def _coerce_optional(cls, value: Any) -> Optional[str]:
        return _clean_optional(value)

    @property
    def slug(self) -> str:
        """Derived from the feed name; every nameless channel is "channel"."""
        return slugify(self.name if self.has_name else None)

    @property
    def display_iso(self) -> str:
        return display_iso(self.iso)

    @property
    def key(self) -> tuple[str, str]:
        return channel_key(self.iso, self.slug)

    @property
    def type_label(self) -> str:
        return TYPE_LABELS[self.type]


class FavoriteChannel(BaseModel):
    """Reference to a channel by composite key (not a copy of the record)."""

    id: str = Field(default_factory=new_entry_id)
    type: Literal["channel"] = "channel"
    iso: str = ""
    slug: str = ""
    name: str = "Channel"

    @property
    def key(self) -> tuple[str, str]:
        return channel_key(self.iso, self.slug)


class FavoriteFolder(BaseModel):
    id: str = Field(default_factory=new_entry_id)
    type: Literal["folder"] = "folder"
    name: str = "Folder"
    children: list[FavoriteEntry] = Field(default_factory=list)


FavoriteEntry = Annotated[
    Union[FavoriteChannel, FavoriteFolder], Field(discriminator="type")
]

FavoriteFolder.model_rebuild()


class FavoritesDocument(BaseModel):
    """Persisted favorites forest: {"items": [...]}"""

    items: list[FavoriteEntry] = Field(default_factory=list)


class TrashEntry(BaseModel):
    iso: str = ""
    slug: str = ""
    name: str = "Channel"

    @property
    def key(self) -> tuple[str, str]:
        return channel_key(self.iso, self.slug)
