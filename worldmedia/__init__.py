"""WorldMedia channel aggregation: feeds, favorites, trash and deep links."""

from .favorites import FavoritesStore
from .loaders import CatalogLoader, FeedLoader
from .models import Channel, ChannelType, slugify
from .session import Session, open_session
from .trash import TrashStore

__version__ = "0.1.0"

__all__ = [
    "CatalogLoader",
    "Channel",
    "ChannelType",
    "FavoritesStore",
    "FeedLoader",
    "Session",
    "TrashStore",
    "open_session",
    "slugify",
]
