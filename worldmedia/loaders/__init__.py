"""Fragment sources and feed loading"""

from .catalog import CatalogLoader, filter_categories
from .feed import FeedLoader, category_plan, country_plan, merge_channels
from .fragments import FileFragmentSource, HttpFragmentSource, open_source, parse_fragment

__all__ = [
    "CatalogLoader",
    "FeedLoader",
    "FileFragmentSource",
    "HttpFragmentSource",
    "category_plan",
    "country_plan",
    "filter_categories",
    "merge_channels",
    "open_source",
    "parse_fragment",
]
