import json
from pathlib import Path

import pytest

from worldmedia.favorites import FavoritesStore
from worldmedia.loaders.catalog import CatalogLoader
from worldmedia.loaders.feed import FeedLoader
from worldmedia.loaders.fragments import FileFragmentSource
from worldmedia.session import Session
from worldmedia.storage import MemoryDocumentStore
from worldmedia.trash import TrashStore

SOURCES = ["iptv-org", "free-tv-iptv", "iprd"]


def write_json(root: Path, relative: str, data) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    root = tmp_path / "data"
    write_json(root, "channels/FR/iptv-org.json", {"channels": [
        {"iso": "FR", "name": "TF1", "url": "http://a", "source_name": "IPTV-org"},
        {"iso": "FR", "name": "France 24", "url": "http://f24.m3u8", "source_name": "IPTV-org"},
    ]})
    write_json(root, "channels/FR/free-tv-iptv.json", {"channels": [
        {"iso": "FR", "name": "TF1 HD", "url": "http://a", "source_name": "Free-TV"},
        {"iso": "FR", "name": "France Inter", "type": "radio", "url": "http://inter", "source_name": "Free-TV"},
    ]})
    write_json(root, "channels/FRA/iprd.json", {"channels": [
        {"iso": "FR", "name": "Radio Nova", "type": "radio", "url": "http://nova", "source_name": "IPRD"},
    ]})
    write_json(root, "channels/XX/iptv-org.json", {"channels": [
        {"iso": "XX", "name": "Mystery TV", "url": "http://mystery"},
    ]})
    write_json(root, "cat_channels/news/iptv-org.json", {"channels": [
        {"iso": "FR", "name": "France 24", "url": "http://f24.m3u8"},
        {"iso": "GB", "name": "BBC News", "url": "http://bbc"},
    ]})
    write_json(root, "cat_channels/categories.json", ["music", "news"])
    write_json(root, "channels.json", {"channels": [
        {"iso": "FR", "name": "TF1", "url": "http://a"},
        {"iso": "GB", "name": "BBC News", "url": "http://bbc"},
    ]})
    return root


@pytest.fixture
def state() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def trash(state) -> TrashStore:
    return TrashStore(state)


@pytest.fixture
def favorites(state) -> FavoritesStore:
    return FavoritesStore(state)


@pytest.fixture
def session(data_dir, favorites, trash) -> Session:
    source = FileFragmentSource(data_dir)
    loader = FeedLoader(source, SOURCES, exclusions=trash)
    return Session(loader, favorites, trash, catalog=CatalogLoader(source))
