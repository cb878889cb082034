import asyncio

from worldmedia.errors import FragmentError
from worldmedia.loaders.feed import FeedLoader, category_plan, country_plan, merge_channels
from worldmedia.loaders.fragments import FileFragmentSource
from worldmedia.models import Channel

from conftest import SOURCES, write_json


def ch(name: str, url: str = "", iso: str = "FR") -> Channel:
    return Channel(iso=iso, name=name, url=url)


class FakeSource:
    """In-memory fragment source; values may be dicts, None, or exceptions."""

    def __init__(self, fragments, delays=None):
        self.fragments = fragments
        self.delays = delays or {}
        self.requested = []

    async def fetch_json(self, path):
        self.requested.append(path)
        await asyncio.sleep(self.delays.get(path, 0))
        value = self.fragments.get(path)
        if isinstance(value, Exception):
            raise value
        return value


def test_country_plan_order_is_code_major() -> None:
    plan = country_plan(["FR", "FRA"], ["a", "b"])
    assert plan == [
        ("channels", "FR", "a.json"),
        ("channels", "FR", "b.json"),
        ("channels", "FRA", "a.json"),
        ("channels", "FRA", "b.json"),
    ]
    assert category_plan("news", ["a"]) == [("cat_channels", "news", "a.json")]


def test_merge_first_url_wins_and_keeps_urlless() -> None:
    merged = merge_channels([
        [ch("TF1", "http://a"), ch("No URL 1")],
        [ch("TF1 HD", "http://a"), ch("No URL 2"), ch("M6", "http://m6")],
    ])
    assert [c.name for c in merged] == ["TF1", "No URL 1", "No URL 2", "M6"]


def test_merge_is_idempotent() -> None:
    channels = [ch("A", "http://a"), ch("B", "http://b"), ch("A2", "http://a")]
    once = merge_channels([channels])
    twice = merge_channels([channels, channels])
    assert {c.url for c in once} == {c.url for c in twice}
    assert once == twice


def test_load_country_first_fragment_wins(data_dir) -> None:
    loader = FeedLoader(FileFragmentSource(data_dir), SOURCES)
    channels = asyncio.run(loader.load_country("FR"))

    tf1 = [c for c in channels if c.url == "http://a"]
    assert len(tf1) == 1
    assert tf1[0].name == "TF1"
    # FRA folder is probed after FR
    assert [c.name for c in channels] == ["TF1", "France 24", "France Inter", "Radio Nova"]


def test_load_country_from_alpha3_input(data_dir) -> None:
    loader = FeedLoader(FileFragmentSource(data_dir), SOURCES)
    channels = asyncio.run(loader.load_country("fra"))
    assert "Radio Nova" in [c.name for c in channels]


def test_load_empty_inputs() -> None:
    source = FakeSource({})
    loader = FeedLoader(source, SOURCES)
    assert asyncio.run(loader.load_country("")) == []
    assert asyncio.run(loader.load_category("  ")) == []
    assert source.requested == []


def test_missing_and_broken_fragments_are_skipped() -> None:
    source = FakeSource({
        ("channels", "ZZ", "iptv-org.json"): FragmentError("channels/ZZ/iptv-org.json", "boom"),
        ("channels", "ZZ", "free-tv-iptv.json"): {"channels": "not a list"},
        ("channels", "ZZ", "iprd.json"): {"channels": [{"name": "Kept", "url": "http://k"}, "junk"]},
    })
    loader = FeedLoader(source, SOURCES)
    channels = asyncio.run(loader.load_country("ZZ"))
    assert [c.name for c in channels] == ["Kept"]
    assert len(source.requested) == 3


def test_load_category(data_dir) -> None:
    loader = FeedLoader(FileFragmentSource(data_dir), SOURCES)
    channels = asyncio.run(loader.load_category("news"))
    assert [c.name for c in channels] == ["France 24", "BBC News"]
    assert asyncio.run(loader.load_category("../channels")) == []


def test_trashed_channel_never_loaded(data_dir, trash) -> None:
    loader = FeedLoader(FileFragmentSource(data_dir), SOURCES, exclusions=trash)
    first = asyncio.run(loader.load_country("FR"))
    trash.add(first[0])

    for _ in range(2):
        channels = asyncio.run(loader.load_country("FR"))
        assert ("FR", "tf1") not in [c.key for c in channels]
    # duplicate from the second source shares the url, not the slug
    assert "TF1 HD" not in [c.name for c in channels]


def test_trash_applies_to_categories(data_dir, trash) -> None:
    trash.add(Channel(iso="GB", name="BBC News"))
    loader = FeedLoader(FileFragmentSource(data_dir), SOURCES, exclusions=trash)
    assert [c.name for c in asyncio.run(loader.load_category("news"))] == ["France 24"]


def test_parallel_fetch_keeps_plan_order() -> None:
    first = ("channels", "FR", "iptv-org.json")
    second = ("channels", "FR", "free-tv-iptv.json")
    source = FakeSource(
        {
            first: {"channels": [{"name": "Slow original", "url": "http://dup"}]},
            second: {"channels": [{"name": "Fast copy", "url": "http://dup"}]},
        },
        delays={first: 0.05},
    )
    loader = FeedLoader(source, ["iptv-org", "free-tv-iptv"], parallel=True, max_concurrent=4)
    channels = asyncio.run(loader.load_country("FR"))
    assert [c.name for c in channels] == ["Slow original"]


def test_fetch_country_skips_exclusions(data_dir, trash) -> None:
    trash.add(Channel(iso="FR", name="TF1"))
    loader = FeedLoader(FileFragmentSource(data_dir), SOURCES, exclusions=trash)
    merged = asyncio.run(loader.fetch_country("FR"))
    assert "TF1" in [c.name for c in merged]
    assert "TF1" not in [c.name for c in loader.exclude(merged)]


def test_malformed_fragment_file(tmp_path) -> None:
    (tmp_path / "channels" / "BE").mkdir(parents=True)
    (tmp_path / "channels" / "BE" / "iptv-org.json").write_text("{not json", encoding="utf-8")
    write_json(tmp_path, "channels/BE/iprd.json", {"channels": [{"name": "VRT", "url": "http://vrt"}]})
    loader = FeedLoader(FileFragmentSource(tmp_path), SOURCES)
    assert [c.name for c in asyncio.run(loader.load_country("BE"))] == ["VRT"]
