import pytest
from pydantic import ValidationError

from worldmedia.models import (
    Channel,
    ChannelType,
    FavoriteChannel,
    FavoriteFolder,
    FavoritesDocument,
    channel_key,
    display_iso,
    new_entry_id,
    normalize_type,
    slugify,
)


def test_slugify_examples() -> None:
    assert slugify("Al Jazeera English") == "al-jazeera-english"
    assert slugify("  ") == "channel"
    assert slugify("Canal+") == "canal"


def test_slugify_collapses_and_trims_dashes() -> None:
    assert slugify("  France - 24  ") == "france-24"
    assert slugify("--RTL--") == "rtl"
    assert slugify(None) == "channel"
    assert slugify("Première") == "premire"


def test_normalize_type_defaults_to_tv() -> None:
    assert normalize_type("Radio ") == ChannelType.RADIO
    assert normalize_type("webcam") == ChannelType.WEBCAM
    assert normalize_type(None) == ChannelType.TV
    assert normalize_type("podcast") == ChannelType.TV


def test_display_iso() -> None:
    assert display_iso("fr") == "FR"
    assert display_iso("") == "XX"
    assert display_iso(None) == "XX"


def test_channel_defaults_and_placeholders() -> None:
    ch = Channel.model_validate({"iso": "fr", "url": " http://a "})
    assert ch.type == ChannelType.TV
    assert ch.name == "Channel"
    assert ch.url == "http://a"
    assert ch.description is None

    radio = Channel.model_validate({"type": "radio", "name": "   "})
    assert radio.name == "Radio station"
    assert radio.slug == "channel"


def test_nameless_channels_share_the_default_slug() -> None:
    webcam = Channel(iso="FR", type="webcam", url="http://cam")
    assert webcam.name == "Webcam"
    assert webcam.key == ("FR", "channel")
    assert "has_name" not in webcam.model_dump()

    named = Channel(iso="FR", type="webcam", name="Webcam", url="http://cam")
    assert named.slug == "webcam"


def test_channel_ignores_unknown_fields_and_is_frozen() -> None:
    ch = Channel.model_validate({"name": "TF1", "iso": "fr", "tvg_id": "TF1.fr"})
    assert ch.key == ("FR", "tf1")
    with pytest.raises(ValidationError):
        ch.name = "Other"


def test_channel_key_is_case_insensitive() -> None:
    assert channel_key("fr", "TF1") == channel_key("FR", "tf1")
    assert channel_key(None, "x") == ("XX", "x")


def test_entry_ids_are_unique() -> None:
    ids = {new_entry_id() for _ in range(200)}
    assert len(ids) == 200
    assert all(i.startswith("f_") for i in ids)


def test_favorites_document_nested_round_trip() -> None:
    doc = FavoritesDocument(items=[
        FavoriteChannel(iso="FR", slug="tf1", name="TF1"),
        FavoriteFolder(name="News", children=[FavoriteChannel(iso="GB", slug="bbc-news")]),
    ])
    restored = FavoritesDocument.model_validate(doc.model_dump())
    assert isinstance(restored.items[1], FavoriteFolder)
    assert restored.items[1].children[0].slug == "bbc-news"
