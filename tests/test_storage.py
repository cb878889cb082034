import pytest

from worldmedia.errors import StateError
from worldmedia.storage import (
    JsonFileDocumentStore,
    MemoryDocumentStore,
    SqlDocumentStore,
    load_json,
    open_state_store,
    save_json,
)


def test_memory_store_round_trip() -> None:
    store = MemoryDocumentStore()
    assert load_json(store, "missing") is None
    assert save_json(store, "k", {"items": []})
    assert load_json(store, "k") == {"items": []}


def test_json_file_store(tmp_path) -> None:
    store = JsonFileDocumentStore(tmp_path / "state")
    assert store.read("worldmedia-trash") is None
    save_json(store, "worldmedia-trash", [{"iso": "FR", "slug": "tf1", "name": "TF1"}])
    assert (tmp_path / "state" / "worldmedia-trash.json").is_file()
    assert load_json(store, "worldmedia-trash")[0]["slug"] == "tf1"
    # keys never escape the directory
    assert store.path_for("../evil").parent == tmp_path / "state"


def test_json_file_store_write_failure(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = JsonFileDocumentStore(blocker)
    with pytest.raises(StateError):
        store.write("k", "{}")
    assert not save_json(store, "k", {})


def test_sql_store_round_trip(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'state.db'}"
    store = SqlDocumentStore(url)
    assert store.read("worldmedia-favorites") is None
    store.write("worldmedia-favorites", '{"items": []}')
    store.write("worldmedia-favorites", '{"items": [1]}')

    reopened = open_state_store(url)
    assert isinstance(reopened, SqlDocumentStore)
    assert load_json(reopened, "worldmedia-favorites") == {"items": [1]}


def test_open_memory_store() -> None:
    assert isinstance(open_state_store("memory"), MemoryDocumentStore)


def test_corrupt_document_reads_as_missing() -> None:
    store = MemoryDocumentStore({"k": "{oops"})
    assert load_json(store, "k") is None
