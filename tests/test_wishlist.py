import json

from storefront.database import JsonFileStorage, MemoryStorage
from storefront.events import WISHLIST_CHANGED, EventBus, EventLog
from storefront.wishlist import WISHLIST_KEY, WishlistStore
from tests.conftest import make_product


def test_add_is_idempotent(storage):
    wishlist = WishlistStore(storage)
    product = make_product("1")

    assert wishlist.add(product) is True
    assert wishlist.add(product) is False

    assert wishlist.count == 1
    assert wishlist.contains("1")
    assert "1" in wishlist


def test_remove_and_contains(storage):
    wishlist = WishlistStore(storage)
    wishlist.add(make_product("1"))
    wishlist.add(make_product("2"))

    assert wishlist.remove("1") is True
    assert wishlist.remove("1") is False
    assert not wishlist.contains("1")
    assert [p.id for p in wishlist.items] == ["2"]


def test_toggle(storage):
    wishlist = WishlistStore(storage)
    product = make_product("1")

    assert wishlist.toggle(product) is True
    assert wishlist.toggle(product) is False
    assert wishlist.count == 0


def test_clear_persists_empty_list(storage):
    wishlist = WishlistStore(storage)
    wishlist.add(make_product("1"))
    wishlist.clear()

    assert wishlist.count == 0
    assert json.loads(storage.get(WISHLIST_KEY)) == []


def test_persisted_as_product_records(storage):
    wishlist = WishlistStore(storage)
    product = make_product("7", name="Mug", category="Kitchen")
    wishlist.add(product)

    assert json.loads(storage.get(WISHLIST_KEY)) == [product.model_dump(mode="json")]

    reloaded = WishlistStore.load(storage)
    assert reloaded.items == [product]


def test_load_malformed_starts_empty(caplog):
    storage = MemoryStorage({WISHLIST_KEY: "[{]"})

    wishlist = WishlistStore.load(storage)

    assert wishlist.count == 0
    assert "Failed to load wishlist" in caplog.text


def test_load_collapses_duplicates():
    product = make_product("1").model_dump(mode="json")
    storage = MemoryStorage({WISHLIST_KEY: json.dumps([product, product])})

    assert WishlistStore.load(storage).count == 1


def test_events_only_on_change(storage):
    events = EventBus()
    log = EventLog()
    unsubscribe = events.subscribe(log)
    wishlist = WishlistStore(storage, events=events)

    wishlist.add(make_product("1"))
    wishlist.add(make_product("1"))
    wishlist.remove("2")
    wishlist.remove("1")
    unsubscribe()
    wishlist.clear()

    assert [e.name for e in log.events] == [WISHLIST_CHANGED, WISHLIST_CHANGED]
    assert log.events[0].data["liked"] is True
    assert log.events[1].data["liked"] is False


def test_load_undecodable_file_starts_empty(tmp_path, caplog):
    (tmp_path / "wishlist.json").write_bytes(b"\xc3\x28")

    wishlist = WishlistStore.load(JsonFileStorage(tmp_path))

    assert wishlist.count == 0
    assert "Failed to load wishlist" in caplog.text
