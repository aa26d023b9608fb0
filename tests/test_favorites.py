import json
from dataclasses import replace

from conftest import BrokenStore, make_products

from product_explorer.favorites import FavoritesStore
from product_explorer.storage import MemoryStore
from product_explorer.utils import encode_products


def test_toggle_on_then_off(store):
    product = make_products(1, start=7)[0]
    favorites = FavoritesStore(store)

    assert favorites.toggle(product) is True
    assert favorites.items == (product,)
    assert favorites.toggle(product) is False
    assert favorites.items == ()


def test_newest_favorite_comes_first(store):
    a, b, c = make_products(3)
    favorites = FavoritesStore(store)
    for p in (a, b, c):
        favorites.toggle(p)
    assert [p.id for p in favorites] == [3, 2, 1]


def test_double_toggle_restores_sequence(store):
    a, b, c = make_products(3)
    favorites = FavoritesStore(store)
    favorites.toggle(a)
    favorites.toggle(c)
    before = favorites.items

    favorites.toggle(b)
    favorites.toggle(b)
    assert favorites.items == before

    favorites.toggle(a)
    favorites.toggle(a)
    assert [p.id for p in favorites] == [1, 3]
    assert len(favorites) == 2


def test_membership_is_by_id(store):
    product = make_products(1)[0]
    favorites = FavoritesStore(store)
    favorites.toggle(product)

    # Same id with a refreshed price is the same favorite.
    favorites.toggle(replace(product, price=999.0))
    assert len(favorites) == 0


def test_removal_keeps_order_of_the_rest(store):
    a, b, c = make_products(3)
    favorites = FavoritesStore(store)
    for p in (a, b, c):
        favorites.toggle(p)
    favorites.toggle(b)
    assert [p.id for p in favorites] == [3, 1]


def test_each_toggle_is_persisted(store):
    product = make_products(1, start=7)[0]
    favorites = FavoritesStore(store)
    favorites.toggle(product)
    assert [p["id"] for p in json.loads(store.data["pe-favorites"])] == [7]

    reloaded = FavoritesStore(store)
    assert reloaded.contains(7)
    reloaded.toggle(product)
    assert json.loads(store.data["pe-favorites"]) == []


def test_stored_duplicates_are_dropped():
    a, b = make_products(2)
    store = MemoryStore({"pe-favorites": encode_products([a, b, a])})
    assert [p.id for p in FavoritesStore(store)] == [1, 2]


def test_invalid_stored_list_falls_back_to_empty():
    store = MemoryStore({"pe-favorites": json.dumps([{"title": "no id"}])})
    assert FavoritesStore(store).items == ()


def test_toggle_works_without_storage():
    favorites = FavoritesStore(BrokenStore())
    favorites.toggle(make_products(1)[0])
    assert len(favorites) == 1
