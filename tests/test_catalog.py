from decimal import Decimal

import pytest

from pos_app.core.exceptions import NotFoundError, ValidationError
from pos_app.schemas import Category, Product
from pos_app.services.catalog import (
    CATEGORIES_KEY,
    DEFAULT_CATEGORIES,
    DEFAULT_PRODUCTS,
    PRODUCTS_KEY,
    CatalogRepository,
    sorted_products,
)
from pos_app.services.sequencer import DisplayOrderSequencer


def product(pid, display_order=None):
    return Product(id=pid, name=pid.upper(), price=Decimal("1"), category="c", display_order=display_order)


@pytest.fixture
def empty_catalog(store):
    repo = CatalogRepository(store, seed_defaults=False)
    return repo


# =============================================================================
# CATALOG
# =============================================================================

def test_seeds_defaults_on_first_access(catalog, store):
    assert store.get(PRODUCTS_KEY) is None

    categories = catalog.list_categories()

    assert [c.id for c in categories] == [c.id for c in DEFAULT_CATEGORIES]
    assert len(catalog.list_products()) == len(DEFAULT_PRODUCTS)
    assert store.get(CATEGORIES_KEY) is not None


def test_seeding_does_not_overwrite_existing(store):
    store.set(PRODUCTS_KEY, [])
    catalog = CatalogRepository(store)
    assert catalog.list_products() == []


def test_save_product_appends_last(empty_catalog):
    empty_catalog.save_product(product("a", 4))
    saved = empty_catalog.save_product(product("b"))
    assert saved.display_order == 5
    assert [p.id for p in empty_catalog.list_products()] == ["a", "b"]


def test_save_product_updates_in_place(empty_catalog):
    empty_catalog.save_product(product("a", 0))
    empty_catalog.save_product(product("a", 0).model_copy(update={"name": "Renamed"}))
    products = empty_catalog.load_products()
    assert len(products) == 1
    assert products[0].name == "Renamed"


def test_save_product_validates(empty_catalog):
    with pytest.raises(ValidationError):
        empty_catalog.save_product({"id": "x", "name": "X", "price": "-1", "category": "c"})


def test_delete_product(empty_catalog):
    empty_catalog.save_product(product("a"))
    empty_catalog.delete_product("a")
    assert empty_catalog.load_products() == []
    with pytest.raises(NotFoundError):
        empty_catalog.delete_product("a")
    with pytest.raises(NotFoundError):
        empty_catalog.get_product("a")


def test_products_in_category(catalog):
    arroces = catalog.products_in_category("arroces")
    assert arroces
    assert all(p.category == "arroces" for p in arroces)


def test_category_crud(empty_catalog):
    empty_catalog.save_category(Category(id="tapas", name="Tapas", display_order=2))
    empty_catalog.save_category({"id": "vinos", "name": "Vinos", "display_order": 1})
    assert [c.id for c in empty_catalog.list_categories()] == ["vinos", "tapas"]

    empty_catalog.save_category(Category(id="tapas", name="Tapas Frías", display_order=0))
    assert empty_catalog.get_category("tapas").name == "Tapas Frías"
    assert [c.id for c in empty_catalog.list_categories()] == ["tapas", "vinos"]

    empty_catalog.delete_category("vinos")
    with pytest.raises(NotFoundError):
        empty_catalog.get_category("vinos")


def test_missing_display_order_sorts_last():
    products = [product("x"), product("a", 2), product("b", 0)]
    assert [p.id for p in sorted_products(products)] == ["b", "a", "x"]


# =============================================================================
# SEQUENCER
# =============================================================================

def test_reorder_assigns_positions(empty_catalog):
    for pid in ("a", "b", "c"):
        empty_catalog.save_product(product(pid))

    DisplayOrderSequencer(empty_catalog).reorder(["b", "a", "c"])

    orders = {p.id: p.display_order for p in empty_catalog.load_products()}
    assert orders == {"a": 1, "b": 0, "c": 2}


def test_reorder_subset_leaves_others(empty_catalog):
    empty_catalog.save_product(product("a", 0))
    empty_catalog.save_product(product("b", 1))
    empty_catalog.save_product(product("z", 50))

    result = DisplayOrderSequencer(empty_catalog).reorder(["b", "a"])

    assert [p.id for p in result] == ["b", "a", "z"]
    assert empty_catalog.get_product("z").display_order == 50


def test_reorder_rejects_unknown_and_duplicate_ids(empty_catalog):
    empty_catalog.save_product(product("a"))
    sequencer = DisplayOrderSequencer(empty_catalog)

    with pytest.raises(NotFoundError):
        sequencer.reorder(["a", "ghost"])
    with pytest.raises(ValidationError):
        sequencer.reorder(["a", "a"])


def test_move_within_view(empty_catalog):
    for pid in ("a", "b", "c", "d"):
        empty_catalog.save_product(product(pid))
    sequencer = DisplayOrderSequencer(empty_catalog)

    result = sequencer.move("d", 1, ["a", "b", "c", "d"])

    assert [p.id for p in result] == ["a", "d", "b", "c"]
    with pytest.raises(NotFoundError):
        sequencer.move("x", 0, ["a"])
