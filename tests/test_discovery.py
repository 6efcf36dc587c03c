import pytest

from storefront.discovery import (
    categories_of,
    discover,
    filter_products,
    page_count,
    paginate,
    reset_filters,
    sort_products,
    toggle_category,
)
from storefront.schemas import FilterState, SortKey
from tests.conftest import make_product


def catalog():
    return [
        make_product("1", name="Wireless Headphones", category="Electronics", price=120.0, discount_price=99.0),
        make_product("2", name="Cotton Shirt", category="Clothing", price=25.0, is_new=True),
        make_product("3", name="Chef Knife", category="Kitchen", price=60.0, is_best_seller=True),
        make_product("4", name="Desk Lamp", category="Home", price=45.0),
        make_product("5", name="Face Serum", category="Beauty", price=30.0, is_new=True, is_best_seller=True),
    ]


def ids(products):
    return [p.id for p in products]


def test_empty_search_matches_everything():
    assert ids(filter_products(catalog(), FilterState())) == ["1", "2", "3", "4", "5"]


def test_search_matches_name_or_category_case_insensitive():
    assert ids(filter_products(catalog(), FilterState(search="HEAD"))) == ["1"]
    assert ids(filter_products(catalog(), FilterState(search="kitchen"))) == ["3"]
    assert ids(filter_products(catalog(), FilterState(search="zzz"))) == []


def test_price_filter_uses_effective_price_inclusive():
    filters = FilterState(price_range=(30.0, 99.0))
    assert ids(filter_products(catalog(), filters)) == ["1", "3", "4", "5"]


def test_category_filter():
    assert ids(filter_products(catalog(), FilterState(categories=["Home", "Beauty"]))) == ["4", "5"]
    assert len(filter_products(catalog(), FilterState(categories=["All"]))) == 5
    assert len(filter_products(catalog(), FilterState(categories=["All", "Home"]))) == 5


def test_filters_are_conjunctive():
    filters = FilterState(search="o", price_range=(0, 50), categories=["Clothing", "Home", "Electronics"])
    assert ids(filter_products(catalog(), filters)) == ["2", "4"]


def test_filter_state_rejects_inverted_price_range():
    with pytest.raises(ValueError):
        FilterState(price_range=(10, 5))


def test_sort_by_price():
    products = [
        make_product("a", price=50.0),
        make_product("b", price=10.0),
        make_product("c", price=30.0),
    ]
    assert [p.price for p in sort_products(products, SortKey.PRICE_ASC)] == [10.0, 30.0, 50.0]
    assert [p.price for p in sort_products(products, SortKey.PRICE_DESC)] == [50.0, 30.0, 10.0]


def test_price_sort_is_stable():
    products = [make_product("a", price=10.0), make_product("b", price=10.0), make_product("c", price=5.0)]
    assert ids(sort_products(products, SortKey.PRICE_ASC)) == ["c", "a", "b"]
    assert ids(sort_products(products, SortKey.PRICE_DESC)) == ["a", "b", "c"]


def test_newest_puts_new_products_first():
    assert ids(sort_products(catalog(), SortKey.NEWEST)) == ["2", "5", "1", "3", "4"]


def test_featured_puts_best_sellers_last():
    assert ids(sort_products(catalog(), SortKey.FEATURED)) == ["1", "2", "4", "3", "5"]


def test_sort_does_not_mutate_input():
    products = catalog()
    sort_products(products, SortKey.PRICE_ASC)
    assert ids(products) == ["1", "2", "3", "4", "5"]


def test_pagination_of_25_products():
    products = [make_product(str(i)) for i in range(25)]

    assert page_count(len(products)) == 3
    assert len(paginate(products, 1)) == 12
    assert len(paginate(products, 3)) == 1
    assert paginate(products, 4) == []
    assert paginate(products, 0) == []


def test_page_count_of_empty_list():
    assert page_count(0) == 0
    with pytest.raises(ValueError):
        page_count(3, 0)


def test_discover_composes_the_pipeline():
    products = [make_product(str(i), price=float(i)) for i in range(1, 26)]
    filters = FilterState(sort=SortKey.PRICE_DESC, page=3)

    page = discover(products, filters)

    assert page.total_matches == 25
    assert page.total_pages == 3
    assert page.page == 3
    assert ids(page.items) == ["1"]


def test_discover_is_a_pure_projection():
    products = catalog()
    filters = FilterState(search="e", sort=SortKey.PRICE_ASC)

    first = discover(products, filters)
    second = discover(products, filters)

    assert first == second
    assert ids(products) == ["1", "2", "3", "4", "5"]


def test_discover_with_no_products():
    page = discover([], FilterState())
    assert page.items == []
    assert page.total_matches == 0
    assert page.total_pages == 0


def test_toggle_category_sequence():
    selected = toggle_category([], "Electronics")
    assert selected == ["Electronics"]

    selected = toggle_category(selected, "All")
    assert selected == ["All"]

    selected = toggle_category(selected, "Electronics")
    assert selected == ["Electronics"]


def test_toggle_category_deselecting_last_reverts_to_all():
    assert toggle_category(["Home"], "Home") == ["All"]
    assert toggle_category(["Home", "Beauty"], "Home") == ["Beauty"]


def test_reset_filters_returns_defaults():
    filters = reset_filters()
    assert filters.search == ""
    assert filters.price_range == (0.0, 1000.0)
    assert filters.categories == []
    assert filters.sort == SortKey.FEATURED
    assert filters.page == 1


def test_categories_of_keeps_first_seen_order():
    products = catalog() + [make_product("6", category="Home")]
    assert categories_of(products) == ["Electronics", "Clothing", "Kitchen", "Home", "Beauty"]
