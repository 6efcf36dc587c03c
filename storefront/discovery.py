from __future__ import annotations
import math
from typing import Iterable, Sequence

from .schemas import ALL_CATEGORIES, FilterState, Product, ProductPage, SortKey

PAGE_SIZE = 12

def matches_search(product: Product, text: str) -> bool:
    needle = text.lower()
    return needle in product.name.lower() or needle in product.category.lower()

def matches_price(product: Product, price_range: tuple[float, float]) -> bool:
    lower, upper = price_range
    return lower <= product.effective_price <= upper

def matches_category(product: Product, categories: Iterable[str]) -> bool:
    selected = set(categories)
    if not selected or ALL_CATEGORIES in selected:
        return True
    return product.category in selected

def filter_products(products: Iterable[Product], filters: FilterState) -> list[Product]:
    return [
        p for p in products
        if matches_search(p, filters.search)
        and matches_price(p, filters.price_range)
        and matches_category(p, filters.categories)
    ]

def sort_products(products: Iterable[Product], sort: SortKey) -> list[Product]:
    """Stable sort; products with equal keys keep their input order.

    ``featured`` places best-sellers after the rest. That ordering is the
    storefront's established behavior and is kept as is.
    """
    if sort == SortKey.PRICE_ASC:
        return sorted(products, key=lambda p: p.effective_price)
    if sort == SortKey.PRICE_DESC:
        return sorted(products, key=lambda p: p.effective_price, reverse=True)
    if sort == SortKey.NEWEST:
        return sorted(products, key=lambda p: not p.is_new)
    return sorted(products, key=lambda p: p.is_best_seller)

def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    return math.ceil(total / page_size)

def paginate(products: Sequence[Product], page: int, page_size: int = PAGE_SIZE) -> list[Product]:
    """1-based page slice; pages outside the valid range are empty."""
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(products[start:start + page_size])

def discover(products: Iterable[Product], filters: FilterState, page_size: int = PAGE_SIZE) -> ProductPage:
    matched = sort_products(filter_products(products, filters), filters.sort)
    return ProductPage(
        items=paginate(matched, filters.page, page_size),
        total_matches=len(matched),
        total_pages=page_count(len(matched), page_size),
        page=filters.page,
    )

def toggle_category(selected: Iterable[str], category: str) -> list[str]:
    """Next category selection after the user clicks ``category``."""
    if category == ALL_CATEGORIES:
        return [ALL_CATEGORIES]
    current = [c for c in selected if c != ALL_CATEGORIES]
    if category in current:
        current.remove(category)
    else:
        current.append(category)
    return current or [ALL_CATEGORIES]

def reset_filters() -> FilterState:
    return FilterState()

def categories_of(products: Iterable[Product]) -> list[str]:
    seen: dict[str, None] = {}
    for p in products:
        seen.setdefault(p.category, None)
    return list(seen)
