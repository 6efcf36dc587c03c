from __future__ import annotations
import logging
from typing import Optional, Protocol

from .cart import CartStore
from .config import Settings, settings as default_settings
from .database import KeyValueStorage
from .debounce import Debouncer
from .discovery import PAGE_SIZE, discover, reset_filters, toggle_category
from .errors import ProductNotFound, SelectionRequired
from .events import EventBus
from .schemas import FilterState, Product, ProductPage, SortKey, ViewMode
from .wishlist import WishlistStore

logger = logging.getLogger(__name__)

class CatalogSource(Protocol):
    async def get_products(self) -> list[Product]: ...

    async def get_product(self, product_id: str) -> Optional[Product]: ...

    async def get_recommended(self, exclude_id: Optional[str] = None, count: int = 4) -> list[Product]: ...

    async def get_best_sellers(self, count: int = 4) -> list[Product]: ...

    async def get_new_arrivals(self, count: int = 4) -> list[Product]: ...

def check_selection(product: Product, color: Optional[str], size: Optional[str]) -> None:
    """Raise SelectionRequired if a variant option is defined but not chosen."""
    if product.sizes and not size:
        raise SelectionRequired("size")
    if product.colors and not color:
        raise SelectionRequired("color")

class FilterController:
    """Live FilterState; search text and price range apply after a quiet period."""

    def __init__(self, delay: float):
        self.state = reset_filters()
        self.search = Debouncer(self.state.search, delay, self._apply_search)
        self.price_range = Debouncer(self.state.price_range, delay, self._apply_price_range)

    @property
    def pending(self) -> bool:
        return self.search.pending or self.price_range.pending

    def _apply_search(self, text: str) -> None:
        self.state = self.state.model_copy(update={"search": text})

    def _apply_price_range(self, price_range: tuple[float, float]) -> None:
        self.state = self.state.model_copy(update={"price_range": price_range})

    def set_search(self, text: str) -> None:
        self.search.push(text)

    def set_price_range(self, lower: float, upper: float) -> None:
        if lower > upper:
            raise ValueError("price range lower bound must not exceed upper bound")
        self.price_range.push((lower, upper))

    def set_sort(self, sort: SortKey) -> None:
        self.state = self.state.model_copy(update={"sort": SortKey(sort)})

    def set_page(self, page: int) -> None:
        if page < 1:
            raise ValueError("page must be >= 1")
        self.state = self.state.model_copy(update={"page": page})

    def set_view(self, view: ViewMode) -> None:
        self.state = self.state.model_copy(update={"view": ViewMode(view)})

    def toggle_category(self, category: str) -> list[str]:
        categories = toggle_category(self.state.categories, category)
        self.state = self.state.model_copy(update={"categories": categories})
        return categories

    def flush(self) -> None:
        self.search.flush()
        self.price_range.flush()

    def reset(self) -> FilterState:
        self.state = reset_filters()
        self.search.reset(self.state.search)
        self.price_range.reset(self.state.price_range)
        return self.state

    def close(self) -> None:
        self.search.close()
        self.price_range.close()

class StorefrontSession:
    def __init__(
        self,
        storage: KeyValueStorage,
        catalog: CatalogSource,
        cfg: Optional[Settings] = None,
        events: Optional[EventBus] = None,
    ):
        cfg = cfg or default_settings
        self.catalog = catalog
        self.storage = storage
        self.page_size = cfg.PAGE_SIZE or PAGE_SIZE
        self.events = events or EventBus()
        self.cart = CartStore.load(storage, self.events)
        self.wishlist = WishlistStore.load(storage, self.events)
        self.filters = FilterController(cfg.debounce_seconds)
        self.products: tuple[Product, ...] = ()
        self._catalog_loaded = False

    async def refresh_catalog(self) -> tuple[Product, ...]:
        self.products = tuple(await self.catalog.get_products())
        self._catalog_loaded = True
        logger.info("Catalog snapshot loaded: %d products", len(self.products))
        return self.products

    async def ensure_catalog(self) -> tuple[Product, ...]:
        if not self._catalog_loaded:
            await self.refresh_catalog()
        return self.products

    def browse(self) -> ProductPage:
        return discover(self.products, self.filters.state, self.page_size)

    async def find_product(self, product_id: str) -> Product:
        for product in await self.ensure_catalog():
            if product.id == product_id:
                return product
        product = await self.catalog.get_product(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product

    async def add_to_cart(
        self,
        product_id: str,
        quantity: int = 1,
        color: Optional[str] = None,
        size: Optional[str] = None,
    ) -> Product:
        product = await self.find_product(product_id)
        check_selection(product, color, size)
        self.cart.add_item(product, quantity)
        return product

    def close(self) -> None:
        self.filters.close()
        self.storage.close()
