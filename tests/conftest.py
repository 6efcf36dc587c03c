from typing import Optional

import pytest

from storefront.database import MemoryStorage
from storefront.schemas import Product


def make_product(product_id: str = "1", **overrides) -> Product:
    data = {
        "id": product_id,
        "name": f"Product {product_id}",
        "category": "Electronics",
        "price": 10.0,
    }
    data.update(overrides)
    return Product(**data)


class FakeCatalog:
    def __init__(self, products: Optional[list[Product]] = None) -> None:
        self.products = list(products or [])
        self.calls: list[str] = []

    async def get_products(self) -> list[Product]:
        self.calls.append("get_products")
        return list(self.products)

    async def get_product(self, product_id: str) -> Optional[Product]:
        self.calls.append(f"get_product:{product_id}")
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    async def get_recommended(self, exclude_id: Optional[str] = None, count: int = 4) -> list[Product]:
        return [p for p in self.products if p.id != exclude_id][:count]

    async def get_best_sellers(self, count: int = 4) -> list[Product]:
        return sorted(self.products, key=lambda p: p.rating, reverse=True)[:count]

    async def get_new_arrivals(self, count: int = 4) -> list[Product]:
        return self.products[:count]


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()
