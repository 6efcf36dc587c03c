from __future__ import annotations
import logging
import random
from typing import Any, Optional
import httpx
from pydantic import ValidationError

from .config import Settings, settings as default_settings
from .schemas import Product

logger = logging.getLogger(__name__)

DEFAULT_FEATURES = [
    "Premium quality materials",
    "Elegant minimalist design",
    "Durable construction",
    "Easy to use interface",
]
DEFAULT_COLORS = ["Black", "White", "Gray"]
CLOTHING_SIZES = ["S", "M", "L", "XL"]
RECOMMENDATION_CATEGORIES = ["smartphones", "laptops", "fragrances", "skincare"]

def _numeric_id(raw: Any) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0

def normalize_product(raw: Any) -> Optional[Product]:
    """Map a DummyJSON product record onto :class:`Product`.

    Returns None for records that are not objects, carry no id or fail
    validation.
    """
    if not isinstance(raw, dict):
        logger.error("Invalid product data: %r", raw)
        return None
    if raw.get("id") is None:
        logger.error("Skipping product without id: %r", raw.get("title"))
        return None

    category = str(raw.get("category") or "Uncategorized")
    numeric_id = _numeric_id(raw.get("id"))
    images = raw.get("images")
    try:
        price = float(raw.get("price") or 0)
        discount_price = None
        if raw.get("discountPercentage"):
            discount_price = min(round(price * (1 - float(raw["discountPercentage"]) / 100)), price)
        return Product(
            id=str(raw["id"]),
            name=raw.get("title") or "Unnamed Product",
            category=category,
            price=price,
            discount_price=discount_price,
            rating=raw.get("rating") or 0,
            description=raw.get("description") or "No description available",
            features=list(DEFAULT_FEATURES),
            images=images if isinstance(images, list) else [],
            colors=list(DEFAULT_COLORS),
            sizes=list(CLOTHING_SIZES) if category.lower() == "clothing" else [],
            in_stock=(raw.get("stock") or 0) > 0,
            is_new=numeric_id % 5 == 0,
            is_best_seller=numeric_id % 7 == 0,
        )
    except (ValidationError, TypeError, ValueError) as e:
        logger.error("Skipping product %r: %s", raw.get("id"), e)
        return None

def normalize_products(records: Any) -> list[Product]:
    products = []
    for raw in records:
        product = normalize_product(raw)
        if product is not None:
            products.append(product)
    return products

class CatalogClient:
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        cfg: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        cfg = cfg or default_settings
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=cfg.CATALOG_URL, timeout=cfg.CATALOG_TIMEOUT)
        self.rng = rng or random.Random()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        response = await self.client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def _get_records(self, path: str, params: Optional[dict[str, Any]] = None) -> list[Any]:
        try:
            data = await self._get_json(path, params)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error fetching %s: %s", path, e)
            return []
        records = data.get("products") if isinstance(data, dict) else None
        if not isinstance(records, list):
            logger.error("Invalid products data format from %s", path)
            return []
        return records

    async def get_products(self, limit: int = 100) -> list[Product]:
        return normalize_products(await self._get_records("/products", {"limit": limit}))

    async def get_product(self, product_id: str) -> Optional[Product]:
        try:
            data = await self._get_json(f"/products/{product_id}")
        except httpx.HTTPStatusError as e:
            if e.response.status_code != 404:
                logger.error("Error fetching product %s: %s", product_id, e)
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error fetching product %s: %s", product_id, e)
            return None
        return normalize_product(data)

    async def get_recommended(self, exclude_id: Optional[str] = None, count: int = 4) -> list[Product]:
        category = self.rng.choice(RECOMMENDATION_CATEGORIES)
        records = await self._get_records(f"/products/category/{category}")
        products = [
            p for p in normalize_products(records)
            if exclude_id is None or p.id != exclude_id
        ]
        self.rng.shuffle(products)
        return products[:count]

    async def get_best_sellers(self, count: int = 4) -> list[Product]:
        products = normalize_products(await self._get_records("/products", {"limit": 30}))
        products.sort(key=lambda p: p.rating, reverse=True)
        return products[:count]

    async def get_new_arrivals(self, count: int = 4) -> list[Product]:
        records = await self._get_records("/products", {"limit": 30, "skip": 50})
        return normalize_products(records[:count])
