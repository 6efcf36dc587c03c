from __future__ import annotations
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator

# Storefront Schemas

CATEGORIES = ["All", "Electronics", "Clothing", "Home", "Kitchen", "Beauty"]
ALL_CATEGORIES = "All"
DEFAULT_PRICE_RANGE: tuple[float, float] = (0.0, 1000.0)

class Product(BaseModel):
    id: str
    name: str
    category: str
    price: float = Field(ge=0)
    discount_price: Optional[float] = Field(default=None, ge=0)
    rating: float = Field(default=0, ge=0, le=5)
    description: str = ""
    features: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    in_stock: bool = True
    is_new: bool = False
    is_best_seller: bool = False

    @model_validator(mode="after")
    def _discount_not_above_price(self) -> "Product":
        if self.discount_price is not None and self.discount_price > self.price:
            raise ValueError("discount_price must not exceed price")
        return self

    @property
    def effective_price(self) -> float:
        return self.discount_price if self.discount_price is not None else self.price

class CartLine(BaseModel):
    product: Product
    quantity: int = Field(ge=1)

class CartState(BaseModel):
    items: list[CartLine]
    open: bool
    count: int
    total: float

class WishlistState(BaseModel):
    items: list[Product]
    count: int

class SortKey(str, Enum):
    FEATURED = "featured"
    NEWEST = "newest"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"

class ViewMode(str, Enum):
    GRID = "grid"
    LIST = "list"

class FilterState(BaseModel):
    search: str = ""
    price_range: tuple[float, float] = DEFAULT_PRICE_RANGE
    categories: list[str] = Field(default_factory=list)
    sort: SortKey = SortKey.FEATURED
    page: int = Field(default=1, ge=1)
    view: ViewMode = ViewMode.GRID

    @model_validator(mode="after")
    def _ordered_price_range(self) -> "FilterState":
        lower, upper = self.price_range
        if lower > upper:
            raise ValueError("price_range lower bound must not exceed upper bound")
        return self

class ProductPage(BaseModel):
    items: list[Product]
    total_matches: int
    total_pages: int
    page: int

# API payloads

class AddToCartIn(BaseModel):
    product_id: str
    quantity: int = 1
    color: Optional[str] = None
    size: Optional[str] = None

class QuantityIn(BaseModel):
    quantity: int

class FilterUpdate(BaseModel):
    search: Optional[str] = None
    price_range: Optional[tuple[float, float]] = None
    sort: Optional[SortKey] = None
    page: Optional[int] = Field(default=None, ge=1)
    view: Optional[ViewMode] = None

class FilterOut(BaseModel):
    applied: FilterState
    search_input: str
    price_input: tuple[float, float]
    pending: bool

class MembershipOut(BaseModel):
    product_id: str
    liked: bool
