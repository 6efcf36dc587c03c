from __future__ import annotations

class StorefrontError(Exception):
    """Base class for storefront errors."""

class StorageError(StorefrontError):
    """A durable storage read or write failed."""

class ProductNotFound(StorefrontError):
    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id

class SelectionRequired(StorefrontError):
    """Add-to-cart without a color/size on a product that defines variants."""

    def __init__(self, option: str):
        super().__init__(f"Please select a {option}")
        self.option = option
