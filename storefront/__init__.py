"""Storefront state engine: cart, wishlist and product discovery."""
