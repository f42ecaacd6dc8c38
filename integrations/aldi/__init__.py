"""Aldi product-search integration package."""

from .client import AldiClient, CatalogPage
from .models import SOURCE_TAG, CatalogProduct
from .normalizer import normalize_product

__all__ = ["AldiClient", "CatalogPage", "CatalogProduct", "SOURCE_TAG", "normalize_product"]
