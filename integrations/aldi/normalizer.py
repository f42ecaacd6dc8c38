from __future__ import annotations

from typing import Any, Optional

from .models import CatalogProduct

DEFAULT_CURRENCY = "EUR"


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def as_mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_price(price: dict[str, Any]) -> Optional[float]:
    """Minor units (cents) to major units."""
    amount = price.get("amountRelevant")
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return None
    return amount / 100


def _extract_categories(item: dict[str, Any]) -> tuple[str, ...]:
    categories = item.get("categories")
    if not isinstance(categories, list):
        return ()
    names = (as_mapping(category).get("name") for category in categories)
    return tuple(name for name in names if isinstance(name, str) and name)


def _extract_image(item: dict[str, Any]) -> Optional[str]:
    assets = item.get("assets")
    if not isinstance(assets, list):
        return None
    for asset in assets:
        asset = as_mapping(asset)
        mime_type = asset.get("mimeType")
        if isinstance(mime_type, str) and mime_type.startswith("image/"):
            return _str_or_none(asset.get("url"))
    return None


def normalize_product(item: Any) -> CatalogProduct:
    item = as_mapping(item)
    price = as_mapping(item.get("price"))

    return CatalogProduct(
        name=_str_or_none(item.get("name")),
        price=_parse_price(price),
        brand=_str_or_none(item.get("brandName")),
        sku=_str_or_none(item.get("sku")),
        currency=_str_or_none(price.get("currencyCode")) or DEFAULT_CURRENCY,
        category=_extract_categories(item),
        image=_extract_image(item),
    )
