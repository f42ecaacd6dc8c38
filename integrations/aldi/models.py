from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

SOURCE_TAG = "aldi"


class CatalogProduct(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    price: Optional[float] = None
    brand: Optional[str] = None
    sku: Optional[str] = None
    currency: str = "EUR"
    source: str = SOURCE_TAG
    category: tuple[str, ...] = Field(default_factory=tuple)
    image: Optional[str] = None
