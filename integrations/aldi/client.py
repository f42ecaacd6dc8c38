from __future__ import annotations

import logging
from collections.abc import Generator
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from app.utils.errors import UpstreamFetchError

from .models import CatalogProduct
from .normalizer import as_mapping, normalize_product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogPage:
    offset: int
    items: list[dict[str, Any]]
    total_count: int


class AldiClient:
    def __init__(
        self,
        api_base: str,
        page_size: int = 60,
        sort: str = "name_asc",
        service_point: str = "D105",
        currency: str = "EUR",
        service_type: str = "walk-in",
        timeout_s: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_base = api_base
        self.page_size = page_size
        self.sort = sort
        self.service_point = service_point
        self.currency = currency
        self.service_type = service_type
        self.timeout_s = timeout_s
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings, http_client: Optional[httpx.Client] = None) -> "AldiClient":
        return cls(
            api_base=settings.aldi_api_base,
            page_size=settings.aldi_page_size,
            sort=settings.aldi_sort,
            service_point=settings.aldi_service_point,
            currency=settings.aldi_currency,
            service_type=settings.aldi_service_type,
            timeout_s=settings.http_timeout_seconds,
            http_client=http_client,
        )

    def _params(self, offset: int) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "serviceType": self.service_type,
            "limit": self.page_size,
            "offset": offset,
            "sort": self.sort,
            "servicePoint": self.service_point,
        }

    def _get(self, params: dict[str, Any]) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if self._http_client is not None:
            return self._http_client.get(self.api_base, params=params, headers=headers)
        with httpx.Client(timeout=self.timeout_s) as client:
            return client.get(self.api_base, params=params, headers=headers)

    def get_page(self, offset: int) -> CatalogPage:
        """Fetch one listing page. Any non-2xx status aborts the run."""
        params = self._params(offset)
        logger.info("Fetching Aldi page offset=%s limit=%s", offset, self.page_size)
        response = self._get(params)
        if not response.is_success:
            raise UpstreamFetchError(response.status_code, str(response.url))

        data = as_mapping(response.json())
        items = data.get("data")
        items = items if isinstance(items, list) else []
        total_count = as_mapping(as_mapping(data.get("meta")).get("pagination")).get("totalCount")
        if isinstance(total_count, bool) or not isinstance(total_count, int):
            total_count = 0
        return CatalogPage(offset=offset, items=items, total_count=total_count)

    def iter_pages(self) -> Generator[CatalogPage, None, None]:
        """
        Yields pages until the total declared by the first page is reached
        or a page comes back empty.
        """
        offset = 0
        total_count: Optional[int] = None
        while True:
            page = self.get_page(offset)
            if total_count is None:
                total_count = page.total_count
                logger.info("Declared totalCount: %s", total_count)

            yield page

            offset += self.page_size
            if offset >= total_count or not page.items:
                break

    def fetch_all(self) -> list[CatalogProduct]:
        products: list[CatalogProduct] = []
        for page in self.iter_pages():
            normalized = [normalize_product(item) for item in page.items]
            products.extend(normalized)
            logger.info("Page offset=%s: +%d (total %d)", page.offset, len(normalized), len(products))
        return products
