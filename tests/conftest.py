import sys
from pathlib import Path
from typing import Any, Optional

import boto3
import pytest
from botocore.config import Config
from botocore.stub import Stubber

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from app.config import Settings, get_settings


def _make_item(
    name: Optional[str] = "Milk",
    amount: Any = 199,
    sku: Optional[str] = "000001",
    **extra: Any,
) -> dict[str, Any]:
    item: dict[str, Any] = {
        "name": name,
        "sku": sku,
        "brandName": "Cowbelle",
        "price": {"amountRelevant": amount, "currencyCode": "EUR"},
        "categories": [{"name": "Dairy"}, {"name": "Milk"}],
        "assets": [
            {"mimeType": "application/pdf", "url": "https://cdn.example.com/leaflet.pdf"},
            {"mimeType": "image/jpeg", "url": "https://cdn.example.com/milk.jpg"},
        ],
    }
    item.update(extra)
    return item


def _make_page(items: list[dict[str, Any]], total_count: Optional[int]) -> dict[str, Any]:
    page: dict[str, Any] = {"data": items}
    if total_count is not None:
        page["meta"] = {"pagination": {"totalCount": total_count}}
    return page


@pytest.fixture
def make_item():
    return _make_item


@pytest.fixture
def make_page():
    return _make_page


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        STORAGE_BACKEND="minio",
        S3_ENDPOINT="http://minio.test:9000",
        S3_REGION="us-east-1",
        S3_ACCESS_KEY="test",
        S3_SECRET_KEY="test",
        S3_BUCKET="products",
        ALDI_API_BASE="https://api.aldi.test/v3/product-search",
        ALDI_PAGE_SIZE=2,
    )



def make_s3_client(region="us-east-1", endpoint_url=None):
    return boto3.client(
        "s3",
        region_name=region,
        endpoint_url=endpoint_url,
        aws_access_key_id="test",
        aws_secret_access_key="test",
        config=Config(s3={"addressing_style": "path"}),
    )


@pytest.fixture
def s3_clients():
    """Stubbed S3 clients keyed by region."""
    clients = {region: make_s3_client(region) for region in ("us-east-1", "eu-west-1", "eu-central-1")}
    stubbers = {region: Stubber(client) for region, client in clients.items()}
    for stubber in stubbers.values():
        stubber.activate()
    yield clients, stubbers
    for stubber in stubbers.values():
        stubber.deactivate()


@pytest.fixture
def minio_client():
    client = make_s3_client(endpoint_url="http://minio.test:9000")
    with Stubber(client) as stubber:
        yield client, stubber
