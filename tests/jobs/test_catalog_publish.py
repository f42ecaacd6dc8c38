import json
import re
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.jobs.catalog_publish import build_artifact_key, publish_catalog, serialize_products, wake_ingestor
from app.utils.errors import UpstreamFetchError
from integrations.aldi import AldiClient, CatalogProduct

STARTED_AT = datetime(2026, 1, 24, 10, 35, 47, 123000, tzinfo=timezone.utc)


def _aldi_client(pages, status_code=200):
    def handler(request):
        offset = int(request.url.params["offset"])
        return httpx.Response(status_code, json=pages.get(offset, {"data": []}))

    return AldiClient(
        api_base="https://api.aldi.test/v3/product-search",
        page_size=60,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def _store(backend="minio"):
    store = MagicMock()
    store.backend = backend
    store.ensure_ready.return_value = store
    return store


def test_build_artifact_key():
    assert build_artifact_key(STARTED_AT) == "2026-01-24/103547.json"


def test_build_artifact_key_format_and_utc():
    local = STARTED_AT.astimezone(timezone(timedelta(hours=5, minutes=30)))

    key = build_artifact_key(local)

    assert key == "2026-01-24/103547.json"
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}/\d{6}\.json", key)
    assert ":" not in key


def test_build_artifact_key_naive_is_utc():
    assert build_artifact_key(datetime(2026, 10, 19, 0, 0, 5)) == "2026-10-19/000005.json"


def test_serialize_products_pretty_json():
    body = serialize_products([CatalogProduct(name="Crème", price=1.5, category=("Dairy",))])

    assert body.startswith(b"[\n  {")
    assert json.loads(body) == [
        {
            "name": "Crème",
            "price": 1.5,
            "brand": None,
            "sku": None,
            "currency": "EUR",
            "source": "aldi",
            "category": ["Dairy"],
            "image": None,
        }
    ]
    assert "Crème" in body.decode("utf-8")


def test_publish_single_page(settings, make_item, make_page):
    store = _store()
    client = _aldi_client({0: make_page([make_item(), make_item(name="Bread")], 2)})

    result = publish_catalog(settings=settings, store=store, client=client, started_at=STARTED_AT)

    assert result.model_dump() == {"bucket": "products", "key": "2026-01-24/103547.json", "count": 2}
    store.ensure_ready.assert_called_once_with("products")
    store.put_artifact.assert_called_once()
    bucket, key, body = store.put_artifact.call_args.args
    assert (bucket, key) == ("products", "2026-01-24/103547.json")
    assert [p["name"] for p in json.loads(body)] == ["Milk", "Bread"]


def test_publish_uses_store_returned_by_ensure_ready(settings, make_item, make_page):
    store = _store(backend="aws")
    rebound = _store(backend="aws")
    store.ensure_ready.return_value = rebound

    publish_catalog(
        settings=settings,
        store=store,
        client=_aldi_client({0: make_page([make_item()], 1)}),
        started_at=STARTED_AT,
    )

    store.put_artifact.assert_not_called()
    rebound.put_artifact.assert_called_once()


def test_publish_upstream_error_writes_nothing(settings):
    store = _store()

    with pytest.raises(UpstreamFetchError):
        publish_catalog(settings=settings, store=store, client=_aldi_client({}, status_code=500))

    store.ensure_ready.assert_not_called()
    store.put_artifact.assert_not_called()


def test_publish_upload_error_propagates(settings, make_item, make_page):
    store = _store()
    store.put_artifact.side_effect = RuntimeError("put failed")

    with pytest.raises(RuntimeError, match="put failed"):
        publish_catalog(
            settings=settings,
            store=store,
            client=_aldi_client({0: make_page([make_item()], 1)}),
            started_at=STARTED_AT,
        )


def test_publish_wakes_ingestor_for_minio(settings, make_item, make_page):
    settings = settings.model_copy(update={"ingestor_url": "https://ingestor.test"})

    with patch("app.jobs.catalog_publish.wake_ingestor") as mock_wake:
        publish_catalog(
            settings=settings,
            store=_store("minio"),
            client=_aldi_client({0: make_page([], 0)}),
            started_at=STARTED_AT,
        )

    mock_wake.assert_called_once_with("https://ingestor.test", timeout_s=30.0)


def test_publish_skips_ingestor_for_aws(settings, make_page):
    settings = settings.model_copy(update={"ingestor_url": "https://ingestor.test"})

    with patch("app.jobs.catalog_publish.wake_ingestor") as mock_wake:
        publish_catalog(
            settings=settings,
            store=_store("aws"),
            client=_aldi_client({0: make_page([], 0)}),
            started_at=STARTED_AT,
        )

    mock_wake.assert_not_called()


def test_wake_ingestor_swallows_network_errors():
    with patch("app.jobs.catalog_publish.httpx.Client") as mock_client_cls:
        mock_client_cls.return_value.__enter__.return_value.get.side_effect = httpx.ConnectError("down")

        assert wake_ingestor("https://ingestor.test") is None


def test_wake_ingestor_returns_status():
    with patch("app.jobs.catalog_publish.httpx.Client") as mock_client_cls:
        mock_client_cls.return_value.__enter__.return_value.get.return_value = httpx.Response(204)

        assert wake_ingestor("https://ingestor.test") == 204
