from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from pydantic import BaseModel

from app.config import Settings, get_settings
from app.observability.metrics import published_products_total, publish_runs_total
from app.services.storage import ArtifactStore, get_artifact_store
from integrations.aldi import AldiClient, CatalogProduct

logger = logging.getLogger(__name__)


class PublishResult(BaseModel):
    bucket: str
    key: str
    count: int


def build_artifact_key(started_at: datetime) -> str:
    """`YYYY-MM-DD/HHMMSS.json` in UTC; unique per second."""
    if started_at.tzinfo is None:
        started_at = started_at.replace(tzinfo=timezone.utc)
    started_at = started_at.astimezone(timezone.utc)
    return f"{started_at:%Y-%m-%d}/{started_at:%H%M%S}.json"


def serialize_products(products: list[CatalogProduct]) -> bytes:
    payload = [product.model_dump(mode="json") for product in products]
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def wake_ingestor(url: str, timeout_s: float = 30.0) -> Optional[int]:
    """Best-effort GET so a sleeping downstream ingestor is up by upload time."""
    try:
        with httpx.Client(timeout=timeout_s) as client:
            response = client.get(url)
    except httpx.HTTPError as exc:
        logger.warning("Ingestor unreachable, continuing: %s", exc)
        return None
    logger.info("Ingestor wakeup status: %s", response.status_code)
    return response.status_code


def publish_catalog(
    settings: Optional[Settings] = None,
    store: Optional[ArtifactStore] = None,
    client: Optional[AldiClient] = None,
    started_at: Optional[datetime] = None,
) -> PublishResult:
    """
    One-shot catalog publish.
    1. Fetches every listing page and normalizes the items.
    2. Makes sure the bucket is reachable (the store may rebind, e.g. to the bucket's region).
    3. Writes the whole batch as a single JSON object keyed by the run's start time.
    Any failure aborts the run and propagates.
    """
    settings = settings or get_settings()
    started_at = started_at or datetime.now(timezone.utc)
    store = store or get_artifact_store(settings)
    client = client or AldiClient.from_settings(settings)
    bucket = settings.s3_bucket

    try:
        if store.backend == "minio" and settings.ingestor_url:
            wake_ingestor(settings.ingestor_url, timeout_s=settings.http_timeout_seconds)

        products = client.fetch_all()
        key = build_artifact_key(started_at)
        logger.info("Fetched %d products, uploading to %s/%s", len(products), bucket, key)

        ready_store = store.ensure_ready(bucket)
        ready_store.put_artifact(bucket, key, serialize_products(products))
    except Exception:
        publish_runs_total.labels(status="error").inc()
        raise

    publish_runs_total.labels(status="success").inc()
    published_products_total.inc(len(products))
    logger.info("Products uploaded to %s/%s", bucket, key)
    return PublishResult(bucket=bucket, key=key, count=len(products))
