import logging
from typing import Optional

from app.config import DEFAULT_MINIO_ACCESS_KEY, DEFAULT_MINIO_SECRET_KEY, Settings, get_settings
from app.services.storage.aws_store import AwsStore
from app.services.storage.interface import ArtifactStore
from app.services.storage.minio_store import MinioStore
from app.utils.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _build_minio(settings: Settings) -> ArtifactStore:
    return MinioStore(
        endpoint=settings.minio_endpoint,
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        access_key=settings.s3_access_key or DEFAULT_MINIO_ACCESS_KEY,
        secret_key=settings.s3_secret_key or DEFAULT_MINIO_SECRET_KEY,
        timeout_s=settings.http_timeout_seconds,
    )


def _build_aws(settings: Settings) -> ArtifactStore:
    # Unset credentials fall through to the boto3 credential chain.
    return AwsStore(
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        endpoint_url=settings.s3_endpoint,
        access_key=settings.s3_access_key,
        secret_key=settings.s3_secret_key,
    )


_builders = {
    "minio": _build_minio,
    "aws": _build_aws,
}


def get_artifact_store(settings: Optional[Settings] = None) -> ArtifactStore:
    """
    Returns the artifact store for the configured backend.
    Supported backends: minio, aws
    """
    settings = settings or get_settings()
    backend = settings.storage_backend.strip().lower()
    builder = _builders.get(backend)
    if builder is None:
        raise ConfigurationError(f"Unknown storage backend '{settings.storage_backend}'")
    logger.info("Using %s artifact store", backend)
    return builder(settings)
