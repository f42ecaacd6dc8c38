import logging
from typing import Any, Dict, Optional

import boto3
import httpx
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.services.storage.interface import (
    JSON_CONTENT_TYPE,
    ArtifactStore,
    HealthStatus,
    client_error_code,
    client_error_message,
    response_metadata,
)

logger = logging.getLogger(__name__)

HEALTH_PATH = "/minio/health/live"


def is_console_port_error(exc: ClientError) -> bool:
    """MinIO answers S3 calls made against its Console port with this error."""
    return client_error_code(exc) == "InvalidArgument" and "API port" in client_error_message(exc)


class MinioStore(ArtifactStore):
    """Self-hosted MinIO over its S3 API. Creates the bucket on demand."""

    backend = "minio"

    def __init__(
        self,
        endpoint: str,
        bucket: str,
        region: str = "us-east-1",
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        client: Optional[BaseClient] = None,
        http_client: Optional[httpx.Client] = None,
        timeout_s: float = 10.0,
    ):
        super().__init__(bucket)
        self.endpoint = endpoint.rstrip("/")
        self.region = region
        self.timeout_s = timeout_s
        self._http_client = http_client
        self.client = client or boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
        logger.info("MinIO client configured endpoint=%s region=%s bucket=%s", self.endpoint, region, bucket)

    def ensure_ready(self, bucket: str) -> "MinioStore":
        try:
            self.client.head_bucket(Bucket=bucket)
            logger.info("Bucket exists: %s", bucket)
            return self
        except ClientError as exc:
            logger.warning("Bucket check failed, attempting create: %s (%s)", bucket, client_error_code(exc))
        except BotoCoreError as exc:
            logger.warning("Bucket check failed, attempting create: %s (%s)", bucket, exc)

        try:
            self.client.create_bucket(Bucket=bucket)
        except BotoCoreError as exc:
            logger.error("Bucket create failed: %s endpoint=%s", exc, self.endpoint)
            raise
        except ClientError as exc:
            if is_console_port_error(exc):
                logger.error(
                    "Bucket create failed: endpoint %s looks like the MinIO Console port. "
                    "Point S3_ENDPOINT at the S3 API port (9000 or an HTTPS reverse proxy).",
                    self.endpoint,
                )
            else:
                logger.error("Bucket create failed: %s %s", client_error_code(exc), client_error_message(exc))
            raise
        logger.info("Bucket created: %s", bucket)
        return self

    def put_artifact(self, bucket: str, key: str, body: bytes) -> Dict[str, Any]:
        try:
            response = self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentType=JSON_CONTENT_TYPE,
            )
        except ClientError as exc:
            if is_console_port_error(exc):
                logger.error(
                    "PutObject failed: request likely sent to the Console port. "
                    "Set S3_ENDPOINT to the MinIO S3 API port (e.g. http://host:9000). endpoint=%s",
                    self.endpoint,
                )
            else:
                logger.error(
                    "PutObject failed: %s %s %s",
                    client_error_code(exc),
                    client_error_message(exc),
                    exc.response.get("ResponseMetadata"),
                )
            raise

        metadata = response_metadata(response)
        logger.info("PutObject metadata: %s", metadata)
        return metadata

    def _get(self, url: str) -> httpx.Response:
        if self._http_client is not None:
            return self._http_client.get(url)
        with httpx.Client(timeout=self.timeout_s) as client:
            return client.get(url)

    def health_check(self) -> HealthStatus:
        url = f"{self.endpoint}{HEALTH_PATH}"
        try:
            response = self._get(url)
        except httpx.HTTPError as exc:
            logger.warning("MinIO liveness probe failed: %s", exc)
            return HealthStatus(live=False, backend=self.backend, endpoint=self.endpoint)
        return HealthStatus(
            live=response.is_success,
            backend=self.backend,
            endpoint=self.endpoint,
            status=response.status_code,
        )
