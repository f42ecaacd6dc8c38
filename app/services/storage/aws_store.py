import logging
from typing import Any, Callable, Dict, Optional

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from app.services.storage.interface import (
    JSON_CONTENT_TYPE,
    ArtifactStore,
    HealthStatus,
    client_error_code,
    client_error_message,
    region_hint,
    response_metadata,
)
from app.utils.errors import BucketUnavailableError, error_message

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], BaseClient]

# Legacy LocationConstraint values returned by GetBucketLocation.
LEGACY_LOCATIONS = {
    "": "us-east-1",
    "US": "us-east-1",
    "EU": "eu-west-1",
}


def normalize_location_constraint(location: Optional[str]) -> str:
    if location is None:
        return "us-east-1"
    return LEGACY_LOCATIONS.get(location, location)


class AwsStore(ArtifactStore):
    """
    AWS S3. Never creates buckets; follows the bucket to its real region.

    Instances are bound to one region. Region resolution hands back a new
    store instead of rebinding the client.
    """

    backend = "aws"

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        super().__init__(bucket)
        self.region = region
        self.endpoint_url = endpoint_url
        self._access_key = access_key
        self._secret_key = secret_key
        self._client_factory = client_factory or self._default_client
        self.client = self._client_factory(region)

    def _default_client(self, region: str) -> BaseClient:
        return boto3.client(
            "s3",
            region_name=region,
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self._access_key,
            aws_secret_access_key=self._secret_key,
        )

    def with_region(self, region: str) -> "AwsStore":
        return AwsStore(
            bucket=self.bucket,
            region=region,
            endpoint_url=self.endpoint_url,
            access_key=self._access_key,
            secret_key=self._secret_key,
            client_factory=self._client_factory,
        )

    def resolve_bucket_region(self, bucket: str) -> Optional[str]:
        """
        Returns the bucket's region, or None when neither the probe nor the
        location lookup can tell.
        """
        try:
            self.client.head_bucket(Bucket=bucket)
            return self.region
        except ClientError as exc:
            hinted = region_hint(exc)
            if hinted:
                logger.info("HeadBucket %s hinted region %s (configured %s)", bucket, hinted, self.region)
                return hinted
            logger.warning("HeadBucket %s failed without region hint: %s", bucket, client_error_code(exc))
        except BotoCoreError as exc:
            logger.warning("HeadBucket %s failed: %s", bucket, exc)

        try:
            location = self.client.get_bucket_location(Bucket=bucket).get("LocationConstraint")
        except (ClientError, BotoCoreError) as exc:
            logger.warning("GetBucketLocation %s failed: %s", bucket, error_message(exc))
            return None
        region = normalize_location_constraint(location)
        logger.info("GetBucketLocation %s: %r -> %s", bucket, location, region)
        return region

    def _bound_to(self, region: Optional[str]) -> "AwsStore":
        if not region or region == self.region:
            return self
        return self.with_region(region)

    def ensure_ready(self, bucket: str) -> "AwsStore":
        store = self._bound_to(self.resolve_bucket_region(bucket))
        try:
            store.client.head_bucket(Bucket=bucket)
        except (ClientError, BotoCoreError) as exc:
            logger.error("Bucket %s unreachable in region %s: %s", bucket, store.region, error_message(exc))
            raise BucketUnavailableError(bucket, store.region, error_message(exc)) from exc
        logger.info("Bucket %s reachable in region %s", bucket, store.region)
        return store

    def put_artifact(self, bucket: str, key: str, body: bytes) -> Dict[str, Any]:
        try:
            response = self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentType=JSON_CONTENT_TYPE,
            )
        except ClientError as exc:
            hinted = region_hint(exc)
            if hinted:
                logger.error(
                    "PutObject failed: bucket %s is in region %s, client bound to %s",
                    bucket,
                    hinted,
                    self.region,
                )
            else:
                logger.error("PutObject failed: %s %s", client_error_code(exc), client_error_message(exc))
            raise

        metadata = response_metadata(response)
        logger.info("PutObject metadata: %s", metadata)
        return metadata

    def health_check(self) -> HealthStatus:
        bucket = self.bucket
        store = self._bound_to(self.resolve_bucket_region(bucket))
        try:
            store.client.head_bucket(Bucket=bucket)
        except ClientError as exc:
            return HealthStatus(
                live=False,
                backend=self.backend,
                bucket=bucket,
                region=store.region,
                hinted_region=region_hint(exc),
                error=client_error_message(exc),
            )
        except BotoCoreError as exc:
            return HealthStatus(
                live=False,
                backend=self.backend,
                bucket=bucket,
                region=store.region,
                error=error_message(exc),
            )
        return HealthStatus(live=True, backend=self.backend, bucket=bucket, region=store.region)
