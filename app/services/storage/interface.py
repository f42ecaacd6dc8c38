from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from botocore.exceptions import ClientError
from pydantic import BaseModel, ConfigDict, Field

JSON_CONTENT_TYPE = "application/json"


class HealthStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    live: bool
    backend: str
    endpoint: Optional[str] = None
    status: Optional[int] = None
    bucket: Optional[str] = None
    region: Optional[str] = None
    hinted_region: Optional[str] = Field(None, alias="hintedRegion")
    error: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ArtifactStore(ABC):
    """
    Abstract interface for the object store that receives catalog artifacts.
    """

    backend: str = ""

    def __init__(self, bucket: str):
        self.bucket = bucket

    @abstractmethod
    def ensure_ready(self, bucket: str) -> "ArtifactStore":
        """
        Makes sure the bucket can receive writes and returns the store to
        upload through. Implementations may return a new instance bound to
        different connection parameters; the receiver is never modified.
        """

    @abstractmethod
    def put_artifact(self, bucket: str, key: str, body: bytes) -> Dict[str, Any]:
        """Writes one JSON object and returns the response metadata."""

    @abstractmethod
    def health_check(self) -> HealthStatus:
        """Probes the backend without side effects."""


def client_error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "") or ""


def client_error_message(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Message", "") or str(exc)


def region_hint(exc: ClientError) -> Optional[str]:
    """Region S3 reports for the bucket in a failed response, if any."""
    headers = exc.response.get("ResponseMetadata", {}).get("HTTPHeaders", {}) or {}
    hinted = headers.get("x-amz-bucket-region") or exc.response.get("Error", {}).get("Region")
    return hinted or None


def response_metadata(response: Dict[str, Any]) -> Dict[str, Any]:
    metadata = response.get("ResponseMetadata", {}) or {}
    return {
        "http_status": metadata.get("HTTPStatusCode"),
        "request_id": metadata.get("RequestId"),
        "etag": response.get("ETag"),
    }
