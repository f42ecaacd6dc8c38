from app.services.storage.aws_store import AwsStore, normalize_location_constraint
from app.services.storage.factory import get_artifact_store
from app.services.storage.interface import ArtifactStore, HealthStatus
from app.services.storage.minio_store import MinioStore

__all__ = [
    "ArtifactStore",
    "AwsStore",
    "HealthStatus",
    "MinioStore",
    "get_artifact_store",
    "normalize_location_constraint",
]
