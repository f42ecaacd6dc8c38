from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MINIO_ENDPOINT = "http://localhost:9000"
DEFAULT_MINIO_ACCESS_KEY = "minio"
DEFAULT_MINIO_SECRET_KEY = "miniopass"


class Settings(BaseSettings):
    storage_backend: str = Field("minio", alias="STORAGE_BACKEND")
    s3_endpoint: Optional[str] = Field(None, alias="S3_ENDPOINT")
    s3_region: str = Field("us-east-1", alias="S3_REGION")
    s3_access_key: Optional[str] = Field(None, alias="S3_ACCESS_KEY")
    s3_secret_key: Optional[str] = Field(None, alias="S3_SECRET_KEY")
    s3_bucket: str = Field("products", alias="S3_BUCKET")
    ingestor_url: Optional[str] = Field(None, alias="INGESTOR_URL")

    aldi_api_base: str = Field("https://api.aldi.ie/v3/product-search", alias="ALDI_API_BASE")
    aldi_page_size: int = Field(60, alias="ALDI_PAGE_SIZE", gt=0)
    aldi_sort: str = Field("name_asc", alias="ALDI_SORT")
    aldi_service_point: str = Field("D105", alias="ALDI_SERVICE_POINT")
    aldi_currency: str = Field("EUR", alias="ALDI_CURRENCY")
    aldi_service_type: str = Field("walk-in", alias="ALDI_SERVICE_TYPE")
    http_timeout_seconds: float = Field(30.0, alias="HTTP_TIMEOUT_SECONDS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    debug: bool = Field(False, alias="DEBUG")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def minio_endpoint(self) -> str:
        return (self.s3_endpoint or DEFAULT_MINIO_ENDPOINT).rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
