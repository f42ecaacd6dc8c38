from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class AppError(Exception):
    def __init__(self, message: str, fields: Optional[dict[str, Any]] = None):
        self.message = message
        self.fields = fields or {}
        super().__init__(message)


class UpstreamFetchError(AppError):
    """The product listing answered with a non-success status."""

    def __init__(self, status_code: int, url: str):
        super().__init__(
            f"Upstream request failed: HTTP {status_code}",
            {"status": status_code, "url": url},
        )
        self.status_code = status_code


class BucketUnavailableError(AppError):
    def __init__(self, bucket: str, region: Optional[str], reason: str):
        super().__init__(
            f"Bucket '{bucket}' is not reachable (region={region}): {reason}",
            {"bucket": bucket, "region": region},
        )


class ConfigurationError(AppError):
    pass


def error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def error_response(
    code: str, message: str, http_status: int, headers: Optional[dict[str, str]] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=http_status,
        content={"error": {"code": code, "message": message}},
        headers=headers,
    )


def install_exception_handlers(app: FastAPI) -> None:
    # Routing failures (404, 405) are raised as Starlette's HTTPException.
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return error_response("http_error", message, exc.status_code, exc.headers)
