import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.jobs.catalog_publish import publish_catalog
from app.observability.metrics import storage_health_checks_total
from app.services.storage import get_artifact_store
from app.utils.errors import error_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["catalog"])


@router.api_route("/scrape", methods=["GET", "POST"], summary="Fetch the Aldi catalog and upload it as one artifact")
def scrape() -> JSONResponse:
    """
    Runs the whole publish pipeline synchronously.
    Intended to be hit by an external scheduler.
    """
    try:
        result = publish_catalog()
    except Exception as exc:
        logger.exception("Catalog publish failed")
        return JSONResponse(status_code=500, content={"ok": False, "error": error_message(exc)})
    return JSONResponse(status_code=200, content={"ok": True, **result.model_dump()})


@router.get("/health", summary="Liveness of the configured storage backend")
def storage_health() -> JSONResponse:
    backend = "unknown"
    try:
        store = get_artifact_store()
        backend = store.backend
        status = store.health_check()
    except Exception as exc:
        logger.exception("Storage health check crashed")
        storage_health_checks_total.labels(backend=backend, live="error").inc()
        return JSONResponse(status_code=500, content={"live": False, "error": error_message(exc)})

    payload = status.to_payload()
    storage_health_checks_total.labels(backend=status.backend, live=str(status.live).lower()).inc()
    logger.info("Health check status: %s", payload)
    return JSONResponse(status_code=200 if status.live else 503, content=payload)
