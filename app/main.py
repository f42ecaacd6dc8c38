from __future__ import annotations

import logging

from fastapi import FastAPI
from prometheus_client import make_asgi_app

from app.config import get_settings
from app.observability.tracing import configure_tracing, get_otel_config, instrument_fastapi
from app.utils.errors import install_exception_handlers
from routes.catalog import router as catalog_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

otel_config = get_otel_config()
if otel_config:
    configure_tracing(*otel_config)

app = FastAPI(title="Aldi Catalog Publisher", version="1.0.0", debug=settings.debug)

install_exception_handlers(app)
instrument_fastapi(app)
app.include_router(catalog_router)
app.mount("/metrics", make_asgi_app())


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
