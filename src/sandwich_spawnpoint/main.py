# src/sandwich_spawnpoint/main.py
"""Main entry point for the Sandwich Spawnpoint application."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from sandwich_spawnpoint.api import (
    config_router,
    ingredients_router,
    orders_router,
    sync_router,
    system_router,
    users_router,
)
from sandwich_spawnpoint.core.errors import register_exception_handlers
from sandwich_spawnpoint.core.settings import settings
from sandwich_spawnpoint.scripts.maintenance import prepare_database
from sandwich_spawnpoint.services.cleanup import CleanupWorker
from sandwich_spawnpoint.services.sync_proxy import get_shape_proxy
from sandwich_spawnpoint.services.tokens import get_token_service

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Sandwich ordering backend",
    version=settings.app_version,
    openapi_url="/oas/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(system_router)
app.include_router(users_router, prefix="/api")
app.include_router(orders_router, prefix="/api")
app.include_router(ingredients_router, prefix="/api")
app.include_router(config_router, prefix="/api")
app.include_router(sync_router, prefix="/api")


def custom_openapi() -> dict[str, Any]:
    """Describe the bearer session scheme every protected route expects."""
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    schema.setdefault("components", {})["securitySchemes"] = {
        "Bearer": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
    }
    schema["security"] = [{"Bearer": []}]
    app.openapi_schema = schema
    return schema


app.openapi = custom_openapi  # type: ignore[method-assign]


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Refuse to serve without a signing secret.
    get_token_service()
    prepare_database()

    worker = CleanupWorker()
    await worker.start()
    app.state.cleanup_worker = worker
    logger.info("%s listening on port %s (%s)", settings.app_name, settings.port, settings.app_env)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: CleanupWorker | None = getattr(app.state, "cleanup_worker", None)
    if worker:
        await worker.stop()
    await get_shape_proxy().close()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "sandwich_spawnpoint.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=not settings.is_production,
    )
