# src/sandwich_spawnpoint/api/endpoints/system.py
"""Liveness and service information endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from sandwich_spawnpoint.core.settings import settings

router = APIRouter(tags=["system"])


@router.get("/healthz", summary="Liveness probe")
async def healthz() -> dict[str, object]:
    return {"code": 200, "message": "Ok"}


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    """Point developers at the API description."""
    return f"{settings.app_name} {settings.app_version}. API description at /oas/openapi.json"
