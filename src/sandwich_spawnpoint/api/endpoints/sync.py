# src/sandwich_spawnpoint/api/endpoints/sync.py
"""Authenticated, row-filtered access to the shape sync service."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query
from starlette.responses import StreamingResponse

from sandwich_spawnpoint.api.dependencies import CurrentSessionDep, ShapeProxyDep
from sandwich_spawnpoint.schemas.sync import ShapeQuery
from sandwich_spawnpoint.services.sync_proxy import authorize_shape_query

router = APIRouter(tags=["sync"])


@router.get(
    "/sync",
    summary="Proxy a shape request to the sync service",
    response_class=StreamingResponse,
)
async def sync_shape(
    query: Annotated[ShapeQuery, Query()],
    claim: CurrentSessionDep,
    proxy: ShapeProxyDep,
) -> StreamingResponse:
    authorize_shape_query(query, claim)
    return await proxy.forward(query)
