# src/sandwich_spawnpoint/api/endpoints/config.py
"""Runtime configuration endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from sandwich_spawnpoint.api.dependencies import (
    AdminSessionDep,
    ConfigStoreDep,
    OptionalSessionDep,
)
from sandwich_spawnpoint.models import Role
from sandwich_spawnpoint.schemas.config import ConfigModifyRequest
from sandwich_spawnpoint.services.app_config import ConfigValue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/config", tags=["config"])


@router.get("/get", summary="Read the runtime configuration")
def read_config(claim: OptionalSessionDep, config: ConfigStoreDep) -> dict[str, ConfigValue]:
    """Passwords are never included. One-time codes are listed for admins only."""
    is_admin = claim is not None and claim.role is Role.ADMIN
    return config.get(strip_sensitive=not is_admin)


@router.patch("/modify", summary="Change one configuration value")
def modify_config(
    payload: ConfigModifyRequest,
    claim: AdminSessionDep,
    config: ConfigStoreDep,
) -> dict[str, ConfigValue]:
    config.update(payload.object, payload.value)
    logger.info("Config key %s changed by %s", payload.object, claim.sub)
    return config.get()
