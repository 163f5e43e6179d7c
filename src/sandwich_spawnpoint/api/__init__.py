# src/sandwich_spawnpoint/api/__init__.py
"""HTTP API."""

from .endpoints import (
    config_router,
    ingredients_router,
    orders_router,
    sync_router,
    system_router,
    users_router,
)

__all__ = [
    "config_router",
    "ingredients_router",
    "orders_router",
    "sync_router",
    "system_router",
    "users_router",
]
