# src/sandwich_spawnpoint/api/endpoints/__init__.py
"""API endpoint modules."""

from .config import router as config_router
from .ingredients import router as ingredients_router
from .orders import router as orders_router
from .sync import router as sync_router
from .system import router as system_router
from .users import router as users_router

__all__ = [
    "config_router",
    "ingredients_router",
    "orders_router",
    "sync_router",
    "system_router",
    "users_router",
]
