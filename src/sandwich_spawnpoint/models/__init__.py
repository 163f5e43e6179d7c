# src/sandwich_spawnpoint/models/__init__.py
"""SQLAlchemy models for the Sandwich Spawnpoint application."""

from .bruteforce import BruteforceAttempt
from .config import ConfigEntry, VipOtp
from .enums import BruteforceAction, ConfigType, IngredientType, OrderStatus, Role
from .ingredient import Ingredient, IngredientOnOrder
from .order import Order
from .user import User

__all__ = [
    "BruteforceAttempt", "BruteforceAction",
    "ConfigEntry", "ConfigType", "VipOtp",
    "Ingredient", "IngredientOnOrder", "IngredientType",
    "Order", "OrderStatus",
    "User", "Role",
]
