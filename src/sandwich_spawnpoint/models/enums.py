"""Enumerations shared by models, schemas and services."""

from __future__ import annotations

import enum


class Role(str, enum.Enum):
    """Roles a session can carry, in ascending privilege."""

    USER = "USER"
    VIP = "VIP"
    ADMIN = "ADMIN"


class IngredientType(str, enum.Enum):
    BREAD = "BREAD"
    CHEESE = "CHEESE"
    MEAT = "MEAT"
    SALAD = "SALAD"
    TOMATO = "TOMATO"
    ONION = "ONION"
    SAUCE = "SAUCE"
    SPECIAL = "SPECIAL"


class OrderStatus(str, enum.Enum):
    """Kanban columns an order moves through."""

    INQUEUE = "INQUEUE"
    BEINGMADE = "BEINGMADE"
    DONE = "DONE"


class ConfigType(str, enum.Enum):
    """Declared value type of a config entry."""

    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    PASSWORD = "PASSWORD"
    VIPOTPS = "VIPOTPS"


class BruteforceAction(str, enum.Enum):
    """Privileged actions guarded by the bruteforce ledger."""

    ADMINPROMOTE = "ADMINPROMOTE"
    VIPPROMOTE = "VIPPROMOTE"
