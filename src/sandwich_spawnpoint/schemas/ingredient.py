"""Ingredient schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from sandwich_spawnpoint.models.enums import IngredientType
from sandwich_spawnpoint.schemas.common import CamelModel


class IngredientAddRequest(BaseModel):
    name: str = Field(..., min_length=1)
    type: IngredientType
    enabled: bool = True


class IngredientModifyRequest(BaseModel):
    name: str | None = Field(None, min_length=1)
    type: IngredientType | None = None
    enabled: bool | None = None


class IngredientOut(CamelModel):
    id: str
    name: str
    type: IngredientType
    enabled: bool
    created_at: datetime
    modified_at: datetime


class IngredientListItem(IngredientOut):
    order_count: int = Field(0, description="Number of orders using this ingredient")
