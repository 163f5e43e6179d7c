"""Order schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from sandwich_spawnpoint.models.enums import OrderStatus
from sandwich_spawnpoint.schemas.common import CamelModel
from sandwich_spawnpoint.schemas.ingredient import IngredientOut


class OrderNewRequest(BaseModel):
    """Ingredient ids; repeating an id orders more than one portion."""

    ingredients: list[str] = Field(..., min_length=1)


class OrderModifyRequest(BaseModel):
    ingredients: list[str] | None = None
    status: OrderStatus | None = None


class OrderIngredientOut(CamelModel):
    ingredient: IngredientOut
    ingredient_number: int


class OrderOut(CamelModel):
    id: str
    user_id: str
    status: OrderStatus
    created_at: datetime
    modified_at: datetime


class OrderDetailOut(OrderOut):
    ingredients: list[OrderIngredientOut] = Field(default_factory=list)
