# src/sandwich_spawnpoint/models/ingredient.py
"""SQLAlchemy models for ingredients and their use on orders."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sandwich_spawnpoint.db.session import Base
from sandwich_spawnpoint.db.time import utcnow
from sandwich_spawnpoint.models.enums import IngredientType
from sandwich_spawnpoint.models.user import new_id

if TYPE_CHECKING:
    from sandwich_spawnpoint.models.order import Order


class Ingredient(Base):
    """Something that can go on a sandwich."""

    __tablename__ = "Ingredient"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[IngredientType] = mapped_column(
        Enum(IngredientType, name="IngredientTypes"), nullable=False
    )
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=utcnow
    )
    modified_at: Mapped[datetime] = mapped_column(
        "modifiedAt", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    orders: Mapped[list[IngredientOnOrder]] = relationship(
        "IngredientOnOrder", back_populates="ingredient"
    )


class IngredientOnOrder(Base):
    """How many portions of an ingredient an order contains."""

    __tablename__ = "IngredientOnOrder"

    order_id: Mapped[str] = mapped_column(
        "orderId",
        String(36),
        ForeignKey("Order.id", ondelete="CASCADE"),
        primary_key=True,
    )
    ingredient_id: Mapped[str] = mapped_column(
        "ingredientId",
        String(36),
        ForeignKey("Ingredient.id", ondelete="RESTRICT"),
        primary_key=True,
    )
    ingredient_number: Mapped[int] = mapped_column(
        "ingredientNumber", Integer, nullable=False, default=1
    )

    order: Mapped[Order] = relationship("Order", back_populates="ingredients")
    ingredient: Mapped[Ingredient] = relationship("Ingredient", back_populates="orders")
