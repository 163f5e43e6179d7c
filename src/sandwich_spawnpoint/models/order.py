# src/sandwich_spawnpoint/models/order.py
"""SQLAlchemy model for sandwich orders."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sandwich_spawnpoint.db.session import Base
from sandwich_spawnpoint.db.time import utcnow
from sandwich_spawnpoint.models.enums import OrderStatus
from sandwich_spawnpoint.models.user import new_id

if TYPE_CHECKING:
    from sandwich_spawnpoint.models.ingredient import IngredientOnOrder
    from sandwich_spawnpoint.models.user import User


class Order(Base):
    """A sandwich order moving through the kitchen pipeline."""

    __tablename__ = "Order"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        "userId",
        String(36),
        ForeignKey("User.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="OrderStatus"), nullable=False, default=OrderStatus.INQUEUE
    )
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=utcnow
    )
    modified_at: Mapped[datetime] = mapped_column(
        "modifiedAt", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    user: Mapped[User] = relationship("User", back_populates="orders")
    ingredients: Mapped[list[IngredientOnOrder]] = relationship(
        "IngredientOnOrder",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
