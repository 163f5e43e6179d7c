# src/sandwich_spawnpoint/models/user.py
"""SQLAlchemy model for session users."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sandwich_spawnpoint.db.session import Base
from sandwich_spawnpoint.db.time import utcnow
from sandwich_spawnpoint.models.enums import Role

if TYPE_CHECKING:
    from sandwich_spawnpoint.models.order import Order


def new_id() -> str:
    """Return a fresh primary key value."""
    return str(uuid.uuid4())


class User(Base):
    """A named customer session. Users are pruned once their token lifetime passes."""

    __tablename__ = "User"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="Role"), nullable=False, default=Role.USER
    )
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=utcnow
    )

    orders: Mapped[list[Order]] = relationship(
        "Order",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
