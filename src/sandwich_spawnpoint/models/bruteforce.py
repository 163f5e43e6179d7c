# src/sandwich_spawnpoint/models/bruteforce.py
"""Append-only log of failed privileged attempts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sandwich_spawnpoint.db.session import Base
from sandwich_spawnpoint.db.time import utcnow
from sandwich_spawnpoint.models.enums import BruteforceAction


class BruteforceAttempt(Base):
    """A single failed attempt at a guarded action. Never updated."""

    __tablename__ = "Bruteforce"
    __table_args__ = (
        Index("ix_bruteforce_user_action", "userId", "action", "createdAt"),
        Index("ix_bruteforce_ip_action", "ip", "action", "createdAt"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    action: Mapped[BruteforceAction] = mapped_column(
        Enum(BruteforceAction, name="BruteforceActions"), nullable=False
    )
    user_id: Mapped[str | None] = mapped_column(
        "userId",
        String(36),
        ForeignKey("User.id", ondelete="SET NULL"),
        nullable=True,
    )
    ip: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
