# src/sandwich_spawnpoint/models/config.py
"""Key/value application settings stored in the database."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sandwich_spawnpoint.db.session import Base
from sandwich_spawnpoint.db.time import utcnow
from sandwich_spawnpoint.models.enums import ConfigType


class ConfigEntry(Base):
    """One declared setting, its type tag and its raw string value."""

    __tablename__ = "Config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    type: Mapped[ConfigType] = mapped_column(
        Enum(ConfigType, name="ConfigType"), nullable=False
    )
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=utcnow
    )
    modified_at: Mapped[datetime] = mapped_column(
        "modifiedAt", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class VipOtp(Base):
    """An outstanding VIP one-time code.

    Codes live one per row so that redeeming is a single conditional delete.
    """

    __tablename__ = "VipOtp"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(6), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=utcnow
    )
