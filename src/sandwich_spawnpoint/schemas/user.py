"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from sandwich_spawnpoint.models.enums import Role
from sandwich_spawnpoint.schemas.common import CamelModel
from sandwich_spawnpoint.schemas.order import OrderOut


class UserNewRequest(BaseModel):
    """Schema for creating a user session."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")


class UserOut(CamelModel):
    """A user as stored."""

    id: str
    name: str
    role: Role
    created_at: datetime


class UserListItem(UserOut):
    """A user, with orders only when they were requested."""

    orders: list[OrderOut] | None = None


class SessionTokenOut(UserOut):
    """A user together with a freshly issued session token."""

    token: str = Field(..., description="Signed session token")
    expires_in: int = Field(..., description="Seconds until the token expires")


class SessionOut(CamelModel):
    """The caller's decoded session."""

    sub: str
    name: str
    role: Role
    iat: int
    exp: int
    created_at: datetime
    expires_at: datetime


class UpgradeAdminRequest(BaseModel):
    password: str = Field(..., min_length=1)


class OtpRequest(BaseModel):
    """A VIP one-time code."""

    otp: str = Field(..., pattern=r"^\d{6}$")


class OtpOut(BaseModel):
    otp: str
