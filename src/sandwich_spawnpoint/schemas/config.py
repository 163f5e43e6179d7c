"""Config schemas."""

from pydantic import BaseModel, Field


class ConfigModifyRequest(BaseModel):
    """Set one declared setting to a new value."""

    object: str = Field(..., description="Config key to modify")
    value: bool | int | float | str
