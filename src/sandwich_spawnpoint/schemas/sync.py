"""Schemas for the shape sync proxy."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ShapeQuery(BaseModel):
    """Query parameters accepted by the ElectricSQL ``/v1/shape`` endpoint."""

    model_config = ConfigDict(extra="ignore")

    table: str = Field(..., description="Quoted table identifier, e.g. '\"Order\"'")
    offset: str = Field(..., description="Shape log offset, -1 for a fresh shape")
    live: Literal["true", "false"] | None = None
    cursor: str | None = None
    handle: str | None = None
    where: str | None = Field(None, description="SQL row filter")
    columns: list[str] | None = Field(None, description="Columns to sync; repeat or comma separate")
    replica: str | None = None

    def to_params(self) -> dict[str, str]:
        """Return the non-empty parameters in upstream form, lists comma joined."""
        return {
            name: ",".join(value) if isinstance(value, list) else value
            for name, value in self.model_dump(exclude_none=True).items()
        }
