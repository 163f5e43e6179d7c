"""Shared schema bases and response schemas."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for response bodies, which use camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """JSON body returned for every error."""

    code: int = Field(..., ge=100, le=599, description="HTTP status code")
    message: str = Field(..., description="Error details")
