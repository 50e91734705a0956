"""Shared Pydantic schemas for SecureVote."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from securevote.common.models import ensure_utc

# SQLite hands back naive datetimes; responses always carry UTC.
UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    """Serializes as camelCase; accepts camelCase or snake_case input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class HealthResponse(BaseModel):
    status: str = "healthy"
    database: str = "connected"
    version: str = "0.1.0"
    service: str = "securevote"
    timestamp: datetime


class ErrorResponse(BaseModel):
    error: str
    code: str
    fields: dict[str, Any] = {}
