"""Pydantic schemas for audit log API responses."""

from typing import Any, Optional

from securevote.common.schemas import CamelModel, UTCDateTime


class AuditLogResponse(CamelModel):
    id: str
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    timestamp: UTCDateTime
    details: dict[str, Any] = {}
