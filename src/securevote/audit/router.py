"""Audit log API router (admin only)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from securevote.audit.schemas import AuditLogResponse
from securevote.common.security import require_admin

router = APIRouter()


def _get_service():
    from securevote.deps import get_audit_service
    return get_audit_service()


def _get_db():
    from securevote.deps import get_db
    return get_db()


@router.get("/audit", response_model=list[AuditLogResponse])
async def list_audit_logs(
    entity_type: str | None = Query(None, alias="entityType"),
    entity_id: str | None = Query(None, alias="entityId"),
    action: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _=Depends(require_admin),
):
    svc = _get_service()

    async def _query(session: AsyncSession):
        logs = await svc.list_logs(
            session, entity_type=entity_type, entity_id=entity_id,
            action=action, limit=limit, offset=offset,
        )
        return [AuditLogResponse.model_validate(entry) for entry in logs]

    return await _get_db().run(_query)
