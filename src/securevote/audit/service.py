"""Audit service: append and query the audit log."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from securevote.audit.models import AuditLogModel

logger = logging.getLogger(__name__)

# Actions
USER_REGISTERED = "USER_REGISTERED"
USER_LOGIN = "USER_LOGIN"
ELECTION_CREATED = "ELECTION_CREATED"
ELECTION_UPDATED = "ELECTION_UPDATED"
ELECTION_DELETED = "ELECTION_DELETED"
BALLOT_CREATED = "BALLOT_CREATED"
VOTE_CAST = "VOTE_CAST"


class AuditService:
    """Append-only audit log.

    Entries are added to the caller's session, so they commit or roll back
    together with the state change they describe.
    """

    async def record(
        self,
        session: AsyncSession,
        action: str,
        entity_type: str,
        entity_id: str | None = None,
        user_id: str | None = None,
        ip_address: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditLogModel:
        entry = AuditLogModel(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            ip_address=ip_address,
            details=details or {},
        )
        session.add(entry)
        await session.flush()
        logger.debug("Audit %s %s/%s", action, entity_type, entity_id)
        return entry

    async def list_logs(
        self,
        session: AsyncSession,
        entity_type: str | None = None,
        entity_id: str | None = None,
        action: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AuditLogModel]:
        """Paginated audit entries, newest first."""
        query = select(AuditLogModel)
        if entity_type:
            query = query.where(AuditLogModel.entity_type == entity_type)
        if entity_id:
            query = query.where(AuditLogModel.entity_id == entity_id)
        if action:
            query = query.where(AuditLogModel.action == action)
        query = (
            query.order_by(AuditLogModel.timestamp.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(query)
        return list(result.scalars().all())
