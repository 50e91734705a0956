"""Tests for AuditService: transactional append and filtered listing."""

import pytest

from securevote.audit.service import AuditService
from securevote.common.config import SecureVoteSettings
from securevote.common.database import DatabaseManager


def make_settings(**overrides) -> SecureVoteSettings:
    defaults = {"jwt_secret": "test-jwt-secret", "db_url": "sqlite+aiosqlite://"}
    defaults.update(overrides)
    return SecureVoteSettings(**defaults)


@pytest.fixture
async def db():
    manager = DatabaseManager(make_settings())
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def audit_svc():
    return AuditService()


class TestRecord:
    async def test_record_fields(self, db, audit_svc):
        async with db.get_session() as session:
            entry = await audit_svc.record(
                session, "ELECTION_CREATED", "election", "e-1",
                user_id="u-1", ip_address="2001:db8::1", details={"title": "Board"},
            )
        assert entry.id
        assert entry.timestamp is not None
        assert entry.details == {"title": "Board"}

    async def test_rolled_back_with_caller_transaction(self, db, audit_svc):
        with pytest.raises(RuntimeError):
            async with db.get_session() as session:
                await audit_svc.record(session, "ELECTION_CREATED", "election", "e-1")
                raise RuntimeError("state change failed")
        async with db.get_session() as session:
            assert await audit_svc.list_logs(session) == []


class TestListLogs:
    async def _seed(self, db, audit_svc):
        async with db.get_session() as session:
            await audit_svc.record(session, "USER_REGISTERED", "user", "u-1")
            await audit_svc.record(session, "ELECTION_CREATED", "election", "e-1")
            await audit_svc.record(session, "VOTE_CAST", "election", "e-1")
            await audit_svc.record(session, "VOTE_CAST", "election", "e-2")

    async def test_filters(self, db, audit_svc):
        await self._seed(db, audit_svc)
        async with db.get_session() as session:
            by_entity = await audit_svc.list_logs(session, entity_type="election", entity_id="e-1")
            by_action = await audit_svc.list_logs(session, action="VOTE_CAST")
            everything = await audit_svc.list_logs(session)
        assert {e.action for e in by_entity} == {"ELECTION_CREATED", "VOTE_CAST"}
        assert len(by_action) == 2
        assert len(everything) == 4

    async def test_pagination(self, db, audit_svc):
        await self._seed(db, audit_svc)
        async with db.get_session() as session:
            first = await audit_svc.list_logs(session, limit=3)
            rest = await audit_svc.list_logs(session, limit=3, offset=3)
        assert len(first) == 3
        assert len(rest) == 1
        assert {e.id for e in first}.isdisjoint({e.id for e in rest})
