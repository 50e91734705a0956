"""Tests for VoteService: anonymity, one vote per voter, receipts."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from securevote.audit import service as audit
from securevote.audit.service import AuditService
from securevote.common.config import SecureVoteSettings
from securevote.common.database import DatabaseManager
from securevote.common.exceptions import (
    DuplicateVoteError,
    ElectionNotActiveError,
    VerificationCodeExhaustedError,
    VoteNotFoundError,
)
from securevote.elections.service import ElectionService
from securevote.votes import service as vote_service_module
from securevote.votes.anonymizer import voter_pseudonym
from securevote.votes.models import VoteModel
from securevote.votes.service import VoteReceipt, VoteService


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


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


@pytest.fixture
def svc(audit_svc):
    return VoteService(make_settings(), audit_service=audit_svc)


async def _election(db, status="active", start=NOW - timedelta(hours=1), end=NOW + timedelta(hours=1)):
    async with db.get_session() as session:
        return await ElectionService().create_election(
            session, "Board", start, end, status=status,
        )


async def _votes(db) -> list[VoteModel]:
    async with db.get_session() as session:
        result = await session.execute(select(VoteModel))
        return list(result.scalars().all())


class TestCastVote:
    async def test_receipt(self, db, svc):
        election = await _election(db)
        async with db.get_session() as session:
            receipt = await svc.cast_vote(session, "voter-1", election.id, "enc-A", now=NOW)
        assert receipt.timestamp == NOW
        assert len(receipt.verification_code) == 10
        assert receipt.verification_code == receipt.verification_code.upper()

    async def test_stored_under_pseudonym(self, db, svc):
        election = await _election(db)
        async with db.get_session() as session:
            await svc.cast_vote(session, "voter-1", election.id, "enc-A", now=NOW)
        (vote,) = await _votes(db)
        assert vote.voter_hash == voter_pseudonym("voter-1", election.id)
        assert "voter-1" not in vote.voter_hash
        assert vote.encrypted_choice == "enc-A"

    async def test_duplicate_rejected(self, db, svc):
        election = await _election(db)
        async with db.get_session() as session:
            await svc.cast_vote(session, "voter-1", election.id, "enc-A", now=NOW)
        with pytest.raises(DuplicateVoteError):
            async with db.get_session() as session:
                await svc.cast_vote(
                    session, "voter-1", election.id, "enc-B", now=NOW + timedelta(seconds=5),
                )
        assert len(await _votes(db)) == 1

    async def test_same_voter_other_election(self, db, svc):
        first = await _election(db)
        second = await _election(db)
        async with db.get_session() as session:
            await svc.cast_vote(session, "voter-1", first.id, "enc", now=NOW)
            await svc.cast_vote(session, "voter-1", second.id, "enc", now=NOW)
        hashes = {v.voter_hash for v in await _votes(db)}
        assert len(hashes) == 2

    @pytest.mark.parametrize("when", [
        NOW - timedelta(hours=2),   # before start
        NOW + timedelta(hours=1),   # exactly at end
        NOW + timedelta(hours=2),   # after end
    ])
    async def test_outside_window(self, db, svc, when):
        election = await _election(db)
        with pytest.raises(ElectionNotActiveError):
            async with db.get_session() as session:
                await svc.cast_vote(session, "voter-1", election.id, "enc", now=when)

    async def test_draft_election(self, db, svc):
        election = await _election(db, status="draft")
        with pytest.raises(ElectionNotActiveError):
            async with db.get_session() as session:
                await svc.cast_vote(session, "voter-1", election.id, "enc", now=NOW)

    async def test_unknown_election(self, db, svc):
        with pytest.raises(ElectionNotActiveError):
            async with db.get_session() as session:
                await svc.cast_vote(session, "voter-1", "missing", "enc", now=NOW)

    async def test_audit_entry_has_no_voter(self, db, svc, audit_svc):
        election = await _election(db)
        async with db.get_session() as session:
            receipt = await svc.cast_vote(
                session, "voter-1", election.id, "enc", ip_address="10.0.0.9", now=NOW,
            )
        async with db.get_session() as session:
            (entry,) = await audit_svc.list_logs(session, action=audit.VOTE_CAST)
        assert entry.entity_id == election.id
        assert entry.user_id is None
        assert entry.details["verificationCode"] == receipt.verification_code
        assert "voter-1" not in str(entry.details)


class TestVerificationCodeCollisions:
    async def test_existing_code_regenerated_with_nonce(self, db, svc, monkeypatch):
        election = await _election(db)
        async with db.get_session() as session:
            taken = await svc.cast_vote(session, "voter-1", election.id, "enc", now=NOW)

        real = vote_service_module.verification_code

        def colliding(pseudonym, submitted_at, nonce=None, length=10):
            if nonce is None:
                return taken.verification_code
            return real(pseudonym, submitted_at, nonce=nonce, length=length)

        monkeypatch.setattr(vote_service_module, "verification_code", colliding)
        async with db.get_session() as session:
            receipt = await svc.cast_vote(session, "voter-2", election.id, "enc", now=NOW)
        assert receipt.verification_code != taken.verification_code
        assert len(await _votes(db)) == 2

    async def test_collision_detected_by_unique_constraint(self, db, svc, monkeypatch):
        election = await _election(db)
        async with db.get_session() as session:
            taken = await svc.cast_vote(session, "voter-1", election.id, "enc", now=NOW)

        real = vote_service_module.verification_code

        def colliding(pseudonym, submitted_at, nonce=None, length=10):
            if nonce is None:
                return taken.verification_code
            return real(pseudonym, submitted_at, nonce=nonce, length=length)

        async def never_exists(session, code):
            return False

        monkeypatch.setattr(vote_service_module, "verification_code", colliding)
        monkeypatch.setattr(svc, "_code_exists", never_exists)
        async with db.get_session() as session:
            receipt = await svc.cast_vote(session, "voter-2", election.id, "enc", now=NOW)
        assert receipt.verification_code != taken.verification_code
        assert len(await _votes(db)) == 2

    async def test_exhaustion(self, db, monkeypatch):
        svc = VoteService(make_settings(verification_code_attempts=3))
        election = await _election(db)
        async with db.get_session() as session:
            taken = await svc.cast_vote(session, "voter-1", election.id, "enc", now=NOW)

        monkeypatch.setattr(
            vote_service_module, "verification_code",
            lambda *args, **kwargs: taken.verification_code,
        )
        with pytest.raises(VerificationCodeExhaustedError):
            async with db.get_session() as session:
                await svc.cast_vote(session, "voter-2", election.id, "enc", now=NOW)
        assert len(await _votes(db)) == 1


class TestConcurrentVotes:
    async def test_one_of_two_concurrent_submissions_wins(self, tmp_path):
        manager = DatabaseManager(make_settings(db_url=f"sqlite+aiosqlite:///{tmp_path / 'votes.db'}"))
        await manager.init()
        await manager.create_all()
        try:
            svc = VoteService(make_settings())
            election = await _election(manager)
            outcomes = await asyncio.gather(
                manager.run(svc.cast_vote, "voter-1", election.id, "enc-A", now=NOW),
                manager.run(svc.cast_vote, "voter-1", election.id, "enc-B", now=NOW),
                return_exceptions=True,
            )
            receipts = [o for o in outcomes if isinstance(o, VoteReceipt)]
            duplicates = [o for o in outcomes if isinstance(o, DuplicateVoteError)]
            assert len(receipts) == 1
            assert len(duplicates) == 1
            async with manager.get_session() as session:
                count = await session.execute(select(func.count()).select_from(VoteModel))
            assert count.scalar_one() == 1
        finally:
            await manager.close()


class TestVerify:
    async def test_verify_by_code(self, db, svc):
        election = await _election(db)
        async with db.get_session() as session:
            receipt = await svc.cast_vote(session, "voter-1", election.id, "enc", now=NOW)
        async with db.get_session() as session:
            verified = await svc.verify(session, receipt.verification_code.lower())
        assert verified.vote_id == receipt.vote_id
        assert verified.election_id == election.id
        assert verified.election_title == "Board"

    async def test_unknown_code(self, db, svc):
        with pytest.raises(VoteNotFoundError):
            async with db.get_session() as session:
                await svc.verify(session, "NOPE000000")


class TestCounts:
    async def test_count_and_list(self, db, svc):
        election = await _election(db)
        async with db.get_session() as session:
            for i in range(3):
                await svc.cast_vote(session, f"voter-{i}", election.id, f"enc-{i}", now=NOW)
        async with db.get_session() as session:
            assert await svc.count_votes(session, election.id) == 3
            votes = await svc.list_votes(session, election.id)
        assert sorted(v.encrypted_choice for v in votes) == ["enc-0", "enc-1", "enc-2"]
