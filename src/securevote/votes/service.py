"""Vote service: anonymous submission and receipt verification."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from securevote.audit import service as audit
from securevote.audit.service import AuditService
from securevote.common.config import SecureVoteSettings
from securevote.common.exceptions import (
    DuplicateVoteError,
    ElectionNotActiveError,
    VerificationCodeExhaustedError,
    VoteNotFoundError,
)
from securevote.elections.lifecycle import accepts_votes
from securevote.elections.models import ElectionModel
from securevote.votes.anonymizer import collision_nonce, verification_code, voter_pseudonym
from securevote.votes.models import VoteModel

logger = logging.getLogger(__name__)


@dataclass
class VoteReceipt:
    vote_id: str
    timestamp: datetime
    verification_code: str


@dataclass
class VerifiedVote:
    vote_id: str
    timestamp: datetime
    election_id: str
    election_title: str


class VoteService:
    """Records votes under a per-election pseudonym, never the voter id."""

    def __init__(self, settings: SecureVoteSettings, audit_service: AuditService | None = None):
        self.settings = settings
        self.audit_service = audit_service

    async def find_vote(
        self, session: AsyncSession, election_id: str, pseudonym: str,
    ) -> VoteModel | None:
        result = await session.execute(
            select(VoteModel).where(
                VoteModel.voter_hash == pseudonym,
                VoteModel.election_id == election_id,
            )
        )
        return result.scalar_one_or_none()

    async def _code_exists(self, session: AsyncSession, code: str) -> bool:
        result = await session.execute(
            select(VoteModel.id).where(VoteModel.verification_code == code)
        )
        return result.first() is not None

    async def cast_vote(
        self,
        session: AsyncSession,
        voter_id: str,
        election_id: str,
        encrypted_choice: str,
        ip_address: str | None = None,
        now: datetime | None = None,
    ) -> VoteReceipt:
        """Record a vote for ``voter_id`` in ``election_id``.

        Raises ElectionNotActiveError outside the voting window and
        DuplicateVoteError if the voter already has a vote in the election.
        The unique (voter_hash, election_id) constraint settles concurrent
        submissions: the losing insert is reported as a duplicate.
        """
        now = now or datetime.now(timezone.utc)
        election = await session.get(ElectionModel, election_id)
        if election is None or not accepts_votes(election, now):
            raise ElectionNotActiveError()

        pseudonym = voter_pseudonym(voter_id, election_id)
        if await self.find_vote(session, election_id, pseudonym) is not None:
            raise DuplicateVoteError()

        length = self.settings.verification_code_length
        nonce = None
        for _attempt in range(self.settings.verification_code_attempts):
            code = verification_code(pseudonym, now, nonce=nonce, length=length)
            nonce = collision_nonce()
            if await self._code_exists(session, code):
                continue

            vote = VoteModel(
                election_id=election_id,
                voter_hash=pseudonym,
                encrypted_choice=encrypted_choice,
                timestamp=now,
                verification_code=code,
            )
            session.add(vote)
            try:
                await session.flush()
            except IntegrityError as exc:
                await session.rollback()
                if await self.find_vote(session, election_id, pseudonym) is not None:
                    raise DuplicateVoteError() from exc
                logger.warning("Verification code collision in election %s, regenerating", election_id)
                continue

            if self.audit_service:
                await self.audit_service.record(
                    session, audit.VOTE_CAST, "election", election_id,
                    ip_address=ip_address,
                    details={
                        "timestamp": now.isoformat(),
                        "verificationCode": code,
                    },
                )
            logger.info("Vote recorded in election %s", election_id)
            return VoteReceipt(vote_id=vote.id, timestamp=now, verification_code=code)

        raise VerificationCodeExhaustedError()

    async def verify(self, session: AsyncSession, code: str) -> VerifiedVote:
        """Look up a vote by its verification code, without revealing the choice."""
        result = await session.execute(
            select(VoteModel, ElectionModel.title)
            .join(ElectionModel, VoteModel.election_id == ElectionModel.id)
            .where(VoteModel.verification_code == code.strip().upper())
        )
        row = result.first()
        if row is None:
            raise VoteNotFoundError()
        vote, title = row
        return VerifiedVote(
            vote_id=vote.id,
            timestamp=vote.timestamp,
            election_id=vote.election_id,
            election_title=title,
        )

    async def count_votes(self, session: AsyncSession, election_id: str) -> int:
        result = await session.execute(
            select(func.count()).select_from(VoteModel).where(VoteModel.election_id == election_id)
        )
        return result.scalar_one()

    async def list_votes(self, session: AsyncSession, election_id: str) -> list[VoteModel]:
        result = await session.execute(
            select(VoteModel)
            .where(VoteModel.election_id == election_id)
            .order_by(VoteModel.timestamp)
        )
        return list(result.scalars().all())
