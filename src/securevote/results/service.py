"""Results service: public results after close, full detail for admins."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from securevote.audit.models import AuditLogModel
from securevote.audit.service import AuditService
from securevote.common.exceptions import ResultsNotAvailableError
from securevote.common.models import ensure_utc
from securevote.elections.lifecycle import results_available
from securevote.elections.models import ElectionModel
from securevote.elections.service import BallotWithOptions, ElectionService
from securevote.votes.models import VoteModel
from securevote.votes.service import VoteService


@dataclass
class PublicResults:
    election: ElectionModel
    vote_count: int
    ballots: list[BallotWithOptions]


@dataclass
class AdminResults:
    election: ElectionModel
    votes: list[VoteModel]
    audit_logs: list[AuditLogModel]


class ResultsService:
    # Encrypted choices are opaque to the store, so public results report the
    # turnout and the ballot structure, not a tally.

    def __init__(
        self,
        election_service: ElectionService,
        vote_service: VoteService,
        audit_service: AuditService,
    ):
        self.election_service = election_service
        self.vote_service = vote_service
        self.audit_service = audit_service

    async def public_results(
        self, session: AsyncSession, election_id: str, now: datetime | None = None,
    ) -> PublicResults:
        election = await self.election_service.get_election(session, election_id)
        if not results_available(election, now):
            raise ResultsNotAvailableError(ensure_utc(election.end_date))
        return PublicResults(
            election=election,
            vote_count=await self.vote_service.count_votes(session, election_id),
            ballots=await self.election_service.get_ballots(session, election_id),
        )

    async def admin_results(
        self, session: AsyncSession, election_id: str, audit_limit: int = 200,
    ) -> AdminResults:
        election = await self.election_service.get_election(session, election_id)
        return AdminResults(
            election=election,
            votes=await self.vote_service.list_votes(session, election_id),
            audit_logs=await self.audit_service.list_logs(
                session, entity_type="election", entity_id=election_id, limit=audit_limit,
            ),
        )
