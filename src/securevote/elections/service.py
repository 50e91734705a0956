"""Election service: elections, ballots and their options."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from securevote.audit import service as audit
from securevote.audit.service import AuditService
from securevote.common.exceptions import ElectionNotFoundError, InvalidInputError
from securevote.common.models import ensure_utc
from securevote.elections.lifecycle import STATUS_ACTIVE, STATUS_DRAFT, validate_window
from securevote.elections.models import (
    ELECTION_STATUSES,
    BallotModel,
    BallotOptionModel,
    ElectionModel,
)
from securevote.users.models import UserModel
from securevote.votes.models import VoteModel

logger = logging.getLogger(__name__)


@dataclass
class BallotWithOptions:
    ballot: BallotModel
    options: list[BallotOptionModel] = field(default_factory=list)


@dataclass
class ElectionDetails:
    election: ElectionModel
    creator: UserModel | None
    ballots: list[BallotWithOptions]


class ElectionService:
    """Election CRUD and ballot management."""

    def __init__(self, audit_service: AuditService | None = None):
        self.audit_service = audit_service

    # ── Read ──

    async def list_elections(
        self,
        session: AsyncSession,
        active: bool = False,
        status: str | None = None,
        now: datetime | None = None,
    ) -> list[ElectionModel]:
        """List elections, newest start first.

        ``active`` restricts to elections currently accepting votes and takes
        precedence over ``status``.
        """
        query = select(ElectionModel)
        if active:
            now = ensure_utc(now) if now else datetime.now(timezone.utc)
            query = query.where(
                ElectionModel.status == STATUS_ACTIVE,
                ElectionModel.start_date <= now,
                ElectionModel.end_date > now,
            )
        elif status:
            query = query.where(ElectionModel.status == status)
        query = query.order_by(ElectionModel.start_date.desc())
        result = await session.execute(query)
        return list(result.scalars().all())

    async def get_election(self, session: AsyncSession, election_id: str) -> ElectionModel:
        election = await session.get(ElectionModel, election_id)
        if election is None:
            raise ElectionNotFoundError()
        return election

    async def get_ballots(
        self, session: AsyncSession, election_id: str,
    ) -> list[BallotWithOptions]:
        """Ballots of an election with their options in display order."""
        result = await session.execute(
            select(BallotModel)
            .where(BallotModel.election_id == election_id)
            .order_by(BallotModel.created_at)
        )
        ballots = list(result.scalars().all())
        if not ballots:
            return []

        result = await session.execute(
            select(BallotOptionModel)
            .where(BallotOptionModel.ballot_id.in_([b.id for b in ballots]))
            .order_by(BallotOptionModel.option_order)
        )
        by_ballot: dict[str, list[BallotOptionModel]] = {b.id: [] for b in ballots}
        for option in result.scalars().all():
            by_ballot[option.ballot_id].append(option)
        return [BallotWithOptions(b, by_ballot[b.id]) for b in ballots]

    async def get_election_details(
        self, session: AsyncSession, election_id: str,
    ) -> ElectionDetails:
        election = await self.get_election(session, election_id)
        creator = None
        if election.created_by:
            creator = await session.get(UserModel, election.created_by)
        ballots = await self.get_ballots(session, election_id)
        return ElectionDetails(election, creator, ballots)

    # ── Write ──

    async def create_election(
        self,
        session: AsyncSession,
        title: str,
        start_date: datetime,
        end_date: datetime,
        description: str | None = None,
        status: str = STATUS_DRAFT,
        created_by: str | None = None,
        ip_address: str | None = None,
    ) -> ElectionModel:
        if not validate_window(start_date, end_date):
            raise InvalidInputError("end_date must be after start_date")
        if status not in ELECTION_STATUSES:
            raise InvalidInputError(f"status must be one of {', '.join(ELECTION_STATUSES)}")

        election = ElectionModel(
            title=title,
            description=description,
            start_date=ensure_utc(start_date),
            end_date=ensure_utc(end_date),
            status=status,
            created_by=created_by,
        )
        session.add(election)
        await session.flush()

        if self.audit_service:
            await self.audit_service.record(
                session, audit.ELECTION_CREATED, "election", election.id,
                user_id=created_by, ip_address=ip_address,
                details={"title": title, "status": status},
            )
        logger.info("Created election %s (%s)", election.id, status)
        return election

    async def update_election(
        self,
        session: AsyncSession,
        election_id: str,
        actor_id: str | None = None,
        ip_address: str | None = None,
        **updates: Any,
    ) -> ElectionModel:
        """Apply a partial update; ``None`` values leave fields unchanged."""
        election = await self.get_election(session, election_id)
        changes = {
            k: v for k, v in updates.items()
            if k in ("title", "description", "start_date", "end_date", "status")
            and v is not None
        }
        for key in ("start_date", "end_date"):
            if key in changes:
                changes[key] = ensure_utc(changes[key])

        start = changes.get("start_date", election.start_date)
        end = changes.get("end_date", election.end_date)
        if not validate_window(start, end):
            raise InvalidInputError("end_date must be after start_date")
        if changes.get("status", election.status) not in ELECTION_STATUSES:
            raise InvalidInputError(f"status must be one of {', '.join(ELECTION_STATUSES)}")

        for key, value in changes.items():
            setattr(election, key, value)
        await session.flush()

        if self.audit_service and changes:
            await self.audit_service.record(
                session, audit.ELECTION_UPDATED, "election", election.id,
                user_id=actor_id, ip_address=ip_address,
                details={"fields": sorted(changes)},
            )
        return election

    async def delete_election(
        self,
        session: AsyncSession,
        election_id: str,
        actor_id: str | None = None,
        ip_address: str | None = None,
    ) -> None:
        """Delete an election with its ballots, options and votes."""
        election = await self.get_election(session, election_id)
        title = election.title
        ballot_ids = select(BallotModel.id).where(BallotModel.election_id == election_id)
        for stmt in (
            delete(BallotOptionModel).where(BallotOptionModel.ballot_id.in_(ballot_ids)),
            delete(BallotModel).where(BallotModel.election_id == election_id),
            delete(VoteModel).where(VoteModel.election_id == election_id),
        ):
            await session.execute(stmt.execution_options(synchronize_session=False))
        await session.delete(election)
        await session.flush()

        if self.audit_service:
            await self.audit_service.record(
                session, audit.ELECTION_DELETED, "election", election_id,
                user_id=actor_id, ip_address=ip_address,
                details={"title": title},
            )
        logger.info("Deleted election %s", election_id)

    async def add_ballot(
        self,
        session: AsyncSession,
        election_id: str,
        title: str,
        options: list[str],
        instructions: str | None = None,
        actor_id: str | None = None,
        ip_address: str | None = None,
    ) -> BallotWithOptions:
        """Create a ballot and its options, numbered from 1 in the given order.

        All rows belong to the caller's transaction: if any insert fails,
        nothing is committed.
        """
        if not options:
            raise InvalidInputError("A ballot needs at least one option")
        await self.get_election(session, election_id)

        ballot = BallotModel(election_id=election_id, title=title, instructions=instructions)
        session.add(ballot)
        await session.flush()

        created = []
        for order, text in enumerate(options, start=1):
            option = BallotOptionModel(ballot_id=ballot.id, option_text=text, option_order=order)
            session.add(option)
            created.append(option)
        await session.flush()

        if self.audit_service:
            await self.audit_service.record(
                session, audit.BALLOT_CREATED, "election", election_id,
                user_id=actor_id, ip_address=ip_address,
                details={"ballot_id": ballot.id, "options": len(created)},
            )
        return BallotWithOptions(ballot, created)
