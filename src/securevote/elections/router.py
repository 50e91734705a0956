"""Elections API router: public reads, admin writes."""

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from securevote.common.security import CurrentUser, require_admin
from securevote.elections.schemas import (
    BallotCreate,
    BallotResponse,
    ElectionCreate,
    ElectionDetail,
    ElectionStatus,
    ElectionResponse,
    ElectionUpdate,
    ballot_response,
)
from securevote.users.router import client_ip

router = APIRouter(prefix="/elections")


def _get_service():
    from securevote.deps import get_election_service
    return get_election_service()


def _get_db():
    from securevote.deps import get_db
    return get_db()


@router.get("", response_model=list[ElectionResponse])
async def list_elections(
    active: bool = Query(False),
    status: ElectionStatus | None = Query(None),
):
    svc = _get_service()

    async def _list(session: AsyncSession):
        elections = await svc.list_elections(session, active=active, status=status)
        return [ElectionResponse.model_validate(e) for e in elections]

    return await _get_db().run(_list)


@router.get("/{election_id}", response_model=ElectionDetail)
async def get_election(election_id: str):
    svc = _get_service()
    details = await _get_db().run(svc.get_election_details, election_id)
    e = details.election
    return ElectionDetail(
        id=e.id,
        title=e.title,
        description=e.description,
        start_date=e.start_date,
        end_date=e.end_date,
        status=e.status,
        created_by=e.created_by,
        created_at=e.created_at,
        creator_email=details.creator.email if details.creator else None,
        creator_name=details.creator.full_name if details.creator else None,
        ballots=[ballot_response(b.ballot, b.options) for b in details.ballots],
    )


@router.post("", response_model=ElectionResponse, status_code=201)
async def create_election(
    body: ElectionCreate,
    request: Request,
    admin: CurrentUser = Depends(require_admin),
):
    svc = _get_service()
    election = await _get_db().run(
        svc.create_election,
        body.title,
        body.start_date,
        body.end_date,
        description=body.description,
        status=body.status,
        created_by=admin.user_id,
        ip_address=client_ip(request),
    )
    return ElectionResponse.model_validate(election)


@router.put("/{election_id}", response_model=ElectionResponse)
async def update_election(
    election_id: str,
    body: ElectionUpdate,
    request: Request,
    admin: CurrentUser = Depends(require_admin),
):
    svc = _get_service()
    election = await _get_db().run(
        svc.update_election,
        election_id,
        actor_id=admin.user_id,
        ip_address=client_ip(request),
        **body.model_dump(exclude_none=True),
    )
    return ElectionResponse.model_validate(election)


@router.delete("/{election_id}", status_code=204)
async def delete_election(
    election_id: str,
    request: Request,
    admin: CurrentUser = Depends(require_admin),
):
    svc = _get_service()
    await _get_db().run(
        svc.delete_election, election_id,
        actor_id=admin.user_id, ip_address=client_ip(request),
    )
    return Response(status_code=204)


@router.post("/{election_id}/ballots", response_model=BallotResponse, status_code=201)
async def add_ballot(
    election_id: str,
    body: BallotCreate,
    request: Request,
    admin: CurrentUser = Depends(require_admin),
):
    svc = _get_service()
    created = await _get_db().run(
        svc.add_ballot,
        election_id,
        body.title,
        [o.text for o in body.options],
        instructions=body.instructions,
        actor_id=admin.user_id,
        ip_address=client_ip(request),
    )
    return ballot_response(created.ballot, created.options)
