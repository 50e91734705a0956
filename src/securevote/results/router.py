"""Results API router."""

from fastapi import APIRouter, Depends

from securevote.audit.schemas import AuditLogResponse
from securevote.common.security import require_admin
from securevote.elections.schemas import ElectionResponse, ballot_response
from securevote.results.schemas import (
    AdminResultsResponse,
    PublicResultsResponse,
    ResultsElection,
    VoteRecordResponse,
)

router = APIRouter(prefix="/results")


def _get_service():
    from securevote.deps import get_results_service
    return get_results_service()


def _get_db():
    from securevote.deps import get_db
    return get_db()


@router.get("/{election_id}", response_model=PublicResultsResponse)
async def get_results(election_id: str):
    svc = _get_service()
    results = await _get_db().run(svc.public_results, election_id)
    return PublicResultsResponse(
        election=ResultsElection.model_validate(results.election),
        vote_count=results.vote_count,
        ballots=[ballot_response(b.ballot, b.options) for b in results.ballots],
    )


@router.get("/{election_id}/admin", response_model=AdminResultsResponse)
async def get_admin_results(election_id: str, _=Depends(require_admin)):
    svc = _get_service()
    results = await _get_db().run(svc.admin_results, election_id)
    return AdminResultsResponse(
        election=ElectionResponse.model_validate(results.election),
        votes=[
            VoteRecordResponse(
                vote_id=v.id,
                encrypted_choice=v.encrypted_choice,
                timestamp=v.timestamp,
                verification_code=v.verification_code,
            )
            for v in results.votes
        ],
        audit_logs=[AuditLogResponse.model_validate(a) for a in results.audit_logs],
    )
