"""Votes API router: submit a vote, verify a receipt."""

from fastapi import APIRouter, Depends, Request

from securevote.common.security import CurrentUser, get_current_user
from securevote.users.router import client_ip
from securevote.votes.schemas import (
    VerifiedVoteResponse,
    VoteCreate,
    VoteReceiptResponse,
    VoteVerification,
)

router = APIRouter(prefix="/votes")


def _get_service():
    from securevote.deps import get_vote_service
    return get_vote_service()


def _get_db():
    from securevote.deps import get_db
    return get_db()


@router.post("", response_model=VoteReceiptResponse, status_code=201)
async def cast_vote(
    body: VoteCreate,
    request: Request,
    voter: CurrentUser = Depends(get_current_user),
):
    svc = _get_service()
    receipt = await _get_db().run(
        svc.cast_vote,
        voter.user_id,
        body.election_id,
        body.encrypted_choice,
        ip_address=client_ip(request),
    )
    return VoteReceiptResponse(
        vote_id=receipt.vote_id,
        timestamp=receipt.timestamp,
        verification_code=receipt.verification_code,
    )


@router.get("/verify/{code}", response_model=VoteVerification)
async def verify_vote(code: str):
    svc = _get_service()
    vote = await _get_db().run(svc.verify, code)
    return VoteVerification(
        vote=VerifiedVoteResponse(
            vote_id=vote.vote_id,
            timestamp=vote.timestamp,
            election_id=vote.election_id,
            election_title=vote.election_title,
        )
    )
