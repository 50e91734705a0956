"""Pydantic schemas for vote submission and verification."""

from pydantic import Field

from securevote.common.schemas import CamelModel, UTCDateTime


class VoteCreate(CamelModel):
    election_id: str = Field(..., min_length=1)
    encrypted_choice: str = Field(..., min_length=1)


class VoteReceiptResponse(CamelModel):
    message: str = "Vote recorded successfully"
    vote_id: str
    timestamp: UTCDateTime
    verification_code: str


class VerifiedVoteResponse(CamelModel):
    vote_id: str
    timestamp: UTCDateTime
    election_id: str
    election_title: str


class VoteVerification(CamelModel):
    verified: bool = True
    vote: VerifiedVoteResponse
