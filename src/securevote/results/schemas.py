"""Pydantic schemas for election results."""

from typing import Optional

from securevote.audit.schemas import AuditLogResponse
from securevote.common.schemas import CamelModel, UTCDateTime
from securevote.elections.schemas import BallotResponse, ElectionResponse


class ResultsElection(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    start_date: UTCDateTime
    end_date: UTCDateTime


class PublicResultsResponse(CamelModel):
    election: ResultsElection
    vote_count: int
    ballots: list[BallotResponse] = []


class VoteRecordResponse(CamelModel):
    vote_id: str
    encrypted_choice: str
    timestamp: UTCDateTime
    verification_code: str


class AdminResultsResponse(CamelModel):
    election: ElectionResponse
    votes: list[VoteRecordResponse] = []
    audit_logs: list[AuditLogResponse] = []
