"""Pydantic schemas for election and ballot endpoints."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from securevote.common.schemas import CamelModel, UTCDateTime

ElectionStatus = Literal["draft", "active", "completed"]


class ElectionCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    status: ElectionStatus = "draft"


class ElectionUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[ElectionStatus] = None


class BallotOptionCreate(CamelModel):
    text: str = Field(..., min_length=1, max_length=255)


class BallotCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    instructions: Optional[str] = None
    options: list[BallotOptionCreate] = Field(..., min_length=1)


class BallotOptionResponse(CamelModel):
    option_id: str
    option_text: str
    option_order: int


class BallotResponse(CamelModel):
    ballot_id: str
    election_id: str
    title: str
    instructions: Optional[str] = None
    created_at: UTCDateTime
    options: list[BallotOptionResponse] = []


class ElectionResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    start_date: UTCDateTime
    end_date: UTCDateTime
    status: str
    created_by: Optional[str] = None
    created_at: UTCDateTime


class ElectionDetail(ElectionResponse):
    creator_email: Optional[str] = None
    creator_name: Optional[str] = None
    ballots: list[BallotResponse] = []


def ballot_response(ballot, options) -> BallotResponse:
    return BallotResponse(
        ballot_id=ballot.id,
        election_id=ballot.election_id,
        title=ballot.title,
        instructions=ballot.instructions,
        created_at=ballot.created_at,
        options=[
            BallotOptionResponse(
                option_id=o.id, option_text=o.option_text, option_order=o.option_order,
            )
            for o in options
        ],
    )
