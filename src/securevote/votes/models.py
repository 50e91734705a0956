"""SQLAlchemy model for anonymized votes."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from securevote.common.models import Base, generate_uuid, utcnow


class VoteModel(Base):
    __tablename__ = "votes"
    __table_args__ = (
        # One vote per pseudonym per election; the insert is the arbiter.
        UniqueConstraint("voter_hash", "election_id", name="uq_vote_voter_election"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    election_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("elections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    voter_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    encrypted_choice: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    verification_code: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, index=True
    )
