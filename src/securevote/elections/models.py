"""SQLAlchemy models for elections, ballots and ballot options."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from securevote.common.models import Base, TimestampMixin, generate_uuid

ELECTION_STATUSES = ("draft", "active", "completed")


class ElectionModel(Base, TimestampMixin):
    __tablename__ = "elections"
    __table_args__ = (
        Index("idx_elections_dates", "start_date", "end_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="draft", index=True)
    created_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )


class BallotModel(Base, TimestampMixin):
    __tablename__ = "ballots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    election_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("elections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)


class BallotOptionModel(Base):
    __tablename__ = "ballot_options"
    __table_args__ = (
        UniqueConstraint("ballot_id", "option_order", name="uq_ballot_option_order"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    ballot_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ballots.id", ondelete="CASCADE"), nullable=False, index=True
    )
    option_text: Mapped[str] = mapped_column(String(255), nullable=False)
    option_order: Mapped[int] = mapped_column(Integer, nullable=False)
