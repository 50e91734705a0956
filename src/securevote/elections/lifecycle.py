"""Election lifecycle rules.

An election moves draft -> active -> completed. Apart from the stored status
the phase is implied by its dates:

- votes are accepted while status is "active" and start <= now < end
- results are public once now >= end
"""

from datetime import datetime, timezone

from securevote.common.models import ensure_utc
from securevote.elections.models import ElectionModel

STATUS_DRAFT = "draft"
STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"


def _now(now: datetime | None) -> datetime:
    return ensure_utc(now) if now is not None else datetime.now(timezone.utc)


def accepts_votes(election: ElectionModel, now: datetime | None = None) -> bool:
    now = _now(now)
    return (
        election.status == STATUS_ACTIVE
        and ensure_utc(election.start_date) <= now < ensure_utc(election.end_date)
    )


def results_available(election: ElectionModel, now: datetime | None = None) -> bool:
    return _now(now) >= ensure_utc(election.end_date)


def validate_window(start_date: datetime, end_date: datetime) -> bool:
    return ensure_utc(end_date) > ensure_utc(start_date)
