"""Dependency injection singletons for SecureVote."""

from securevote.common.config import get_settings
from securevote.common.database import DatabaseManager
from securevote.audit.service import AuditService
from securevote.users.service import UserService
from securevote.elections.service import ElectionService
from securevote.votes.service import VoteService
from securevote.results.service import ResultsService

_db: DatabaseManager | None = None
_audit: AuditService | None = None
_users: UserService | None = None
_elections: ElectionService | None = None
_votes: VoteService | None = None
_results: ResultsService | None = None


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_audit_service() -> AuditService:
    global _audit
    if _audit is None:
        _audit = AuditService()
    return _audit


def get_user_service() -> UserService:
    global _users
    if _users is None:
        _users = UserService(get_settings(), audit_service=get_audit_service())
    return _users


def get_election_service() -> ElectionService:
    global _elections
    if _elections is None:
        _elections = ElectionService(audit_service=get_audit_service())
    return _elections


def get_vote_service() -> VoteService:
    global _votes
    if _votes is None:
        _votes = VoteService(get_settings(), audit_service=get_audit_service())
    return _votes


def get_results_service() -> ResultsService:
    global _results
    if _results is None:
        _results = ResultsService(
            get_election_service(),
            get_vote_service(),
            get_audit_service(),
        )
    return _results


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _audit, _users, _elections, _votes, _results
    _db = None
    _audit = None
    _users = None
    _elections = None
    _votes = None
    _results = None
