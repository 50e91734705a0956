"""SecureVote exception hierarchy.

Each error carries the HTTP status the API maps it to; the app's exception
handlers render ``{"error": message, "code": code, **extra}``.
"""

from datetime import datetime
from typing import Any


class SecureVoteError(Exception):
    """Base exception for all SecureVote errors."""

    status_code: int = 500

    def __init__(self, message: str = "", code: str = "SECUREVOTE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    @property
    def extra(self) -> dict[str, Any]:
        return {}


class InvalidInputError(SecureVoteError):
    """Raised when request data fails validation (bad email, weak password, ...)."""

    status_code = 400

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, code="INVALID_INPUT")


class ElectionNotActiveError(SecureVoteError):
    """Raised when a vote is submitted outside an election's voting window."""

    status_code = 400

    def __init__(self, message: str = "Election is not active or does not exist"):
        super().__init__(message, code="ELECTION_NOT_ACTIVE")


class AuthenticationError(SecureVoteError):
    """Raised for invalid credentials or an unusable token."""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="UNAUTHORIZED")


class PermissionDeniedError(SecureVoteError):
    status_code = 403

    def __init__(self, message: str = "Requires admin privileges"):
        super().__init__(message, code="FORBIDDEN")


class ResultsNotAvailableError(SecureVoteError):
    """Raised when results are requested before the election has ended."""

    status_code = 403

    def __init__(
        self,
        end_date: datetime,
        message: str = "Election results are not available until the election has ended",
    ):
        self.end_date = end_date
        super().__init__(message, code="RESULTS_NOT_AVAILABLE")

    @property
    def extra(self) -> dict[str, Any]:
        return {"endDate": self.end_date.isoformat()}


class NotFoundError(SecureVoteError):
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class ElectionNotFoundError(NotFoundError):
    def __init__(self, message: str = "Election not found"):
        super().__init__(message)


class VoteNotFoundError(NotFoundError):
    def __init__(self, message: str = "Vote not found"):
        super().__init__(message)


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class ConflictError(SecureVoteError):
    status_code = 409

    def __init__(self, message: str = "Conflict", code: str = "CONFLICT"):
        super().__init__(message, code=code)


class DuplicateEmailError(ConflictError):
    """Raised when registering an email that already has an account."""

    def __init__(self, message: str = "User already exists"):
        super().__init__(message, code="DUPLICATE_EMAIL")


class DuplicateVoteError(ConflictError):
    """Raised when a voter already has a vote recorded for the election."""

    def __init__(self, message: str = "You have already voted in this election"):
        super().__init__(message, code="DUPLICATE_VOTE")


class VerificationCodeExhaustedError(SecureVoteError):
    """Raised when no unique verification code could be generated."""

    status_code = 500

    def __init__(self, message: str = "Could not allocate a unique verification code"):
        super().__init__(message, code="VERIFICATION_CODE_EXHAUSTED")
