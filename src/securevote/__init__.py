"""SecureVote: anonymous, verifiable election voting API."""

from securevote.client import ClientSession, VoteClient
from securevote.votes.anonymizer import verification_code, voter_pseudonym

__all__ = [
    "ClientSession",
    "VoteClient",
    "verification_code",
    "voter_pseudonym",
]
__version__ = "0.1.0"
