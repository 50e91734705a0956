"""
Voter pseudonyms and vote verification codes.

A pseudonym binds a voter to one election without storing the voter's
identity next to the ballot:

    pseudonym = SHA-256("{voter_id}-{election_id}")   (64 hex chars)

The same (voter, election) pair always maps to the same pseudonym, which is
what lets the store reject a second vote. Pseudonyms of one voter in two
elections share nothing an observer can link without the voter id.

A verification code is a short public receipt for a recorded vote:

    code = upper(SHA-256("{pseudonym}-{epoch_millis}[-{nonce}]")[:length])

The nonce is only added when a previous candidate collided with an existing
code.
"""

import hashlib
import secrets
from datetime import datetime

DEFAULT_CODE_LENGTH = 10
MAX_CODE_LENGTH = 64


def _sha256_hex(message: str) -> str:
    return hashlib.sha256(message.encode("utf-8")).hexdigest()


def voter_pseudonym(voter_id: str, election_id: str) -> str:
    """Deterministic one-way pseudonym for a voter within one election."""
    return _sha256_hex(f"{voter_id}-{election_id}")


def verification_code(
    pseudonym: str,
    submitted_at: datetime,
    nonce: str | None = None,
    length: int = DEFAULT_CODE_LENGTH,
) -> str:
    """
    Derive a vote's verification code.

    Args:
        pseudonym: the voter's pseudonym for the election
        submitted_at: submission time (timezone-aware)
        nonce: extra entropy, used when regenerating after a collision
        length: number of hex characters to keep (1-64)

    Returns:
        Uppercase hex token of ``length`` characters
    """
    if not 1 <= length <= MAX_CODE_LENGTH:
        raise ValueError(f"length must be between 1 and {MAX_CODE_LENGTH}, got {length}")
    epoch_millis = int(submitted_at.timestamp() * 1000)
    message = f"{pseudonym}-{epoch_millis}"
    if nonce:
        message = f"{message}-{nonce}"
    return _sha256_hex(message)[:length].upper()


def collision_nonce() -> str:
    """Random nonce for regenerating a colliding verification code."""
    return secrets.token_hex(8)
