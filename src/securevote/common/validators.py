"""Input validation for account data."""

import re

EMAIL_RE = re.compile(
    r"^(([^<>()\[\]\\.,;:\s@\"]+(\.[^<>()\[\]\\.,;:\s@\"]+)*)|(\".+\"))@"
    r"((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$"
)

# At least 8 characters with a letter, a digit and a symbol from @$!%*#?&
PASSWORD_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)(?=.*[@$!%*#?&])[A-Za-z\d@$!%*#?&]{8,}$")

PASSWORD_RULES = "Password must be at least 8 characters with letters, numbers, and symbols"


def validate_email(email: str) -> bool:
    return bool(EMAIL_RE.fullmatch(str(email).lower()))


def validate_password(password: str) -> bool:
    return bool(PASSWORD_RE.fullmatch(password or ""))


def normalize_email(email: str) -> str:
    return email.strip().lower()
