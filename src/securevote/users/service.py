"""User accounts: registration, authentication, admin bootstrap."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from securevote.audit import service as audit
from securevote.audit.service import AuditService
from securevote.common.config import SecureVoteSettings
from securevote.common.exceptions import (
    AuthenticationError,
    DuplicateEmailError,
    InvalidInputError,
    UserNotFoundError,
)
from securevote.common.security import (
    ROLE_ADMIN,
    ROLE_VOTER,
    create_access_token,
    hash_password,
    password_needs_rehash,
    verify_password,
)
from securevote.common.validators import (
    PASSWORD_RULES,
    normalize_email,
    validate_email,
    validate_password,
)
from securevote.users.models import UserModel

logger = logging.getLogger(__name__)


class UserService:
    """Account operations."""

    def __init__(self, settings: SecureVoteSettings, audit_service: AuditService | None = None):
        self.settings = settings
        self.audit_service = audit_service

    # ── Lookup ──

    async def get_by_id(self, session: AsyncSession, user_id: str) -> UserModel | None:
        return await session.get(UserModel, user_id)

    async def get_by_email(self, session: AsyncSession, email: str) -> UserModel | None:
        result = await session.execute(
            select(UserModel).where(UserModel.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def get_profile(self, session: AsyncSession, user_id: str) -> UserModel:
        user = await self.get_by_id(session, user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    # ── Registration ──

    async def create_user(
        self,
        session: AsyncSession,
        email: str,
        password: str,
        full_name: str | None = None,
        organization: str | None = None,
        role: str = ROLE_VOTER,
        ip_address: str | None = None,
    ) -> UserModel:
        """Validate and insert a user. Raises on bad input or duplicate email."""
        email = normalize_email(email)
        if not validate_email(email):
            raise InvalidInputError("Invalid email format")
        if not validate_password(password):
            raise InvalidInputError(PASSWORD_RULES)

        if await self.get_by_email(session, email) is not None:
            raise DuplicateEmailError()

        user = UserModel(
            email=email,
            hashed_password=hash_password(password),
            full_name=full_name,
            organization=organization,
            role=role,
        )
        session.add(user)
        try:
            await session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration for the same email.
            raise DuplicateEmailError() from exc

        if self.audit_service:
            await self.audit_service.record(
                session, audit.USER_REGISTERED, "user", user.id,
                user_id=user.id, ip_address=ip_address,
                details={"role": role},
            )
        logger.info("Registered %s user %s", role, user.id)
        return user

    async def register(
        self,
        session: AsyncSession,
        email: str,
        password: str,
        full_name: str | None = None,
        organization: str | None = None,
        ip_address: str | None = None,
    ) -> tuple[UserModel, str]:
        """Public self-registration; always creates a voter. Returns (user, token)."""
        user = await self.create_user(
            session, email, password,
            full_name=full_name, organization=organization,
            role=ROLE_VOTER, ip_address=ip_address,
        )
        return user, self.issue_token(user)

    async def ensure_admin(
        self, session: AsyncSession, email: str, password: str,
        full_name: str | None = "Admin User",
    ) -> tuple[UserModel, bool]:
        """Create an admin account unless the email exists. Returns (user, created)."""
        existing = await self.get_by_email(session, email)
        if existing is not None:
            return existing, False
        user = await self.create_user(
            session, email, password, full_name=full_name, role=ROLE_ADMIN,
        )
        return user, True

    # ── Login ──

    async def authenticate(
        self,
        session: AsyncSession,
        email: str,
        password: str,
        ip_address: str | None = None,
    ) -> tuple[UserModel, str]:
        """Check credentials, stamp last_login. Returns (user, token)."""
        user = await self.get_by_email(session, email)
        if user is None or not verify_password(password, user.hashed_password):
            raise AuthenticationError()

        if password_needs_rehash(user.hashed_password):
            user.hashed_password = hash_password(password)
        user.last_login = datetime.now(timezone.utc)
        await session.flush()

        if self.audit_service:
            await self.audit_service.record(
                session, audit.USER_LOGIN, "user", user.id,
                user_id=user.id, ip_address=ip_address,
            )
        return user, self.issue_token(user)

    def issue_token(self, user: UserModel) -> str:
        return create_access_token(user.id, user.email, user.role, self.settings)
