"""Async database manager for SecureVote."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Awaitable, Callable, TypeVar

from sqlalchemy import select, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from securevote.common.config import SecureVoteSettings, get_settings
from securevote.common.models import Base
from securevote.common.retry import with_retry

# Import all model modules so Base.metadata is complete for create_all().
import securevote.users.models  # noqa: F401
import securevote.elections.models  # noqa: F401
import securevote.votes.models  # noqa: F401
import securevote.audit.models  # noqa: F401
from securevote.common.migrations import MigrationModel

logger = logging.getLogger(__name__)

T = TypeVar("T")

INITIAL_SCHEMA = "initial_schema"


class DatabaseManager:
    """Manages a single async database engine (the per-process connection pool)."""

    def __init__(self, settings: SecureVoteSettings | None = None):
        self._settings = settings or get_settings()
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    async def init(self) -> None:
        url = self._settings.db_url
        kwargs: dict[str, Any] = {"echo": self._settings.db_echo}
        parsed = make_url(url)
        if parsed.get_backend_name() == "sqlite":
            if parsed.database and parsed.database != ":memory:":
                Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        else:
            kwargs["pool_pre_ping"] = True
        self.engine = create_async_engine(url, **kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False
        )

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        if self._session_factory is None:
            raise RuntimeError("DatabaseManager not initialized: call init() first")
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def run(
        self,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Run ``fn(session, *args, **kwargs)`` in its own transaction.

        Transient failures roll the transaction back and the whole call is
        retried with exponential backoff, so ``fn`` must not have side effects
        outside the session.
        """

        async def attempt() -> T:
            async with self.get_session() as session:
                return await fn(session, *args, **kwargs)

        return await with_retry(
            attempt,
            max_retries=self._settings.db_retry_max,
            base_delay=self._settings.db_retry_base_delay,
        )

    async def create_all(self) -> None:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized: call init() first")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def migrate(self) -> list[str]:
        """Create the schema and record it in the migrations table.

        Returns the names of migrations applied by this call.
        """
        await self.create_all()
        applied: list[str] = []
        async with self.get_session() as session:
            result = await session.execute(
                select(MigrationModel).where(MigrationModel.name == INITIAL_SCHEMA)
            )
            if result.scalar_one_or_none() is None:
                session.add(MigrationModel(name=INITIAL_SCHEMA))
                applied.append(INITIAL_SCHEMA)
        for name in applied:
            logger.info("Applied migration %s", name)
        return applied

    async def check_health(self) -> dict[str, Any]:
        if self.engine is None:
            return {"connected": False, "error": "not initialized"}
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database health check failed", exc_info=True)
            return {"connected": False, "error": str(e)}
        return {"connected": True, "dialect": self.engine.dialect.name}

    async def close(self) -> None:
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self._session_factory = None
