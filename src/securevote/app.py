"""FastAPI application factory for SecureVote."""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from securevote.common.config import get_settings
from securevote.common.exceptions import SecureVoteError
from securevote.common.logging import setup_logging
from securevote.common.schemas import ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        from securevote.deps import get_db
        db = get_db()
        await db.init()
        await db.migrate()
        yield
        # Shutdown
        await db.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "%s %s -> %d",
            request.method, request.url.path, response.status_code,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "client_ip": request.client.host if request.client else None,
            },
        )
        return response

    # Exception handlers

    @app.exception_handler(SecureVoteError)
    async def securevote_error_handler(request: Request, exc: SecureVoteError):
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "code": exc.code, **exc.extra},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        fields = {
            ".".join(str(loc) for loc in error["loc"]): error["msg"]
            for error in exc.errors()
        }
        body = ErrorResponse(error="Invalid input", code="INVALID_INPUT", fields=fields)
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        body = ErrorResponse(error="Internal server error", code="SERVER_ERROR")
        return JSONResponse(status_code=500, content=body.model_dump(exclude={"fields"}))

    @app.get("/health", response_model=HealthResponse)
    async def health():
        from securevote.deps import get_db
        status = await get_db().check_health()
        return HealthResponse(
            status="healthy" if status["connected"] else "unhealthy",
            database="connected" if status["connected"] else "disconnected",
            version=settings.api_version,
            timestamp=datetime.now(timezone.utc),
        )

    # Mount routers
    from securevote.users.router import router as auth_router
    from securevote.elections.router import router as elections_router
    from securevote.votes.router import router as votes_router
    from securevote.results.router import router as results_router
    from securevote.audit.router import router as audit_router

    prefix = settings.api_prefix
    app.include_router(auth_router, prefix=prefix, tags=["auth"])
    app.include_router(elections_router, prefix=prefix, tags=["elections"])
    app.include_router(votes_router, prefix=prefix, tags=["votes"])
    app.include_router(results_router, prefix=prefix, tags=["results"])
    app.include_router(audit_router, prefix=prefix, tags=["audit"])

    return app
