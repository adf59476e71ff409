"""FastAPI application entry point with structured logging and security middleware."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from adjusterhub import __version__
from adjusterhub.api import (
    admin,
    auth,
    calendar,
    chat,
    claims,
    dashboard,
    documents,
    earnings,
    firms,
    messages,
    notifications,
    support,
    users,
)
from adjusterhub.config import Settings
from adjusterhub.database import init_db, utcnow
from adjusterhub.dependencies import get_container
from adjusterhub.errors import register_exception_handlers
from adjusterhub.health import router as health_router
from adjusterhub.logging_config import get_logger, setup_logging
from adjusterhub.middleware.rate_limit import RateLimitMiddleware
from adjusterhub.middleware.request_context import RequestContextMiddleware
from adjusterhub.middleware.security import SecurityMiddleware
from adjusterhub.repositories.session_repo import SessionRepository

_boot_settings = Settings()

# Setup structured logging
setup_logging(json_logs=_boot_settings.json_logs, log_level=_boot_settings.log_level)
logger = get_logger(__name__)

SWEEP_INTERVAL_SECONDS = 60


def _purge_expired_sessions(container) -> int:
    db = container.session_factory()()
    try:
        removed = SessionRepository(db).delete_expired(utcnow())
        db.commit()
        return removed
    finally:
        db.close()


async def sweep_expired_state(container) -> None:
    """Drop closed rate-limit windows, stale cache entries and expired sessions."""
    while True:
        await asyncio.sleep(SWEEP_INTERVAL_SECONDS)
        windows = sum(limiter.purge_expired() for limiter in container.rate_limiters().values())
        entries = container.cache().purge_expired()
        try:
            sessions = await run_in_threadpool(_purge_expired_sessions, container)
        except SQLAlchemyError as exc:
            logger.warning("session_sweep_failed", error=str(exc))
            sessions = 0
        logger.debug("expired_state_swept", windows=windows, cache_entries=entries, sessions=sessions)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the FastAPI application."""
    container = get_container()
    settings = container.settings()
    logger.info("application_startup", version=__version__, environment=settings.environment)
    settings.validate_security_environment()
    init_db(container.db_engine())
    logger.info("database_initialized")
    sweeper = asyncio.create_task(sweep_expired_state(container))
    yield
    sweeper.cancel()
    try:
        await sweeper
    except asyncio.CancelledError:
        logger.info("sweeper_stopped")
    container.email_client().close()
    logger.info("application_shutdown")


app = FastAPI(
    title="AdjusterHub",
    description=(
        "Claims marketplace and back office for independent insurance "
        "adjusters: claims, earnings, messaging, documents, calendar, support "
        "tickets and an AI assistant."
    ),
    version=__version__,
    lifespan=lifespan,
)

register_exception_handlers(app, lambda: get_container().settings())

# Starlette runs the last-added middleware first:
# request context -> CORS -> security screen -> rate limit -> routes
app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_boot_settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID", "X-CSRF-Token"],
    expose_headers=["X-Request-ID", "Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
)
app.add_middleware(RequestContextMiddleware)

# Health checks (no prefix)
app.include_router(health_router, tags=["health"])

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(claims.router, prefix="/api/claims", tags=["claims"])
app.include_router(earnings.router, prefix="/api/earnings", tags=["earnings"])
app.include_router(messages.router, prefix="/api/messages", tags=["messages"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
app.include_router(documents.router, prefix="/api/documents", tags=["documents"])
app.include_router(firms.router, prefix="/api/firms", tags=["firms"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(calendar.router, prefix="/api/calendar", tags=["calendar"])
app.include_router(support.router, prefix="/api/support/tickets", tags=["support"])
app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])


@app.get("/")
def root():
    """Root endpoint - API information and available endpoints."""
    return {
        "service": "AdjusterHub API",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "health_detailed": "/health/detailed",
        "endpoints": {
            "auth": "/api/auth",
            "claims": "/api/claims",
            "earnings": "/api/earnings",
            "messages": "/api/messages",
            "notifications": "/api/notifications",
            "documents": "/api/documents",
            "firms": "/api/firms",
            "dashboard": "/api/dashboard/stats",
            "analytics": "/api/dashboard/analytics",
            "calendar": "/api/calendar",
            "support": "/api/support/tickets",
            "chat": "/api/chat",
        },
    }
