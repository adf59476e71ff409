"""Health check endpoints with dependency checking.

Provides health checks for:
- Database connectivity
- Transactional email API configuration
- AI assistant (Claude) configuration
- Application status
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from adjusterhub import __version__
from adjusterhub.config import Settings
from adjusterhub.dependencies import get_db, get_settings
from adjusterhub.logging_config import get_logger

router = APIRouter()
logger = get_logger(__name__)

SERVICE_NAME = "adjusterhub"


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity.

    Args:
        db: Database session.

    Returns:
        Dict with status and optional error message.
    """
    try:
        db.execute(text("SELECT 1"))
        return {"healthy": True, "message": "Database connected"}
    except SQLAlchemyError as e:
        logger.error("database_health_check_failed", error=str(e))
        return {"healthy": False, "message": f"Database error: {str(e)}"}


def check_email_config(settings: Settings) -> Dict[str, Any]:
    """Report whether outbound email can be delivered.

    Only the configuration is checked; no message is sent.
    """
    if not settings.email_api_key:
        return {"healthy": False, "message": "Email API key not configured"}
    return {"healthy": True, "message": "Email API configured"}


def check_assistant_config(settings: Settings) -> Dict[str, Any]:
    # No live API call here: it would cost tokens on every health check
    if not settings.anthropic_api_key:
        return {"healthy": False, "message": "Anthropic API key not configured"}
    return {"healthy": True, "message": "Claude API key configured"}


@router.get("/health")
def health_check() -> Dict[str, Any]:
    """Basic health check - just app status."""
    return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}


@router.get("/health/detailed")
def detailed_health_check(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Detailed health check with dependency status.

    Checks:
    - Database connectivity
    - Email API configuration
    - Claude API configuration

    Returns:
        ``healthy`` when every check passes, ``degraded`` otherwise.
    """
    checks = {
        "database": check_database(db),
        "email_api": check_email_config(settings),
        "claude_api": check_assistant_config(settings),
    }

    all_healthy = all(check["healthy"] for check in checks.values())
    overall_status = "healthy" if all_healthy else "degraded"

    logger.info(
        "health_check_performed",
        status=overall_status,
        database=checks["database"]["healthy"],
        email_api=checks["email_api"]["healthy"],
        claude_api=checks["claude_api"]["healthy"],
    )

    return {
        "status": overall_status,
        "service": SERVICE_NAME,
        "version": __version__,
        "environment": settings.environment,
        "checks": checks,
    }


@router.get("/health/ready")
def readiness_check(db: Session = Depends(get_db)):
    """Readiness: 200 if the app can serve traffic, 503 otherwise."""
    database = check_database(db)
    if not database["healthy"]:
        return JSONResponse(status_code=503, content={"ready": False, "reason": "Database unavailable"})
    return {"ready": True}


@router.get("/health/live")
def liveness_check() -> Dict[str, Any]:
    """Liveness: 200 if the process is alive."""
    return {"alive": True, "status": "healthy"}
