"""Application configuration loaded from environment variables."""

import logging
import os
from pathlib import Path
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Check if .env file exists and is readable
_env_file = None
try:
    env_path = Path(".env")
    if env_path.exists() and os.access(env_path, os.R_OK):
        _env_file = ".env"
except (OSError, PermissionError):
    logger.debug(".env is not readable, using the process environment only")

_DEV_JWT_SECRET = "dev-only-jwt-secret-change-me-before-deploying"


class Settings(BaseSettings):
    """All configuration for the AdjusterHub API.

    Values are loaded from environment variables or a .env file.
    """

    # Application
    app_name: str = "adjusterhub"
    environment: str = "development"  # development | test | production
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./data/adjusterhub.db"

    # Sessions
    jwt_secret: str = _DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    session_ttl_days: int = 7
    session_cookie_name: str = "session"
    csrf_cookie_name: str = "csrf-token"
    bcrypt_rounds: int = 12

    # HTTP edge
    allowed_origins: list[str] = ["http://localhost:3000"]
    max_request_bytes: int = 50 * 1024 * 1024
    csrf_protection_enabled: bool = True

    # Document vault
    max_upload_bytes: int = 10 * 1024 * 1024
    storage_dir: str = "./data/uploads"

    # Transactional email
    email_api_url: str = "https://api.resend.com"
    email_api_key: str = ""
    email_from: str = "AdjusterHub <no-reply@adjusterhub.local>"
    frontend_url: str = "http://localhost:3000"

    # Anthropic Claude API (assistant)
    anthropic_api_key: str = ""
    assistant_model: str = "claude-sonnet-4-20250514"
    retry_max_attempts: int = 3

    # Logging
    json_logs: bool = False
    log_level: str = "INFO"

    model_config = {
        "env_file": _env_file,
        "env_file_encoding": "utf-8",
        "env_file_ignore_empty": True,
    }

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def session_ttl_seconds(self) -> int:
        return self.session_ttl_days * 24 * 60 * 60

    def validate_security_environment(self) -> None:
        """Refuse to start a production deployment with weak secrets.

        Outside production the same problems are only logged.
        """
        problems = []
        if not self.database_url:
            problems.append("DATABASE_URL is not set")
        if not self.jwt_secret or self.jwt_secret == _DEV_JWT_SECRET:
            problems.append("JWT_SECRET is not set")
        elif len(self.jwt_secret) < 32:
            problems.append("JWT_SECRET must be at least 32 characters long")

        if not problems:
            return
        if self.is_production:
            raise RuntimeError("Insecure configuration: " + "; ".join(problems))
        logger.warning("Insecure configuration (%s): %s", self.environment, "; ".join(problems))
