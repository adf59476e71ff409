"""Dependency Injection Container.

Process-wide singletons for the API: configuration, database engine and
session factory, in-memory engines (cache, rate limiters, request screen),
security helpers and outbound clients. Request-scoped services are built in
``adjusterhub.dependencies`` from these singletons plus a database session.

Usage::

    from adjusterhub.container import AppContainer

    container = AppContainer()
    container.settings.override(providers.Object(Settings(environment="test")))
    cache = container.cache()
"""

from dependency_injector import containers, providers

from adjusterhub.clients.email_client import EmailClient
from adjusterhub.clients.llm_client import LLMClient
from adjusterhub.config import Settings
from adjusterhub.database import build_engine, build_session_factory
from adjusterhub.engines.rate_limiter import build_limiters
from adjusterhub.engines.request_screen import RequestScreen
from adjusterhub.engines.ttl_cache import TTLCache
from adjusterhub.prompts.manager import PromptManager
from adjusterhub.security.audit import SecurityAuditLog
from adjusterhub.security.passwords import PasswordHasher
from adjusterhub.security.tokens import SessionTokenCodec
from adjusterhub.security.totp import TOTPHelper


class AppContainer(containers.DeclarativeContainer):
    """Application Dependency Injection Container.

    Tests override ``settings`` and ``db_engine`` with ``providers.Object``
    before anything else is resolved.
    """

    # ══════════════════════════════════════════════════════════════════
    # CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    settings = providers.Singleton(Settings)

    # ══════════════════════════════════════════════════════════════════
    # DATABASE
    # ══════════════════════════════════════════════════════════════════

    db_engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=False,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=db_engine,
    )

    # ══════════════════════════════════════════════════════════════════
    # IN-MEMORY ENGINES
    # ══════════════════════════════════════════════════════════════════

    cache = providers.Singleton(TTLCache, default_ttl=300)

    rate_limiters = providers.Singleton(build_limiters)

    request_screen = providers.Singleton(
        RequestScreen,
        max_request_bytes=settings.provided.max_request_bytes,
    )

    # ══════════════════════════════════════════════════════════════════
    # SECURITY
    # ══════════════════════════════════════════════════════════════════

    password_hasher = providers.Singleton(
        PasswordHasher,
        rounds=settings.provided.bcrypt_rounds,
    )

    token_codec = providers.Singleton(
        SessionTokenCodec,
        secret=settings.provided.jwt_secret,
        algorithm=settings.provided.jwt_algorithm,
        ttl_seconds=settings.provided.session_ttl_seconds,
    )

    totp = providers.Singleton(TOTPHelper, issuer="AdjusterHub")

    audit_log = providers.Singleton(
        SecurityAuditLog,
        session_factory=session_factory,
    )

    # ══════════════════════════════════════════════════════════════════
    # EXTERNAL CLIENTS
    # ══════════════════════════════════════════════════════════════════

    email_client = providers.Singleton(
        EmailClient,
        base_url=settings.provided.email_api_url,
        api_key=settings.provided.email_api_key,
        sender=settings.provided.email_from,
        frontend_url=settings.provided.frontend_url,
        retry_max_attempts=settings.provided.retry_max_attempts,
    )

    llm_client = providers.Singleton(
        LLMClient,
        api_key=settings.provided.anthropic_api_key,
        model=settings.provided.assistant_model,
        retry_max_attempts=settings.provided.retry_max_attempts,
    )

    prompt_manager = providers.Singleton(PromptManager)
