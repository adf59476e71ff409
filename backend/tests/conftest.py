"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database so tests are fully isolated.
API tests additionally get a fresh ``AppContainer`` whose settings and engine
point at that database.
"""

from typing import Callable, Dict

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import adjusterhub.dependencies as deps
from adjusterhub.config import Settings
from adjusterhub.database import build_engine, build_session_factory, init_db
from adjusterhub.models.claim import ClaimModel
from adjusterhub.models.firm import FirmConnectionModel, FirmModel
from adjusterhub.models.session import SessionModel
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.enums import ClaimStatus, ClaimType, ConnectionStatus, Priority, PRIORITY_RANK, Role
from adjusterhub.security.passwords import PasswordHasher
from adjusterhub.security.tokens import hash_token

from tests.fixtures import TEST_JWT_SECRET, TEST_PASSWORD


@pytest.fixture()
def db_engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(db_engine) -> Session:
    session = build_session_factory(db_engine)()
    yield session
    session.close()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database_url="sqlite://",
        jwt_secret=TEST_JWT_SECRET,
        bcrypt_rounds=4,
        storage_dir=str(tmp_path / "uploads"),
        email_api_key="",
        anthropic_api_key="",
    )


# ── Factories ────────────────────────────────────────────────────────────

@pytest.fixture()
def make_user(db: Session, hasher: PasswordHasher) -> Callable[..., UserModel]:
    counter = {"n": 0}

    def _make(role: Role = Role.ADJUSTER, email: str = None, password: str = TEST_PASSWORD, **fields) -> UserModel:
        counter["n"] += 1
        user = UserModel(
            email=email or f"user{counter['n']}@example.com",
            password_hash=hasher.hash(password),
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", f"User{counter['n']}"),
            role=role.value,
            email_verified=fields.pop("email_verified", True),
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_firm(db: Session) -> Callable[..., FirmModel]:
    counter = {"n": 0}

    def _make(name: str = None, **fields) -> FirmModel:
        counter["n"] += 1
        firm = FirmModel(name=name or f"Firm {counter['n']}", state=fields.pop("state", "TX"), **fields)
        db.add(firm)
        db.commit()
        db.refresh(firm)
        return firm

    return _make


@pytest.fixture()
def make_claim(db: Session) -> Callable[..., ClaimModel]:
    counter = {"n": 0}

    def _make(firm: FirmModel, status: ClaimStatus = ClaimStatus.AVAILABLE, adjuster: UserModel = None,
              priority: Priority = Priority.MEDIUM, **fields) -> ClaimModel:
        counter["n"] += 1
        claim = ClaimModel(
            claim_number=fields.pop("claim_number", f"CLM-2025-{counter['n']:04d}"),
            title=fields.pop("title", f"Claim {counter['n']}"),
            type=fields.pop("type", ClaimType.PROPERTY_DAMAGE.value),
            status=status.value,
            priority=priority.value,
            priority_rank=PRIORITY_RANK[priority],
            firm_id=firm.id,
            adjuster_id=adjuster.id if adjuster else None,
            **fields,
        )
        db.add(claim)
        db.commit()
        db.refresh(claim)
        return claim

    return _make


@pytest.fixture()
def connect(db: Session) -> Callable[..., FirmConnectionModel]:
    def _connect(adjuster: UserModel, firm: FirmModel,
                 status: ConnectionStatus = ConnectionStatus.APPROVED) -> FirmConnectionModel:
        connection = FirmConnectionModel(user_id=adjuster.id, firm_id=firm.id, status=status.value)
        db.add(connection)
        db.commit()
        db.refresh(connection)
        return connection

    return _connect


# ── API fixtures ─────────────────────────────────────────────────────────

@pytest.fixture()
def container(db_engine, test_settings):
    """Fresh DI container bound to the test database and settings."""
    deps._container = None
    c = deps.get_container()
    c.settings.override(providers.Object(test_settings))
    c.db_engine.override(providers.Object(db_engine))
    yield c
    deps._container = None


@pytest.fixture()
def client(container) -> TestClient:
    from adjusterhub.main import app

    return TestClient(app)


@pytest.fixture()
def auth_headers(container, db: Session) -> Callable[[UserModel], Dict[str, str]]:
    """Bearer headers backed by a live session row, bypassing the login endpoint."""

    def _headers(user: UserModel) -> Dict[str, str]:
        issued = container.token_codec().issue(user.id, user.email, user.role)
        db.add(
            SessionModel(
                user_id=user.id,
                jti=issued.jti,
                token_hash=hash_token(issued.token),
                ip_address="testclient",
                expires_at=issued.expires_at,
            )
        )
        db.commit()
        return {"Authorization": f"Bearer {issued.token}"}

    return _headers
