"""Tests for the periodic sweep of expired sessions."""

from datetime import timedelta

from adjusterhub.database import utcnow
from adjusterhub.main import _purge_expired_sessions
from adjusterhub.models.session import SessionModel


def _session(user, jti, expires_at) -> SessionModel:
    return SessionModel(user_id=user.id, jti=jti, token_hash=f"hash-{jti}", expires_at=expires_at)


def test_expired_sessions_are_removed(container, db, make_user):
    user = make_user()
    db.add_all([
        _session(user, "old", utcnow() - timedelta(minutes=1)),
        _session(user, "live", utcnow() + timedelta(hours=1)),
    ])
    db.commit()

    assert _purge_expired_sessions(container) == 1
    assert [s.jti for s in db.query(SessionModel).all()] == ["live"]


def test_nothing_to_remove(container, db):
    assert _purge_expired_sessions(container) == 0
