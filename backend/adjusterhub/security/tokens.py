"""Signed session tokens (JWT) and opaque one-time tokens.

Session tokens are HS256 JWTs carrying ``sub``, ``email``, ``role``, ``jti``,
``iat`` and ``exp``. Only the SHA-256 digest of any bearer secret is ever
persisted.
"""

import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt


@dataclass
class IssuedToken:
    token: str
    jti: str
    expires_at: datetime  # naive UTC


@dataclass
class SessionClaims:
    user_id: int
    email: str
    role: str
    jti: str
    expires_at: datetime  # naive UTC


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_opaque_token(nbytes: int = 32) -> str:
    """URL-safe random token for email verification and password reset links."""
    return secrets.token_urlsafe(nbytes)


class SessionTokenCodec:
    """Encode and decode session JWTs."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 7 * 24 * 3600):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    def issue(self, user_id: int, email: str, role: str, now: Optional[datetime] = None) -> IssuedToken:
        issued_at = now or datetime.now(timezone.utc)
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        expires_at = issued_at + timedelta(seconds=self.ttl_seconds)
        jti = uuid.uuid4().hex
        payload: Dict[str, Any] = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "jti": jti,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
        return IssuedToken(token=token, jti=jti, expires_at=expires_at.replace(tzinfo=None))

    def decode(self, token: str) -> Optional[SessionClaims]:
        """Return the claims of a valid token, or None if it is forged, malformed or expired."""
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "jti", "exp"]},
            )
            return SessionClaims(
                user_id=int(payload["sub"]),
                email=payload.get("email", ""),
                role=payload.get("role", ""),
                jti=payload["jti"],
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None),
            )
        except (jwt.InvalidTokenError, KeyError, ValueError):
            return None
