"""Login session and one-time token ORM models.

Only SHA-256 digests of bearer secrets are stored.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from adjusterhub.database import Base, utcnow


class SessionModel(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    jti = Column(String, unique=True, nullable=False, index=True)
    token_hash = Column(String, nullable=False)
    ip_address = Column(String)
    user_agent = Column(String)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("UserModel", back_populates="sessions")

    def __repr__(self) -> str:
        return f"<Session user_id={self.user_id} jti={self.jti}>"


class VerificationTokenModel(Base):
    """Email-verification and password-reset tokens."""

    __tablename__ = "verification_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String, nullable=False)  # TokenType enum value
    token_hash = Column(String, unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("UserModel")

    def __repr__(self) -> str:
        return f"<VerificationToken user_id={self.user_id} type={self.type}>"
