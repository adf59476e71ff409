"""Firm and adjuster-firm connection ORM models."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from adjusterhub.database import Base, utcnow


class FirmModel(Base):
    __tablename__ = "firms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    email = Column(String)
    phone = Column(String)
    website = Column(String)
    description = Column(Text)
    address = Column(String)
    city = Column(String)
    state = Column(String, index=True)
    zip_code = Column(String)
    specialties = Column(JSON, default=list)
    rating = Column(Float, default=0.0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    admins = relationship("UserModel", back_populates="firm")
    claims = relationship("ClaimModel", back_populates="firm")
    connections = relationship("FirmConnectionModel", back_populates="firm", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Firm id={self.id} name={self.name}>"


class FirmConnectionModel(Base):
    """An adjuster's standing with a firm; APPROVED connections allow assignment."""

    __tablename__ = "firm_connections"
    __table_args__ = (UniqueConstraint("user_id", "firm_id", name="uq_firm_connection"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    firm_id = Column(Integer, ForeignKey("firms.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default="PENDING")  # ConnectionStatus enum value
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    firm = relationship("FirmModel", back_populates="connections")
    user = relationship("UserModel")

    def __repr__(self) -> str:
        return f"<FirmConnection user_id={self.user_id} firm_id={self.firm_id} status={self.status}>"
