"""Claim ORM model."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from adjusterhub.database import Base, utcnow


class ClaimModel(Base):
    __tablename__ = "claims"

    id = Column(Integer, primary_key=True, autoincrement=True)
    claim_number = Column(String, unique=True, nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(Text)
    type = Column(String, nullable=False)  # ClaimType enum value
    status = Column(String, nullable=False, default="AVAILABLE", index=True)  # ClaimStatus enum value
    priority = Column(String, nullable=False, default="MEDIUM")  # Priority enum value
    priority_rank = Column(Integer, nullable=False, default=1)  # sortable mirror of priority

    estimated_value = Column(Float)
    final_value = Column(Float)
    adjuster_fee = Column(Float)

    address = Column(String)
    city = Column(String)
    state = Column(String)
    zip_code = Column(String)

    incident_date = Column(DateTime)
    reported_date = Column(DateTime, default=utcnow)
    deadline = Column(DateTime)
    completed_at = Column(DateTime)

    firm_id = Column(Integer, ForeignKey("firms.id"), nullable=False, index=True)
    adjuster_id = Column(Integer, ForeignKey("users.id"), index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    firm = relationship("FirmModel", back_populates="claims")
    adjuster = relationship("UserModel")
    earnings = relationship("EarningModel", back_populates="claim")

    def __repr__(self) -> str:
        return f"<Claim id={self.id} number={self.claim_number} status={self.status}>"
