"""Earning ORM model."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from adjusterhub.database import Base, utcnow


class EarningModel(Base):
    __tablename__ = "earnings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    claim_id = Column(Integer, ForeignKey("claims.id"), index=True)

    amount = Column(Float, nullable=False)
    type = Column(String, nullable=False)  # EarningType enum value
    status = Column(String, nullable=False, default="PENDING")  # EarningStatus enum value
    description = Column(Text)

    paid_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    claim = relationship("ClaimModel", back_populates="earnings")
    user = relationship("UserModel")

    def __repr__(self) -> str:
        return f"<Earning id={self.id} amount={self.amount} status={self.status}>"
