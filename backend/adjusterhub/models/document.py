"""Document vault ORM model."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from adjusterhub.database import Base, utcnow


class DocumentModel(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    claim_id = Column(Integer, ForeignKey("claims.id"), index=True)

    name = Column(String, nullable=False)
    original_filename = Column(String, nullable=False)
    description = Column(Text)
    type = Column(String, nullable=False, default="OTHER")  # DocumentType enum value
    mime_type = Column(String, nullable=False)
    size = Column(Integer, nullable=False)
    storage_path = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    claim = relationship("ClaimModel")

    def __repr__(self) -> str:
        return f"<Document id={self.id} name={self.name} size={self.size}>"
