"""Document vault schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from adjusterhub.schemas.common import APIModel, Pagination
from adjusterhub.schemas.enums import DocumentType


class Document(APIModel):
    id: int
    user_id: int
    claim_id: Optional[int] = None
    name: str
    original_filename: str
    description: Optional[str] = None
    type: DocumentType
    mime_type: str
    size: int
    created_at: datetime


class DocumentList(APIModel):
    documents: List[Document]
    pagination: Pagination
    stats: Dict[str, Any]
