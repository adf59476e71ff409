"""Document vault: validated uploads on local disk, listing, download, delete."""

import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from adjusterhub.errors import AppError
from adjusterhub.models.document import DocumentModel
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.claim_repo import ClaimRepository
from adjusterhub.repositories.document_repo import DocumentRepository
from adjusterhub.schemas.enums import DocumentType, Role, SecurityEventType
from adjusterhub.security.audit import SecurityAuditLog
from adjusterhub.security.sanitize import ClientInfo, sanitize_text
from adjusterhub.security.uploads import file_extension, normalize_filename, validate_upload

logger = logging.getLogger(__name__)


class DocumentService:
    def __init__(
        self,
        db: Session,
        document_repo: DocumentRepository,
        claim_repo: ClaimRepository,
        audit: SecurityAuditLog,
        storage_dir: str,
        max_upload_bytes: int,
    ):
        self.db = db
        self.documents = document_repo
        self.claims = claim_repo
        self.audit = audit
        self.storage_dir = Path(storage_dir)
        self.max_upload_bytes = max_upload_bytes

    def upload(
        self,
        user: UserModel,
        filename: str,
        mime_type: str,
        content: bytes,
        client: ClientInfo,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        type: Optional[str] = None,
        claim_id: Optional[int] = None,
    ) -> DocumentModel:
        safe_name = normalize_filename(filename)
        problem = validate_upload(safe_name, mime_type or "", len(content), self.max_upload_bytes)
        if problem:
            logger.info("Rejected upload %r from user %d: %s", filename, user.id, problem)
            raise AppError.file_upload(problem)

        try:
            doc_type = DocumentType(type or DocumentType.OTHER.value)
        except ValueError as exc:
            raise AppError.validation(f"Unknown document type: {type}") from exc

        if claim_id is not None:
            claim = self.claims.get(claim_id)
            if claim is None or claim.adjuster_id != user.id:
                raise AppError.not_found("Claim")

        user_dir = self.storage_dir / str(user.id)
        target = user_dir / f"{uuid.uuid4().hex}{file_extension(safe_name)}"
        try:
            user_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            logger.error("Failed to store upload for user %d: %s", user.id, exc)
            raise AppError.file_upload(f"storage write failed: {exc}") from exc

        try:
            document = self.documents.create(
                DocumentModel(
                    user_id=user.id,
                    claim_id=claim_id,
                    name=sanitize_text(name) or safe_name,
                    original_filename=safe_name,
                    description=sanitize_text(description) or None,
                    type=doc_type.value,
                    mime_type=mime_type,
                    size=len(content),
                    storage_path=str(target),
                )
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            target.unlink(missing_ok=True)
            raise
        self.audit.record(
            SecurityEventType.FILE_UPLOAD,
            client.ip,
            client.user_agent,
            user_id=user.id,
            document_id=document.id,
            size=document.size,
            mime_type=mime_type,
        )
        return document

    def list_documents(
        self,
        user: UserModel,
        *,
        type: Optional[str] = None,
        claim_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[DocumentModel], int, Dict[str, Any]]:
        items, total = self.documents.search(
            user.id, type=type, claim_id=claim_id, search=sanitize_text(search) or None, page=page, limit=limit
        )
        return items, total, self.documents.storage_stats(user.id)

    def get_file(self, user: UserModel, document_id: int) -> Tuple[DocumentModel, Path]:
        document = self._get_owned(user, document_id)
        path = Path(document.storage_path)
        if not path.is_file():
            logger.error("Document %d is missing its file at %s", document.id, path)
            raise AppError.not_found("File")
        return document, path

    def delete(self, user: UserModel, document_id: int) -> None:
        document = self._get_owned(user, document_id)
        path = Path(document.storage_path)
        self.documents.delete(document.id)
        self.db.commit()
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove %s for deleted document %d: %s", path, document_id, exc)

    def _get_owned(self, user: UserModel, document_id: int) -> DocumentModel:
        document = self.documents.get(document_id)
        if document is None:
            raise AppError.not_found("Document")
        if document.user_id != user.id and user.role != Role.ADMIN.value:
            raise AppError.authorization("You do not have access to this document")
        return document
