"""Document vault: upload, browse, download and delete files."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from fastapi.responses import FileResponse

from adjusterhub.dependencies import get_client_info, get_current_user, get_document_service
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.common import Pagination
from adjusterhub.schemas.document import Document, DocumentList
from adjusterhub.schemas.enums import DocumentType
from adjusterhub.security.sanitize import ClientInfo
from adjusterhub.services.document_service import DocumentService

logger = get_logger(__name__)
router = APIRouter()


@router.post("/upload", response_model=Document, status_code=201)
def upload_document(
    file: UploadFile = File(...),
    name: Optional[str] = Form(default=None, max_length=200),
    description: Optional[str] = Form(default=None, max_length=2000),
    type: Optional[str] = Form(default=None),
    claim_id: Optional[int] = Form(default=None, alias="claimId"),
    user: UserModel = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
    client: ClientInfo = Depends(get_client_info),
) -> Document:
    """Multipart upload; the file is screened before anything is written.

    At most one byte past the size limit is read, enough to reject the file.
    """
    content = file.file.read(service.max_upload_bytes + 1)
    document = service.upload(
        user,
        file.filename or "",
        file.content_type or "",
        content,
        client,
        name=name,
        description=description,
        type=type,
        claim_id=claim_id,
    )
    logger.info("document_uploaded", document_id=document.id, size=document.size)
    return Document.model_validate(document)


@router.get("", response_model=DocumentList)
def list_documents(
    type: Optional[DocumentType] = None,
    claim_id: Optional[int] = Query(default=None, alias="claimId"),
    search: Optional[str] = Query(default=None, max_length=200),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
) -> DocumentList:
    items, total, stats = service.list_documents(
        user, type=type.value if type else None, claim_id=claim_id, search=search, page=page, limit=limit
    )
    return DocumentList(
        documents=[Document.model_validate(d) for d in items],
        pagination=Pagination.build(page, limit, total),
        stats=stats,
    )


@router.get("/{document_id}/download")
def download_document(
    document_id: int,
    user: UserModel = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
) -> FileResponse:
    document, path = service.get_file(user, document_id)
    return FileResponse(path, media_type=document.mime_type, filename=document.original_filename)


@router.delete("/{document_id}", status_code=204)
def delete_document(
    document_id: int,
    user: UserModel = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
) -> Response:
    service.delete(user, document_id)
    logger.info("document_deleted", document_id=document_id)
    return Response(status_code=204)
