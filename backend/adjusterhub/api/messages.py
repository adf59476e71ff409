"""Direct messages between users, optionally tied to a claim or firm."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from adjusterhub.dependencies import get_current_user, get_message_service
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.common import Pagination
from adjusterhub.schemas.message import Message, MessageCreate, MessageList
from adjusterhub.services.message_service import MessageService

logger = get_logger(__name__)
router = APIRouter()


@router.get("", response_model=MessageList)
def list_messages(
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    claim_id: Optional[int] = Query(default=None, alias="claimId"),
    firm_id: Optional[int] = Query(default=None, alias="firmId"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> MessageList:
    items, total, unread = service.list_messages(
        user, unread_only=unread_only, claim_id=claim_id, firm_id=firm_id, page=page, limit=limit
    )
    return MessageList(
        messages=[Message.model_validate(m) for m in items],
        pagination=Pagination.build(page, limit, total),
        unread_count=unread,
    )


@router.post("", response_model=Message, status_code=201)
def send_message(
    payload: MessageCreate,
    user: UserModel = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> Message:
    message = service.send(user, payload)
    logger.info("message_sent", message_id=message.id, recipient_id=message.recipient_id)
    return Message.model_validate(message)


@router.get("/{message_id}", response_model=Message)
def get_message(
    message_id: int,
    user: UserModel = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> Message:
    return Message.model_validate(service.get_message(user, message_id))
