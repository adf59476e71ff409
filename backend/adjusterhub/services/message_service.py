"""Direct messages between users."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from adjusterhub.database import utcnow
from adjusterhub.errors import AppError
from adjusterhub.models.message import MessageModel
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.message_repo import MessageRepository
from adjusterhub.repositories.user_repo import UserRepository
from adjusterhub.schemas.enums import NotificationType
from adjusterhub.schemas.message import MessageCreate
from adjusterhub.security.sanitize import sanitize_input, sanitize_text
from adjusterhub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


class MessageService:
    def __init__(
        self,
        db: Session,
        message_repo: MessageRepository,
        user_repo: UserRepository,
        notification_service: NotificationService,
    ):
        self.db = db
        self.messages = message_repo
        self.users = user_repo
        self.notifications = notification_service

    def list_messages(
        self,
        user: UserModel,
        *,
        unread_only: bool = False,
        claim_id: Optional[int] = None,
        firm_id: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[MessageModel], int, int]:
        items, total = self.messages.search(
            user.id, unread_only=unread_only, claim_id=claim_id, firm_id=firm_id, page=page, limit=limit
        )
        return items, total, self.messages.unread_count(user.id)

    def send(self, sender: UserModel, payload: MessageCreate) -> MessageModel:
        recipient = self.users.get(payload.recipient_id)
        if recipient is None or not recipient.is_active:
            raise AppError.not_found("Recipient")
        if recipient.id == sender.id:
            raise AppError.validation("You cannot send a message to yourself")

        content = sanitize_input(payload.content)
        if not content:
            raise AppError.validation("Message content is empty")

        message = self.messages.create(
            MessageModel(
                sender_id=sender.id,
                recipient_id=recipient.id,
                claim_id=payload.claim_id,
                firm_id=payload.firm_id,
                subject=sanitize_text(payload.subject) or None,
                content=content,
            )
        )
        preview = sanitize_text(content)
        if len(preview) > PREVIEW_LENGTH:
            preview = preview[:PREVIEW_LENGTH] + "..."
        self.notifications.notify(
            recipient.id,
            NotificationType.MESSAGE_RECEIVED,
            f"New message from {sender.full_name}",
            preview,
            {"messageId": message.id, "senderId": sender.id},
        )
        self.db.commit()
        logger.info("Message %d sent from user %d to user %d", message.id, sender.id, recipient.id)
        return message

    def get_message(self, user: UserModel, message_id: int) -> MessageModel:
        """Fetch a message for a participant; the recipient opening it marks it read."""
        message = self.messages.get(message_id)
        if message is None or user.id not in (message.sender_id, message.recipient_id):
            raise AppError.not_found("Message")
        if message.recipient_id == user.id and not message.is_read:
            message.is_read = True
            message.read_at = utcnow()
            self.messages.update(message)
            self.db.commit()
        return message
