"""Support tickets raised by users, with a threaded conversation per ticket."""

import logging
import secrets
import string
import time
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from adjusterhub.clients.email_client import EmailClient
from adjusterhub.database import utcnow
from adjusterhub.errors import AppError
from adjusterhub.models.support import SupportMessageModel, SupportTicketModel
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.support_repo import SupportMessageRepository, SupportTicketRepository
from adjusterhub.schemas.enums import PRIORITY_RANK, NotificationType, TicketStatus
from adjusterhub.schemas.support import TicketCreate, TicketUpdate
from adjusterhub.security.sanitize import sanitize_input, sanitize_text
from adjusterhub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

TICKET_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def new_ticket_number() -> str:
    """``TKT-{epoch millis}-{4 random characters}``."""
    suffix = "".join(secrets.choice(TICKET_SUFFIX_ALPHABET) for _ in range(4))
    return f"TKT-{int(time.time() * 1000)}-{suffix}"


class SupportService:
    def __init__(
        self,
        db: Session,
        ticket_repo: SupportTicketRepository,
        message_repo: SupportMessageRepository,
        notification_service: NotificationService,
        email_client: EmailClient,
    ):
        self.db = db
        self.tickets = ticket_repo
        self.messages = message_repo
        self.notifications = notification_service
        self.email = email_client

    def list_tickets(
        self,
        user: UserModel,
        *,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[SupportTicketModel], int, Dict[str, int]]:
        """One page of the caller's tickets plus per-status counts over all of them."""
        items, total = self.tickets.search(
            user.id, status=status, priority=priority, category=category, page=page, limit=limit
        )
        return items, total, self.tickets.status_counts(user.id)

    def get_ticket(self, user: UserModel, ticket_id: int) -> SupportTicketModel:
        ticket = self.tickets.get_for_user(ticket_id, user.id)
        if ticket is None:
            raise AppError.not_found("Ticket")
        return ticket

    def create_ticket(self, user: UserModel, payload: TicketCreate) -> SupportTicketModel:
        subject = sanitize_text(payload.subject)
        description = sanitize_input(payload.description)
        if not subject or not description:
            raise AppError.validation("Subject and description cannot be empty")

        number = new_ticket_number()
        while self.tickets.number_taken(number):
            number = new_ticket_number()

        ticket = self.tickets.create(
            SupportTicketModel(
                ticket_number=number,
                user_id=user.id,
                subject=subject,
                description=description,
                category=sanitize_text(payload.category),
                priority=payload.priority.value,
                priority_rank=PRIORITY_RANK[payload.priority],
                status=TicketStatus.OPEN.value,
            )
        )
        self.messages.create(
            SupportMessageModel(ticket_id=ticket.id, sender_id=user.id, content=description, is_from_support=False)
        )
        self.notifications.notify(
            user.id,
            NotificationType.SUPPORT_TICKET,
            "Support Ticket Created",
            f"Your support ticket {ticket.ticket_number} has been created",
            {"ticketId": ticket.id},
        )
        self.db.commit()
        logger.info("Support ticket %s opened by user %d", ticket.ticket_number, user.id)

        self.email.send_support_ticket_email(user.email, user.first_name, ticket.ticket_number, ticket.subject)
        return ticket

    def add_message(self, user: UserModel, ticket_id: int, content: str) -> SupportMessageModel:
        ticket = self.get_ticket(user, ticket_id)
        if ticket.status == TicketStatus.CLOSED.value:
            raise AppError.validation("Cannot add messages to closed tickets")
        text = sanitize_input(content)
        if not text:
            raise AppError.validation("Message content cannot be empty")

        message = self.messages.create(
            SupportMessageModel(ticket_id=ticket.id, sender_id=user.id, content=text, is_from_support=False)
        )
        # a reply from the user reopens a resolved ticket
        if ticket.status == TicketStatus.RESOLVED.value:
            ticket.status = TicketStatus.OPEN.value
            ticket.resolved_at = None
        ticket.updated_at = utcnow()
        self.db.commit()
        logger.info("Message added to support ticket %s by user %d", ticket.ticket_number, user.id)
        return message

    def update_ticket(self, user: UserModel, ticket_id: int, update: TicketUpdate) -> SupportTicketModel:
        ticket = self.get_ticket(user, ticket_id)
        if update.status is not None and update.status != TicketStatus.CLOSED:
            raise AppError.validation("Users can only close tickets")

        if update.status == TicketStatus.CLOSED:
            ticket.status = TicketStatus.CLOSED.value
            ticket.closed_at = ticket.closed_at or utcnow()
        if update.priority is not None:
            ticket.priority = update.priority.value
            ticket.priority_rank = PRIORITY_RANK[update.priority]

        self.tickets.update(ticket)
        self.db.commit()
        return ticket
