"""Support tickets raised by the signed-in user."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from adjusterhub.dependencies import get_current_user, get_support_service
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.common import Pagination
from adjusterhub.schemas.enums import Priority, TicketStatus
from adjusterhub.schemas.support import (
    Ticket,
    TicketCreate,
    TicketDetail,
    TicketList,
    TicketMessage,
    TicketReply,
    TicketSummary,
    TicketUpdate,
)
from adjusterhub.services.support_service import SupportService

logger = get_logger(__name__)
router = APIRouter()


@router.get("", response_model=TicketList)
def list_tickets(
    status: Optional[TicketStatus] = None,
    priority: Optional[Priority] = None,
    category: Optional[str] = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
) -> TicketList:
    """Most urgent first, then newest. ``stats`` counts all of the caller's tickets by status."""
    items, total, stats = service.list_tickets(
        user,
        status=status.value if status else None,
        priority=priority.value if priority else None,
        category=category,
        page=page,
        limit=limit,
    )
    return TicketList(
        tickets=[TicketSummary.model_validate(t) for t in items],
        pagination=Pagination.build(page, limit, total),
        stats=stats,
    )


@router.post("", response_model=Ticket, status_code=201)
def create_ticket(
    payload: TicketCreate,
    user: UserModel = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
) -> Ticket:
    ticket = service.create_ticket(user, payload)
    logger.info("support_ticket_created", ticket_number=ticket.ticket_number, priority=ticket.priority)
    return Ticket.model_validate(ticket)


@router.get("/{ticket_id}", response_model=TicketDetail)
def get_ticket(
    ticket_id: int,
    user: UserModel = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
) -> TicketDetail:
    return TicketDetail.model_validate(service.get_ticket(user, ticket_id))


@router.post("/{ticket_id}", response_model=TicketMessage, status_code=201)
def add_ticket_message(
    ticket_id: int,
    payload: TicketReply,
    user: UserModel = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
) -> TicketMessage:
    """Reply on a ticket. Closed tickets refuse replies; resolved ones reopen."""
    return TicketMessage.model_validate(service.add_message(user, ticket_id, payload.content))


@router.put("/{ticket_id}", response_model=Ticket)
def update_ticket(
    ticket_id: int,
    payload: TicketUpdate,
    user: UserModel = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
) -> Ticket:
    """Users may close a ticket or change its priority."""
    ticket = service.update_ticket(user, ticket_id, payload)
    logger.info("support_ticket_updated", ticket_number=ticket.ticket_number, status=ticket.status)
    return Ticket.model_validate(ticket)
