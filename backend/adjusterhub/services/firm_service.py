"""Firm directory and adjuster-firm connections."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from adjusterhub.domain import claims as rules
from adjusterhub.engines.ttl_cache import CachePresets, TTLCache, cache_key
from adjusterhub.errors import AppError
from adjusterhub.models.firm import FirmConnectionModel, FirmModel
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.firm_repo import FirmConnectionRepository, FirmRepository
from adjusterhub.schemas.common import Pagination
from adjusterhub.schemas.enums import ConnectionStatus, NotificationType, Role
from adjusterhub.schemas.firm import Firm, FirmCreate
from adjusterhub.security.sanitize import sanitize_input, sanitize_text
from adjusterhub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class FirmService:
    def __init__(
        self,
        db: Session,
        firm_repo: FirmRepository,
        connection_repo: FirmConnectionRepository,
        notification_service: NotificationService,
        cache: TTLCache,
    ):
        self.db = db
        self.firms = firm_repo
        self.connections = connection_repo
        self.notifications = notification_service
        self.cache = cache

    def list_firms(
        self,
        *,
        search: Optional[str] = None,
        state: Optional[str] = None,
        active: Optional[bool] = True,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Serialized firm page with available-claim counts, cached under the ``firms`` tag."""
        search = sanitize_text(search) or None
        key = cache_key("firms", f"q={search}", f"state={state}", f"active={active}", page, limit)

        def fetch() -> Dict[str, Any]:
            items, total = self.firms.search(search=search, state=state, active=active, page=page, limit=limit)
            counts = self.firms.available_claim_counts([f.id for f in items])
            firms = [
                Firm.model_validate(f).model_copy(update={"available_claims": counts.get(f.id, 0)})
                for f in items
            ]
            return {
                "firms": [f.model_dump(mode="json", by_alias=True) for f in firms],
                "pagination": Pagination.build(page, limit, total).model_dump(by_alias=True),
            }

        return self.cache.get_or_set(key, fetch, **CachePresets.FIRMS)

    def create_firm(self, payload: FirmCreate) -> FirmModel:
        name = sanitize_text(payload.name)
        if not name:
            raise AppError.validation("Firm name is required")
        if self.firms.get_by_name(name) is not None:
            raise AppError.conflict("A firm with that name already exists")

        data = payload.model_dump()
        data.update(
            name=name,
            email=str(payload.email) if payload.email else None,
            description=sanitize_input(payload.description) or None,
            specialties=[s for s in (sanitize_text(x) for x in payload.specialties) if s],
        )
        for field in ("address", "city", "state", "website"):
            data[field] = sanitize_text(data.get(field)) or None
        firm = self.firms.create(FirmModel(**data))
        self.db.commit()
        self.cache.invalidate_by_tag("firms")
        logger.info("Firm %d created: %s", firm.id, firm.name)
        return firm

    # ── connections ──────────────────────────────────────────────────

    def list_connections(
        self, user: UserModel, *, status: Optional[str] = None, page: int = 1, limit: int = 20
    ) -> Tuple[List[FirmConnectionModel], int]:
        if user.role == Role.ADJUSTER.value:
            return self.connections.search(user_id=user.id, status=status, page=page, limit=limit)
        if user.role == Role.FIRM_ADMIN.value:
            return self.connections.search(firm_id=user.firm_id, status=status, page=page, limit=limit)
        return self.connections.search(status=status, page=page, limit=limit)

    def request_connection(self, user: UserModel, firm_id: int, notes: Optional[str] = None) -> FirmConnectionModel:
        firm = self.firms.get(firm_id)
        if firm is None or not firm.is_active:
            raise AppError.not_found("Firm")
        if self.connections.get_for(user.id, firm_id) is not None:
            raise AppError.conflict("Connection request already exists")

        connection = self.connections.create(
            FirmConnectionModel(
                user_id=user.id,
                firm_id=firm_id,
                status=ConnectionStatus.PENDING.value,
                notes=sanitize_text(notes) or None,
            )
        )
        for admin in firm.admins:
            self.notifications.notify(
                admin.id,
                NotificationType.SYSTEM_UPDATE,
                "New connection request",
                f"{user.full_name} wants to work with {firm.name}.",
                {"connectionId": connection.id, "adjusterId": user.id},
            )
        self.db.commit()
        return connection

    def decide_connection(self, actor: UserModel, connection_id: int, status: ConnectionStatus) -> FirmConnectionModel:
        connection = self.connections.get(connection_id)
        if connection is None:
            raise AppError.not_found("Connection")
        if not (rules.is_admin(actor) or rules.is_firm_admin_of(actor, connection.firm_id)):
            raise AppError.authorization("Only the firm's admins can review connection requests")
        if status == ConnectionStatus.PENDING:
            raise AppError.validation("Status must be APPROVED or REJECTED")

        connection.status = status.value
        self.connections.update(connection)
        self.notifications.notify(
            connection.user_id,
            NotificationType.SYSTEM_UPDATE,
            f"Connection {status.value.lower()}",
            f"{connection.firm.name} has {status.value.lower()} your connection request.",
            {"firmId": connection.firm_id},
        )
        self.db.commit()
        logger.info("Connection %d set to %s by user %d", connection.id, status.value, actor.id)
        return connection
