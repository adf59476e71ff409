"""Adjuster earnings: ledger listing with summary, manual entries, payouts."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from adjusterhub.database import utcnow
from adjusterhub.domain import claims as rules
from adjusterhub.domain.earnings import summarize_earnings
from adjusterhub.engines.ttl_cache import TTLCache
from adjusterhub.errors import AppError
from adjusterhub.models.earning import EarningModel
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.claim_repo import ClaimRepository
from adjusterhub.repositories.earning_repo import EarningRepository
from adjusterhub.schemas.earning import EarningCreate
from adjusterhub.schemas.enums import EarningStatus, NotificationType
from adjusterhub.security.sanitize import sanitize_text
from adjusterhub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class EarningService:
    def __init__(
        self,
        db: Session,
        earning_repo: EarningRepository,
        claim_repo: ClaimRepository,
        notification_service: NotificationService,
        cache: TTLCache,
    ):
        self.db = db
        self.earnings = earning_repo
        self.claims = claim_repo
        self.notifications = notification_service
        self.cache = cache

    def list_earnings(
        self,
        user: UserModel,
        *,
        status: Optional[str] = None,
        type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        claim_id: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[EarningModel], int, Dict[str, Any]]:
        """One page of the caller's earnings plus a summary over every match."""
        filters = dict(status=status, type=type, start_date=start_date, end_date=end_date, claim_id=claim_id)
        items, total = self.earnings.search(user.id, page=page, limit=limit, **filters)
        summary = summarize_earnings(self.earnings.all_matching(user.id, **filters), now=utcnow())
        return items, total, summary

    def create_earning(self, user: UserModel, payload: EarningCreate) -> EarningModel:
        if payload.claim_id is not None:
            claim = self.claims.get(payload.claim_id)
            # claims the caller is not assigned to are reported as missing
            if claim is None or claim.adjuster_id != user.id:
                raise AppError.not_found("Claim")

        earning = self.earnings.create(
            EarningModel(
                user_id=user.id,
                claim_id=payload.claim_id,
                amount=round(payload.amount, 2),
                type=payload.type.value,
                status=EarningStatus.PENDING.value,
                description=sanitize_text(payload.description) or None,
            )
        )
        self.notifications.notify(
            user.id,
            NotificationType.EARNING_ADDED,
            "Earning recorded",
            f"${earning.amount:,.2f} was added to your earnings.",
            {"earningId": earning.id},
        )
        self.db.commit()
        self._invalidate(user.id)
        return earning

    def update_status(self, actor: UserModel, earning_id: int, status: EarningStatus) -> EarningModel:
        earning = self.earnings.get(earning_id)
        if earning is None:
            raise AppError.not_found("Earning")
        firm_id = earning.claim.firm_id if earning.claim is not None else None
        if not (rules.is_admin(actor) or (firm_id is not None and rules.is_firm_admin_of(actor, firm_id))):
            raise AppError.authorization("Only admins or the paying firm can change earning status")

        previous = earning.status
        earning.status = status.value
        if status == EarningStatus.PAID:
            earning.paid_at = earning.paid_at or utcnow()
            if previous != EarningStatus.PAID.value:
                self.notifications.notify(
                    earning.user_id,
                    NotificationType.PAYMENT_RECEIVED,
                    "Payment received",
                    f"${earning.amount:,.2f} has been paid out.",
                    {"earningId": earning.id},
                )
        else:
            earning.paid_at = None

        self.earnings.update(earning)
        self.db.commit()
        self._invalidate(earning.user_id)
        logger.info("Earning %d moved %s -> %s by user %d", earning.id, previous, status.value, actor.id)
        return earning

    def _invalidate(self, user_id: int) -> None:
        self.cache.invalidate_by_tag(f"user:{user_id}")
        self.cache.invalidate_by_tag("analytics")
