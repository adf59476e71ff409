"""Claim lifecycle: listing, creation, updates, deletion and assignment.

Access and transition rules live in ``adjusterhub.domain.claims``; this
service applies them, persists the result, fans out notifications and
invalidates cached aggregates.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from adjusterhub.database import utcnow
from adjusterhub.domain import claims as rules
from adjusterhub.engines.ttl_cache import TTLCache
from adjusterhub.errors import AppError
from adjusterhub.models.claim import ClaimModel
from adjusterhub.models.earning import EarningModel
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.claim_repo import ClaimRepository
from adjusterhub.repositories.earning_repo import EarningRepository
from adjusterhub.repositories.firm_repo import FirmConnectionRepository, FirmRepository
from adjusterhub.repositories.user_repo import UserRepository
from adjusterhub.schemas.claim import ClaimCreate, ClaimUpdate
from adjusterhub.schemas.enums import (
    PRIORITY_RANK,
    ClaimStatus,
    EarningStatus,
    EarningType,
    NotificationType,
    Priority,
    Role,
)
from adjusterhub.security.sanitize import sanitize_input, sanitize_text
from adjusterhub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

# Fields an assigned adjuster may change; everything else is firm-admin territory.
ADJUSTER_EDITABLE = frozenset({"status", "description", "final_value"})


class ClaimService:
    def __init__(
        self,
        db: Session,
        claim_repo: ClaimRepository,
        user_repo: UserRepository,
        firm_repo: FirmRepository,
        connection_repo: FirmConnectionRepository,
        earning_repo: EarningRepository,
        notification_service: NotificationService,
        cache: TTLCache,
    ):
        self.db = db
        self.claims = claim_repo
        self.users = user_repo
        self.firms = firm_repo
        self.connections = connection_repo
        self.earnings = earning_repo
        self.notifications = notification_service
        self.cache = cache

    # ── reads ────────────────────────────────────────────────────────

    def list_claims(
        self,
        user: UserModel,
        *,
        status: Optional[str] = None,
        type: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
        firm_id: Optional[int] = None,
        assigned: Optional[bool] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[ClaimModel], int]:
        """Page of claims the user may see.

        Adjusters get AVAILABLE claims plus their own; firm admins are pinned
        to their firm; admins see everything.
        """
        visible_to = None
        if user.role == Role.ADJUSTER.value:
            visible_to = user.id
        elif user.role == Role.FIRM_ADMIN.value:
            if user.firm_id is None or (firm_id is not None and firm_id != user.firm_id):
                return [], 0
            firm_id = user.firm_id
        return self.claims.search(
            status=status,
            type=type,
            priority=priority,
            search=sanitize_text(search) or None,
            firm_id=firm_id,
            assigned=assigned,
            visible_to_adjuster=visible_to,
            page=page,
            limit=limit,
        )

    def get_claim(self, user: UserModel, claim_id: int) -> ClaimModel:
        claim = self._get_or_404(claim_id)
        if not rules.can_view(user, claim):
            raise AppError.authorization("You do not have access to this claim")
        return claim

    # ── writes ───────────────────────────────────────────────────────

    def create_claim(self, user: UserModel, payload: ClaimCreate) -> ClaimModel:
        if not rules.can_create(user):
            raise AppError.authorization("Only firm admins can create claims")

        if user.role == Role.FIRM_ADMIN.value:
            if payload.firm_id is not None and payload.firm_id != user.firm_id:
                raise AppError.authorization("Firm admins can only create claims for their own firm")
            firm_id = user.firm_id
        else:
            if payload.firm_id is None:
                raise AppError.validation("firmId is required")
            firm_id = payload.firm_id
        if firm_id is None or self.firms.get(firm_id) is None:
            raise AppError.not_found("Firm")

        data = payload.model_dump(exclude={"firm_id"})
        data["title"] = sanitize_text(data["title"])
        data["description"] = sanitize_input(data.get("description")) or None
        for field in ("address", "city", "state"):
            data[field] = sanitize_text(data.get(field)) or None
        data["type"] = payload.type.value
        data["priority"] = payload.priority.value

        claim = self.claims.create(
            ClaimModel(
                **data,
                claim_number=self._next_claim_number(utcnow()),
                status=ClaimStatus.AVAILABLE.value,
                priority_rank=PRIORITY_RANK[payload.priority],
                firm_id=firm_id,
            )
        )
        self.db.commit()
        self._invalidate()
        logger.info("Claim %s created by user %d for firm %d", claim.claim_number, user.id, firm_id)
        return claim

    def update_claim(self, user: UserModel, claim_id: int, update: ClaimUpdate) -> ClaimModel:
        claim = self._get_or_404(claim_id)
        if not rules.can_update(user, claim):
            raise AppError.authorization("You cannot modify this claim")

        changes = update.model_dump(exclude_unset=True)
        privileged = rules.is_admin(user) or rules.is_firm_admin_of(user, claim.firm_id)
        if not privileged and set(changes) - ADJUSTER_EDITABLE:
            raise AppError.authorization("Adjusters can only update status, description and final value")

        previous = ClaimStatus(claim.status)
        target = changes.pop("status", None)
        if target is not None:
            try:
                rules.check_transition(previous, target)
            except rules.InvalidTransition as exc:
                raise AppError.validation(str(exc)) from exc
            if target == ClaimStatus.ASSIGNED and previous != ClaimStatus.ASSIGNED:
                raise AppError.validation("Use the assign endpoint to assign a claim")

        if "title" in changes:
            changes["title"] = sanitize_text(changes["title"])
        if "description" in changes:
            changes["description"] = sanitize_input(changes["description"]) or None
        if "priority" in changes:
            priority = Priority(changes["priority"])
            changes["priority"] = priority.value
            claim.priority_rank = PRIORITY_RANK[priority]
        for field, value in changes.items():
            setattr(claim, field, value)

        adjuster_id = claim.adjuster_id
        if target is not None and target != previous:
            if target == ClaimStatus.AVAILABLE:
                self._release(claim)
            else:
                claim.status = target.value
            claim.completed_at = rules.completion_timestamp(target, utcnow(), claim.completed_at)
            if adjuster_id is not None and adjuster_id != user.id:
                self.notifications.notify(
                    adjuster_id,
                    NotificationType.CLAIM_UPDATE,
                    "Claim status updated",
                    f"Claim {claim.claim_number} is now {target.value.replace('_', ' ').lower()}.",
                    {"claimId": claim.id, "status": target.value},
                )

        self.claims.update(claim)
        self.db.commit()
        self._invalidate(adjuster_id)
        return claim

    def delete_claim(self, user: UserModel, claim_id: int) -> None:
        claim = self._get_or_404(claim_id)
        if not rules.can_delete(user, claim):
            raise AppError.authorization("You cannot delete this claim")
        if ClaimStatus(claim.status) in rules.LOCKED_STATUSES:
            raise AppError.validation("Cannot delete active or completed claims")

        adjuster_id = claim.adjuster_id
        if adjuster_id is not None:
            self.earnings.delete_pending_for_claim(claim.id, adjuster_id)
            self.notifications.notify(
                adjuster_id,
                NotificationType.CLAIM_UPDATE,
                "Claim removed",
                f"Claim {claim.claim_number} was withdrawn by the firm.",
            )
        self.claims.delete(claim.id)
        self.db.commit()
        self._invalidate(adjuster_id)
        logger.info("Claim %d deleted by user %d", claim_id, user.id)

    # ── assignment ───────────────────────────────────────────────────

    def assign_claim(self, user: UserModel, claim_id: int, adjuster_id: Optional[int] = None) -> ClaimModel:
        """Assign an AVAILABLE claim to ``adjuster_id``, or to the caller when omitted."""
        claim = self._get_or_404(claim_id)
        if claim.status != ClaimStatus.AVAILABLE.value:
            raise AppError.validation("Claim is not available for assignment")

        target_id = adjuster_id or user.id
        if target_id == user.id:
            if user.role != Role.ADJUSTER.value:
                raise AppError.authorization("Only adjusters can self-assign claims")
            adjuster = user
        else:
            if not (rules.is_admin(user) or rules.is_firm_admin_of(user, claim.firm_id)):
                raise AppError.authorization("Only firm admins can assign claims to other adjusters")
            adjuster = self.users.get(target_id)
            if adjuster is None:
                raise AppError.not_found("Adjuster")

        if adjuster.role != Role.ADJUSTER.value or not adjuster.is_active:
            raise AppError.validation("Target user is not an active adjuster")
        if user.role == Role.FIRM_ADMIN.value and not self.connections.is_approved(adjuster.id, claim.firm_id):
            raise AppError.validation("Adjuster is not connected to this firm")

        claim.adjuster = adjuster
        claim.status = ClaimStatus.ASSIGNED.value
        self.claims.update(claim)

        self.notifications.notify(
            adjuster.id,
            NotificationType.CLAIM_ASSIGNED,
            "New claim assigned",
            f"You have been assigned claim {claim.claim_number}: {claim.title}",
            {"claimId": claim.id},
        )
        if claim.adjuster_fee:
            self.earnings.create(
                EarningModel(
                    user_id=adjuster.id,
                    claim_id=claim.id,
                    amount=claim.adjuster_fee,
                    type=EarningType.CLAIM_FEE.value,
                    status=EarningStatus.PENDING.value,
                    description=f"Adjuster fee for claim {claim.claim_number}",
                )
            )
        self.db.commit()
        self._invalidate(adjuster.id)
        logger.info("Claim %d assigned to adjuster %d by user %d", claim.id, adjuster.id, user.id)
        return claim

    def unassign_claim(self, user: UserModel, claim_id: int) -> ClaimModel:
        claim = self._get_or_404(claim_id)
        if claim.adjuster_id is None:
            raise AppError.validation("Claim is not assigned")
        if ClaimStatus(claim.status) in rules.LOCKED_STATUSES:
            raise AppError.validation("Cannot unassign a claim that is in progress or completed")
        if not rules.can_unassign(user, claim):
            raise AppError.authorization("You cannot unassign this claim")

        adjuster_id = claim.adjuster_id
        self._release(claim)
        if adjuster_id != user.id:
            self.notifications.notify(
                adjuster_id,
                NotificationType.CLAIM_UPDATE,
                "Claim unassigned",
                f"You have been removed from claim {claim.claim_number}.",
                {"claimId": claim.id},
            )
        self.claims.update(claim)
        self.db.commit()
        self._invalidate(adjuster_id)
        return claim

    # ── helpers ──────────────────────────────────────────────────────

    def _get_or_404(self, claim_id: int) -> ClaimModel:
        claim = self.claims.get(claim_id)
        if claim is None:
            raise AppError.not_found("Claim")
        return claim

    def _release(self, claim: ClaimModel) -> None:
        """Return a claim to the pool and drop the adjuster's unpaid fee."""
        if claim.adjuster_id is not None:
            self.earnings.delete_pending_for_claim(claim.id, claim.adjuster_id)
        claim.adjuster = None
        claim.status = ClaimStatus.AVAILABLE.value

    def _next_claim_number(self, now: datetime) -> str:
        start = datetime(now.year, 1, 1)
        existing = self.claims.count_created_between(start, datetime(now.year + 1, 1, 1))
        number = rules.next_claim_number(now.year, existing)
        # deletions can leave gaps that make the count collide
        while self.claims.get_by_number(number) is not None:
            existing += 1
            number = rules.next_claim_number(now.year, existing)
        return number

    def _invalidate(self, adjuster_id: Optional[int] = None) -> None:
        self.cache.invalidate_by_tag("claims")
        self.cache.invalidate_by_tag("analytics")
        self.cache.invalidate_by_tag("firms")
        if adjuster_id is not None:
            self.cache.invalidate_by_tag(f"user:{adjuster_id}")
