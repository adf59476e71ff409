"""Dashboard statistics and personal analytics, cached per user."""

from datetime import datetime
from typing import Any, Dict, List

from adjusterhub.database import utcnow
from adjusterhub.domain.earnings import (
    MONTHLY_GOAL,
    goal_progress,
    last_n_month_keys,
    month_key,
    month_label,
    month_start,
    period_start,
)
from adjusterhub.engines.ttl_cache import CachePresets, TTLCache, cache_key
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.claim_repo import ClaimRepository
from adjusterhub.repositories.earning_repo import EarningRepository
from adjusterhub.repositories.message_repo import MessageRepository
from adjusterhub.repositories.notification_repo import NotificationRepository
from adjusterhub.schemas.claim import Claim
from adjusterhub.schemas.earning import Earning
from adjusterhub.schemas.enums import ClaimStatus, EarningStatus, Role

STATS_TTL = 60
RECENT_LIMIT = 5


class DashboardService:
    def __init__(
        self,
        claim_repo: ClaimRepository,
        earning_repo: EarningRepository,
        notification_repo: NotificationRepository,
        message_repo: MessageRepository,
        cache: TTLCache,
    ):
        self.claims = claim_repo
        self.earnings = earning_repo
        self.notifications = notification_repo
        self.messages = message_repo
        self.cache = cache

    def stats(self, user: UserModel) -> Dict[str, Any]:
        return self.cache.get_or_set(
            cache_key("dashboard", user.id),
            lambda: self._compute(user),
            ttl=STATS_TTL,
            tags=(f"user:{user.id}", "analytics"),
        )

    def _compute(self, user: UserModel) -> Dict[str, Any]:
        scope: Dict[str, Any] = {}
        if user.role == Role.ADJUSTER.value:
            scope["adjuster_id"] = user.id
        elif user.role == Role.FIRM_ADMIN.value:
            scope["firm_id"] = user.firm_id
        # a firm admin not yet linked to a firm sees no claims
        sees_claims = not (user.role == Role.FIRM_ADMIN.value and user.firm_id is None)

        by_status = self.claims.status_counts(**scope) if sees_claims else {}
        total = sum(by_status.values())
        active = by_status.get(ClaimStatus.ASSIGNED.value, 0) + by_status.get(ClaimStatus.IN_PROGRESS.value, 0)
        completed = by_status.get(ClaimStatus.COMPLETED.value, 0)

        now = utcnow()
        this_month = month_key(now)
        earnings = self.earnings.for_user(user.id)
        monthly = round(sum(e.amount for e in earnings if month_key(e.created_at) == this_month), 2)
        pending = round(sum(e.amount for e in earnings if e.status == EarningStatus.PENDING.value), 2)

        return {
            "totalClaims": total,
            "activeClaims": active,
            "completedClaims": completed,
            "completionRate": round(completed / total * 100, 1) if total else 0.0,
            "totalEarnings": round(sum(e.amount for e in earnings), 2),
            "monthlyEarnings": monthly,
            "pendingEarnings": pending,
            "unreadNotifications": self.notifications.unread_count(user.id),
            "unreadMessages": self.messages.unread_count(user.id),
            "recentClaims": [
                Claim.model_validate(c).model_dump(mode="json", by_alias=True)
                for c in (self.claims.recent(limit=RECENT_LIMIT, **scope) if sees_claims else [])
            ],
            "recentEarnings": [
                Earning.model_validate(e).model_dump(mode="json", by_alias=True)
                for e in earnings[:RECENT_LIMIT]
            ],
            "monthlyGoal": MONTHLY_GOAL,
            "goalProgress": goal_progress(monthly),
        }

    def analytics(self, user: UserModel, period: str = "month", months: int = 12) -> Dict[str, Any]:
        """Personal performance over ``months`` months, cached per user and window."""
        return self.cache.get_or_set(
            cache_key("analytics", user.id, period, months),
            lambda: self._compute_analytics(user, period, months),
            ttl=CachePresets.ANALYTICS["ttl"],
            tags=(f"user:{user.id}", "analytics"),
        )

    def _compute_analytics(self, user: UserModel, period: str, months: int) -> Dict[str, Any]:
        now = utcnow()
        this_month = month_key(now)
        since_period = period_start(now, period)

        # only paid-out earnings count as earned
        earnings = self.earnings.for_user(user.id)
        paid = [e for e in earnings if e.status == EarningStatus.PAID.value]
        by_status = self.claims.status_counts(adjuster_id=user.id)
        total = sum(by_status.values())
        active = by_status.get(ClaimStatus.ASSIGNED.value, 0) + by_status.get(ClaimStatus.IN_PROGRESS.value, 0)
        completed = self.claims.completed(adjuster_id=user.id)
        monthly_earned = round(sum(e.amount for e in paid if month_key(e.created_at) == this_month), 2)

        keys = last_n_month_keys(now, months)
        earned_by_month: Dict[str, float] = {key: 0.0 for key in keys}
        completed_by_month: Dict[str, int] = {key: 0 for key in keys}
        for e in paid:
            key = month_key(e.created_at)
            if key in earned_by_month:
                earned_by_month[key] = round(earned_by_month[key] + e.amount, 2)
        for c in completed:
            key = month_key(c.completed_at) if c.completed_at else None
            if key in completed_by_month:
                completed_by_month[key] += 1

        return {
            "period": period,
            "overview": {
                "totalEarnings": round(sum(e.amount for e in paid), 2),
                "monthlyEarnings": monthly_earned,
                "periodEarnings": round(sum(e.amount for e in paid if e.created_at >= since_period), 2),
                "activeClaims": active,
                "totalClaims": total,
                "completedThisMonth": _completed_since(completed, month_start(now)),
                "completedThisPeriod": _completed_since(completed, since_period),
                "monthlyGoal": MONTHLY_GOAL,
                "goalProgress": goal_progress(monthly_earned),
            },
            "charts": {
                "monthlyEarnings": [
                    {"month": month_label(key), "earnings": earned_by_month[key], "claims": completed_by_month[key]}
                    for key in keys
                ],
                "claimsByType": [
                    {"type": type_, "count": count} for type_, count, _ in self.claims.type_stats(adjuster_id=user.id)
                ],
                "claimsByStatus": [{"status": status, "count": count} for status, count in sorted(by_status.items())],
            },
            "recentActivity": {
                "claims": [
                    {
                        "id": c.id,
                        "claimNumber": c.claim_number,
                        "title": c.title,
                        "completedAt": c.completed_at.isoformat() if c.completed_at else None,
                        "finalValue": c.final_value,
                    }
                    for c in completed[:RECENT_LIMIT]
                ],
                "earnings": [
                    Earning.model_validate(e).model_dump(mode="json", by_alias=True)
                    for e in earnings[:RECENT_LIMIT]
                ],
            },
            "performance": {
                "completionRate": round(len(completed) / total * 100, 1) if total else 0.0,
            },
        }


def _completed_since(claims: List[Any], since: datetime) -> int:
    return sum(1 for c in claims if c.completed_at is not None and c.completed_at >= since)
