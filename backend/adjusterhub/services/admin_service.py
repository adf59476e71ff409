"""Platform-wide statistics for administrators."""

from datetime import datetime, timedelta
from typing import Any, Dict, List

from adjusterhub.database import utcnow
from adjusterhub.domain.earnings import last_n_month_keys, month_key, month_start, previous_month_start
from adjusterhub.engines.ttl_cache import CachePresets, TTLCache
from adjusterhub.repositories.claim_repo import ClaimRepository
from adjusterhub.repositories.document_repo import DocumentRepository
from adjusterhub.repositories.earning_repo import EarningRepository
from adjusterhub.repositories.firm_repo import FirmRepository
from adjusterhub.repositories.user_repo import UserRepository
from adjusterhub.schemas.enums import ClaimStatus, EarningStatus, Role

STATS_KEY = "admin:stats"
USER_GROWTH_MONTHS = 12
EARNINGS_MONTHS = 6
TOP_ADJUSTERS = 10
RECENT_LOGINS = 10
LOGIN_WINDOW = timedelta(days=30)


class AdminService:
    def __init__(
        self,
        user_repo: UserRepository,
        firm_repo: FirmRepository,
        claim_repo: ClaimRepository,
        earning_repo: EarningRepository,
        document_repo: DocumentRepository,
        cache: TTLCache,
    ):
        self.users = user_repo
        self.firms = firm_repo
        self.claims = claim_repo
        self.earnings = earning_repo
        self.documents = document_repo
        self.cache = cache

    def system_stats(self) -> Dict[str, Any]:
        return self.cache.get_or_set(STATS_KEY, self._compute, **CachePresets.ANALYTICS)

    def _compute(self) -> Dict[str, Any]:
        now = utcnow()
        this_month = month_start(now)
        last_month = previous_month_start(now)

        growth_keys = last_n_month_keys(now, USER_GROWTH_MONTHS)
        signups = self.users.signup_dates_since(datetime.strptime(growth_keys[0], "%Y-%m"))
        signups_by_month = {key: 0 for key in growth_keys}
        for created_at in signups:
            key = month_key(created_at)
            if key in signups_by_month:
                signups_by_month[key] += 1
        new_this_month = sum(1 for c in signups if c >= this_month)
        new_last_month = sum(1 for c in signups if last_month <= c < this_month)

        by_status = self.claims.status_counts()
        total_claims = sum(by_status.values())
        active_claims = by_status.get(ClaimStatus.ASSIGNED.value, 0) + by_status.get(ClaimStatus.IN_PROGRESS.value, 0)
        completed_claims = by_status.get(ClaimStatus.COMPLETED.value, 0)

        earnings = self.earnings.created_since()
        earnings_keys = last_n_month_keys(now, EARNINGS_MONTHS)
        earnings_by_month = {key: {"month": key, "total": 0.0, "count": 0} for key in earnings_keys}
        for e in earnings:
            bucket = earnings_by_month.get(month_key(e.created_at))
            if bucket is not None:
                bucket["total"] = round(bucket["total"] + e.amount, 2)
                bucket["count"] += 1

        return {
            "overview": {
                "totalUsers": self.users.count(),
                "activeUsers": self.users.count_active(),
                "newUsersThisMonth": new_this_month,
                "userGrowthRate": (
                    round((new_this_month - new_last_month) / new_last_month * 100, 2) if new_last_month else 0.0
                ),
                "totalClaims": total_claims,
                "activeClaims": active_claims,
                "completedClaims": completed_claims,
                "claimCompletionRate": round(completed_claims / total_claims * 100, 1) if total_claims else 0.0,
                "totalFirms": self.firms.count(),
                "activeFirms": self.firms.count_active(),
                "totalEarnings": round(sum(e.amount for e in earnings), 2),
                "monthlyEarnings": round(sum(e.amount for e in earnings if e.created_at >= this_month), 2),
                "pendingEarnings": round(
                    sum(e.amount for e in earnings if e.status == EarningStatus.PENDING.value), 2
                ),
                "totalDocuments": self.documents.count(),
            },
            "growth": {
                "userGrowth": [{"month": key, "users": signups_by_month[key]} for key in growth_keys],
                "earningsByMonth": [earnings_by_month[key] for key in earnings_keys],
            },
            "performance": {
                "claimsByType": [
                    {
                        "type": type_,
                        "count": count,
                        "averageEstimatedValue": round(avg, 2) if avg is not None else None,
                    }
                    for type_, count, avg in self.claims.type_stats()
                ],
                "topAdjusters": self._top_adjusters(),
            },
            "activity": {
                "recentLogins": [
                    {
                        "id": u.id,
                        "firstName": u.first_name,
                        "lastName": u.last_name,
                        "role": u.role,
                        "lastLoginAt": u.last_login_at.isoformat(),
                    }
                    for u in self.users.recent_logins(now - LOGIN_WINDOW, limit=RECENT_LOGINS)
                ],
            },
            "lastUpdated": now.isoformat(),
        }

    def _top_adjusters(self) -> List[Dict[str, Any]]:
        completed = self.claims.completed_counts_by_adjuster()
        totals = self.earnings.totals_by_user()
        ranked = sorted(
            (
                {
                    "id": u.id,
                    "name": u.full_name,
                    "completedClaims": completed.get(u.id, 0),
                    "totalEarnings": totals.get(u.id, 0.0),
                }
                for u in self.users.active_with_role(Role.ADJUSTER.value)
            ),
            key=lambda row: (-row["totalEarnings"], -row["completedClaims"], row["id"]),
        )
        return ranked[:TOP_ADJUSTERS]
