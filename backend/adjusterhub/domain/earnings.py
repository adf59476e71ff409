"""Earnings aggregation.

Pure functions over earning rows (ORM objects or anything exposing
``amount``, ``status``, ``type`` and ``created_at``).
"""

from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List

from adjusterhub.schemas.enums import EarningStatus

MONTHLY_GOAL = 10_000.0


def month_key(moment: datetime) -> str:
    return moment.strftime("%Y-%m")


def last_n_month_keys(now: datetime, n: int = 12) -> List[str]:
    """Month keys from oldest to newest, ending with the month of ``now``."""
    keys = []
    year, month = now.year, now.month
    for _ in range(n):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(keys))


def summarize_earnings(earnings: Iterable[Any], now: datetime) -> Dict[str, Any]:
    """Totals plus status, type and 12-month breakdowns.

    Example:
        >>> summary = summarize_earnings(rows, now=datetime(2026, 3, 15))
        >>> summary["monthlyBreakdown"]["2026-03"]
        {'total': 1250.0, 'paid': 1000.0, 'pending': 250.0, 'count': 2}
    """
    rows = list(earnings)
    total = round(sum(e.amount for e in rows), 2)

    status_breakdown: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"count": 0, "total": 0.0})
    type_breakdown: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"count": 0, "total": 0.0})
    for e in rows:
        status_breakdown[e.status]["count"] += 1
        status_breakdown[e.status]["total"] = round(status_breakdown[e.status]["total"] + e.amount, 2)
        type_breakdown[e.type]["count"] += 1
        type_breakdown[e.type]["total"] = round(type_breakdown[e.type]["total"] + e.amount, 2)

    monthly = {key: {"total": 0.0, "paid": 0.0, "pending": 0.0, "count": 0} for key in last_n_month_keys(now)}
    for e in rows:
        bucket = monthly.get(month_key(e.created_at))
        if bucket is None:
            continue
        bucket["total"] = round(bucket["total"] + e.amount, 2)
        bucket["count"] += 1
        if e.status == EarningStatus.PAID.value:
            bucket["paid"] = round(bucket["paid"] + e.amount, 2)
        elif e.status == EarningStatus.PENDING.value:
            bucket["pending"] = round(bucket["pending"] + e.amount, 2)

    return {
        "totalEarnings": total,
        "totalCount": len(rows),
        "averageEarning": round(total / len(rows), 2) if rows else 0.0,
        "statusBreakdown": dict(status_breakdown),
        "typeBreakdown": dict(type_breakdown),
        "monthlyBreakdown": monthly,
    }


def goal_progress(monthly_total: float, goal: float = MONTHLY_GOAL) -> float:
    """Percentage of the monthly goal reached, capped at 100."""
    if goal <= 0:
        return 100.0
    return round(min(100.0, monthly_total / goal * 100), 1)


def month_label(key: str) -> str:
    """``"2026-03"`` -> ``"Mar 2026"``."""
    return datetime.strptime(key, "%Y-%m").strftime("%b %Y")


def month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def previous_month_start(moment: datetime) -> datetime:
    start = month_start(moment)
    if start.month == 1:
        return start.replace(year=start.year - 1, month=12)
    return start.replace(month=start.month - 1)


def period_start(now: datetime, period: str) -> datetime:
    """Start of the calendar month, quarter or year containing ``now``."""
    start = month_start(now)
    if period == "quarter":
        return start.replace(month=(start.month - 1) // 3 * 3 + 1)
    if period == "year":
        return start.replace(month=1)
    return start
