"""Tests for earnings aggregation."""

from datetime import datetime
from types import SimpleNamespace

from adjusterhub.domain.earnings import (
    goal_progress,
    last_n_month_keys,
    month_key,
    month_label,
    period_start,
    previous_month_start,
    summarize_earnings,
)

NOW = datetime(2026, 3, 15)


def earning(amount, status="PENDING", type="CLAIM_FEE", created_at=NOW):
    return SimpleNamespace(amount=amount, status=status, type=type, created_at=created_at)


class TestMonthKeys:
    def test_month_key(self):
        assert month_key(datetime(2026, 1, 31, 23, 59)) == "2026-01"

    def test_last_twelve_months_cross_year(self):
        keys = last_n_month_keys(NOW)
        assert len(keys) == 12
        assert keys[0] == "2025-04"
        assert keys[-1] == "2026-03"

    def test_month_label(self):
        assert month_label("2026-03") == "Mar 2026"

    def test_previous_month_crosses_year(self):
        assert previous_month_start(datetime(2026, 1, 20, 8, 30)) == datetime(2025, 12, 1)


class TestPeriodStart:
    def test_month(self):
        assert period_start(datetime(2026, 8, 19, 14, 5), "month") == datetime(2026, 8, 1)

    def test_quarter(self):
        assert period_start(datetime(2026, 8, 19), "quarter") == datetime(2026, 7, 1)
        assert period_start(datetime(2026, 3, 31), "quarter") == datetime(2026, 1, 1)

    def test_year(self):
        assert period_start(datetime(2026, 8, 19), "year") == datetime(2026, 1, 1)


class TestSummarize:
    def test_empty(self):
        summary = summarize_earnings([], now=NOW)
        assert summary["totalEarnings"] == 0
        assert summary["totalCount"] == 0
        assert summary["averageEarning"] == 0.0
        assert summary["statusBreakdown"] == {}
        assert len(summary["monthlyBreakdown"]) == 12

    def test_breakdowns(self):
        rows = [
            earning(1000.0, status="PAID"),
            earning(250.0),
            earning(80.5, type="MILEAGE", status="DISPUTED"),
            earning(400.0, status="PAID", created_at=datetime(2026, 1, 10)),
            earning(999.0, status="PAID", created_at=datetime(2024, 1, 1)),
        ]
        summary = summarize_earnings(rows, now=NOW)

        assert summary["totalEarnings"] == 2729.5
        assert summary["totalCount"] == 5
        assert summary["averageEarning"] == 545.9
        assert summary["statusBreakdown"]["PAID"] == {"count": 3, "total": 2399.0}
        assert summary["typeBreakdown"]["MILEAGE"] == {"count": 1, "total": 80.5}
        assert summary["monthlyBreakdown"]["2026-03"] == {
            "total": 1330.5, "paid": 1000.0, "pending": 250.0, "count": 3,
        }
        assert summary["monthlyBreakdown"]["2026-01"]["paid"] == 400.0
        assert "2024-01" not in summary["monthlyBreakdown"]


class TestGoalProgress:
    def test_percentage(self):
        assert goal_progress(2500) == 25.0

    def test_capped(self):
        assert goal_progress(25_000) == 100.0

    def test_zero_goal(self):
        assert goal_progress(10, goal=0) == 100.0
