"""Tests for claim lifecycle and access rules."""

from datetime import datetime
from types import SimpleNamespace

import pytest

from adjusterhub.domain import claims as rules
from adjusterhub.schemas.enums import ClaimStatus, Role


def user(role: Role, id: int = 1, firm_id=None):
    return SimpleNamespace(id=id, role=role.value, firm_id=firm_id)


def claim(status: ClaimStatus = ClaimStatus.AVAILABLE, firm_id: int = 10, adjuster_id=None):
    return SimpleNamespace(status=status.value, firm_id=firm_id, adjuster_id=adjuster_id)


class TestTransitions:
    @pytest.mark.parametrize(
        "current, target",
        [
            (ClaimStatus.AVAILABLE, ClaimStatus.ASSIGNED),
            (ClaimStatus.AVAILABLE, ClaimStatus.CANCELLED),
            (ClaimStatus.ASSIGNED, ClaimStatus.IN_PROGRESS),
            (ClaimStatus.ASSIGNED, ClaimStatus.AVAILABLE),
            (ClaimStatus.IN_PROGRESS, ClaimStatus.COMPLETED),
            (ClaimStatus.IN_PROGRESS, ClaimStatus.CANCELLED),
            (ClaimStatus.COMPLETED, ClaimStatus.COMPLETED),
        ],
    )
    def test_allowed(self, current, target):
        rules.check_transition(current, target)

    @pytest.mark.parametrize(
        "current, target",
        [
            (ClaimStatus.AVAILABLE, ClaimStatus.COMPLETED),
            (ClaimStatus.IN_PROGRESS, ClaimStatus.AVAILABLE),
            (ClaimStatus.COMPLETED, ClaimStatus.IN_PROGRESS),
            (ClaimStatus.CANCELLED, ClaimStatus.AVAILABLE),
        ],
    )
    def test_rejected(self, current, target):
        with pytest.raises(rules.InvalidTransition) as info:
            rules.check_transition(current, target)
        assert str(info.value) == f"Cannot change claim status from {current.value} to {target.value}"


class TestAccess:
    def test_anyone_can_view_available(self):
        assert rules.can_view(user(Role.ADJUSTER), claim())

    def test_other_adjuster_cannot_view_assigned(self):
        assigned = claim(ClaimStatus.ASSIGNED, adjuster_id=2)
        assert not rules.can_view(user(Role.ADJUSTER, id=1), assigned)
        assert rules.can_view(user(Role.ADJUSTER, id=2), assigned)

    def test_firm_admin_scope(self):
        assigned = claim(ClaimStatus.ASSIGNED, firm_id=10, adjuster_id=2)
        assert rules.can_view(user(Role.FIRM_ADMIN, firm_id=10), assigned)
        assert not rules.can_view(user(Role.FIRM_ADMIN, firm_id=11), assigned)
        assert not rules.is_firm_admin_of(user(Role.FIRM_ADMIN, firm_id=None), None)

    def test_admin_sees_everything(self):
        assert rules.can_view(user(Role.ADMIN), claim(ClaimStatus.COMPLETED, adjuster_id=5))

    def test_only_admins_and_firm_admins_create_and_delete(self):
        assert rules.can_create(user(Role.FIRM_ADMIN, firm_id=10))
        assert rules.can_create(user(Role.ADMIN))
        assert not rules.can_create(user(Role.ADJUSTER))
        assert not rules.can_delete(user(Role.ADJUSTER, id=2), claim(adjuster_id=2))
        assert rules.can_delete(user(Role.FIRM_ADMIN, firm_id=10), claim(firm_id=10))

    def test_assigned_adjuster_can_update(self):
        assert rules.can_update(user(Role.ADJUSTER, id=3), claim(ClaimStatus.ASSIGNED, adjuster_id=3))
        assert not rules.can_update(user(Role.ADJUSTER, id=4), claim(ClaimStatus.ASSIGNED, adjuster_id=3))


class TestHelpers:
    def test_claim_number(self):
        assert rules.next_claim_number(2026, 0) == "CLM-2026-0001"
        assert rules.next_claim_number(2026, 41) == "CLM-2026-0042"

    def test_completion_timestamp(self):
        now = datetime(2026, 5, 1, 12, 0)
        earlier = datetime(2026, 4, 1)
        assert rules.completion_timestamp(ClaimStatus.COMPLETED, now) == now
        assert rules.completion_timestamp(ClaimStatus.COMPLETED, now, earlier) == earlier
        assert rules.completion_timestamp(ClaimStatus.IN_PROGRESS, now) is None
