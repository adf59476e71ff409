"""Claim lifecycle and access rules.

Who may see or change a claim, and which status transitions are legal.
All functions take plain ORM objects (or anything with the same attributes)
and never touch the database.

Usage:
    from adjusterhub.domain.claims import can_view, check_transition

    if not can_view(user, claim):
        raise AppError.authorization()
    check_transition(ClaimStatus(claim.status), ClaimStatus.IN_PROGRESS)
"""

from datetime import datetime
from typing import Any, Dict, FrozenSet

from adjusterhub.schemas.enums import ClaimStatus, Role

ALLOWED_TRANSITIONS: Dict[ClaimStatus, FrozenSet[ClaimStatus]] = {
    ClaimStatus.AVAILABLE: frozenset({ClaimStatus.ASSIGNED, ClaimStatus.CANCELLED}),
    ClaimStatus.ASSIGNED: frozenset(
        {ClaimStatus.IN_PROGRESS, ClaimStatus.AVAILABLE, ClaimStatus.CANCELLED}
    ),
    ClaimStatus.IN_PROGRESS: frozenset({ClaimStatus.COMPLETED, ClaimStatus.CANCELLED}),
    ClaimStatus.COMPLETED: frozenset(),
    ClaimStatus.CANCELLED: frozenset(),
}

LOCKED_STATUSES = frozenset({ClaimStatus.IN_PROGRESS, ClaimStatus.COMPLETED})


class InvalidTransition(ValueError):
    def __init__(self, current: ClaimStatus, target: ClaimStatus):
        super().__init__(f"Cannot change claim status from {current.value} to {target.value}")
        self.current = current
        self.target = target


def check_transition(current: ClaimStatus, target: ClaimStatus) -> None:
    """Raise InvalidTransition unless ``current -> target`` is allowed.

    A no-op transition (same status) is always allowed.
    """
    if current == target:
        return
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current, target)


def is_admin(user: Any) -> bool:
    return user.role == Role.ADMIN.value


def is_firm_admin_of(user: Any, firm_id: Any) -> bool:
    return (
        user.role == Role.FIRM_ADMIN.value
        and user.firm_id is not None
        and user.firm_id == firm_id
    )


def is_assigned_adjuster(user: Any, claim: Any) -> bool:
    return claim.adjuster_id is not None and claim.adjuster_id == user.id


def can_create(user: Any) -> bool:
    return user.role in (Role.FIRM_ADMIN.value, Role.ADMIN.value)


def can_view(user: Any, claim: Any) -> bool:
    return (
        is_admin(user)
        or is_assigned_adjuster(user, claim)
        or is_firm_admin_of(user, claim.firm_id)
        or claim.status == ClaimStatus.AVAILABLE.value
    )


def can_update(user: Any, claim: Any) -> bool:
    return is_admin(user) or is_assigned_adjuster(user, claim) or is_firm_admin_of(user, claim.firm_id)


def can_delete(user: Any, claim: Any) -> bool:
    return is_admin(user) or is_firm_admin_of(user, claim.firm_id)


def can_unassign(user: Any, claim: Any) -> bool:
    return can_update(user, claim)


def next_claim_number(year: int, existing_this_year: int) -> str:
    """``CLM-2026-0001`` style sequential claim number."""
    return f"CLM-{year}-{existing_this_year + 1:04d}"


def completion_timestamp(target: ClaimStatus, now: datetime, current_value: Any = None) -> Any:
    """Value for ``completed_at`` after moving to ``target``."""
    if target == ClaimStatus.COMPLETED:
        return current_value or now
    return current_value
