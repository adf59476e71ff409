"""Claim endpoints: browse, create, update and assign insurance claims.

Visibility and edit rules live in ``adjusterhub.domain.claims``; these
handlers only translate HTTP to ``ClaimService`` calls.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from adjusterhub.dependencies import get_claim_service, get_current_user
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.claim import Claim, ClaimAssign, ClaimCreate, ClaimDetail, ClaimList, ClaimUpdate
from adjusterhub.schemas.common import Pagination
from adjusterhub.schemas.enums import ClaimStatus, ClaimType, Priority
from adjusterhub.services.claim_service import ClaimService

logger = get_logger(__name__)
router = APIRouter()


@router.get("", response_model=ClaimList)
def list_claims(
    status: Optional[ClaimStatus] = None,
    type: Optional[ClaimType] = None,
    priority: Optional[Priority] = None,
    search: Optional[str] = Query(default=None, max_length=200),
    firm_id: Optional[int] = Query(default=None, alias="firmId"),
    assigned: Optional[bool] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    service: ClaimService = Depends(get_claim_service),
) -> ClaimList:
    """List the claims visible to the caller.

    Ordered by priority (most urgent first), then deadline, then newest.
    """
    logger.info(
        "claims_list_requested",
        status=status,
        type=type,
        priority=priority,
        firm_id=firm_id,
        page=page,
        limit=limit,
    )
    items, total = service.list_claims(
        user,
        status=status.value if status else None,
        type=type.value if type else None,
        priority=priority.value if priority else None,
        search=search,
        firm_id=firm_id,
        assigned=assigned,
        page=page,
        limit=limit,
    )
    return ClaimList(
        claims=[Claim.model_validate(c) for c in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=ClaimDetail, status_code=201)
def create_claim(
    payload: ClaimCreate,
    user: UserModel = Depends(get_current_user),
    service: ClaimService = Depends(get_claim_service),
) -> ClaimDetail:
    claim = service.create_claim(user, payload)
    logger.info("claim_created", claim_id=claim.id, claim_number=claim.claim_number)
    return ClaimDetail.model_validate(claim)


@router.get("/{claim_id}", response_model=ClaimDetail)
def get_claim(
    claim_id: int,
    user: UserModel = Depends(get_current_user),
    service: ClaimService = Depends(get_claim_service),
) -> ClaimDetail:
    return ClaimDetail.model_validate(service.get_claim(user, claim_id))


@router.patch("/{claim_id}", response_model=ClaimDetail)
def update_claim(
    claim_id: int,
    payload: ClaimUpdate,
    user: UserModel = Depends(get_current_user),
    service: ClaimService = Depends(get_claim_service),
) -> ClaimDetail:
    claim = service.update_claim(user, claim_id, payload)
    logger.info("claim_updated", claim_id=claim.id, status=claim.status)
    return ClaimDetail.model_validate(claim)


@router.delete("/{claim_id}", status_code=204)
def delete_claim(
    claim_id: int,
    user: UserModel = Depends(get_current_user),
    service: ClaimService = Depends(get_claim_service),
) -> Response:
    service.delete_claim(user, claim_id)
    logger.info("claim_deleted", claim_id=claim_id)
    return Response(status_code=204)


@router.post("/{claim_id}/assign", response_model=ClaimDetail)
def assign_claim(
    claim_id: int,
    payload: Optional[ClaimAssign] = Body(default=None),
    user: UserModel = Depends(get_current_user),
    service: ClaimService = Depends(get_claim_service),
) -> ClaimDetail:
    """Self-assign (no body) or, for firm admins, assign to ``adjusterId``."""
    adjuster_id = payload.adjuster_id if payload else None
    claim = service.assign_claim(user, claim_id, adjuster_id)
    logger.info("claim_assigned", claim_id=claim.id, adjuster_id=claim.adjuster_id)
    return ClaimDetail.model_validate(claim)


@router.delete("/{claim_id}/assign", response_model=ClaimDetail)
def unassign_claim(
    claim_id: int,
    user: UserModel = Depends(get_current_user),
    service: ClaimService = Depends(get_claim_service),
) -> ClaimDetail:
    claim = service.unassign_claim(user, claim_id)
    logger.info("claim_unassigned", claim_id=claim.id)
    return ClaimDetail.model_validate(claim)
