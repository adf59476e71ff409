"""Firm directory and adjuster-firm connection requests."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from adjusterhub.dependencies import get_current_user, get_firm_service, require_roles
from adjusterhub.engines.ttl_cache import CachePresets, cache_headers
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.common import Pagination
from adjusterhub.schemas.enums import ConnectionStatus, Role
from adjusterhub.schemas.firm import (
    ConnectionDecision,
    ConnectionRequest,
    Firm,
    FirmConnection,
    FirmConnectionList,
    FirmCreate,
)
from adjusterhub.services.firm_service import FirmService

logger = get_logger(__name__)
router = APIRouter()


@router.get("")
def list_firms(
    search: Optional[str] = Query(default=None, max_length=200),
    state: Optional[str] = Query(default=None, max_length=50),
    active: Optional[bool] = True,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    service: FirmService = Depends(get_firm_service),
) -> JSONResponse:
    """Firm directory page with ``availableClaims`` per firm.

    Served from the shared cache; the body is already camelCase JSON.
    """
    data = service.list_firms(search=search, state=state, active=active, page=page, limit=limit)
    return JSONResponse(content=data, headers=cache_headers(int(CachePresets.FIRMS["ttl"]), private=True))


@router.post("", response_model=Firm, status_code=201)
def create_firm(
    payload: FirmCreate,
    user: UserModel = Depends(require_roles(Role.ADMIN)),
    service: FirmService = Depends(get_firm_service),
) -> Firm:
    firm = service.create_firm(payload)
    logger.info("firm_created", firm_id=firm.id, created_by=user.id)
    return Firm.model_validate(firm)


@router.get("/connections", response_model=FirmConnectionList)
def list_connections(
    status: Optional[ConnectionStatus] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    service: FirmService = Depends(get_firm_service),
) -> FirmConnectionList:
    """Adjusters see their own requests, firm admins their firm's, admins all."""
    items, total = service.list_connections(
        user, status=status.value if status else None, page=page, limit=limit
    )
    return FirmConnectionList(
        connections=[FirmConnection.model_validate(c) for c in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.patch("/connections/{connection_id}", response_model=FirmConnection)
def decide_connection(
    connection_id: int,
    payload: ConnectionDecision,
    user: UserModel = Depends(get_current_user),
    service: FirmService = Depends(get_firm_service),
) -> FirmConnection:
    connection = service.decide_connection(user, connection_id, payload.status)
    logger.info("connection_decided", connection_id=connection.id, status=connection.status)
    return FirmConnection.model_validate(connection)


@router.post("/{firm_id}/connections", response_model=FirmConnection, status_code=201)
def request_connection(
    firm_id: int,
    payload: Optional[ConnectionRequest] = Body(default=None),
    user: UserModel = Depends(require_roles(Role.ADJUSTER)),
    service: FirmService = Depends(get_firm_service),
) -> FirmConnection:
    connection = service.request_connection(user, firm_id, payload.notes if payload else None)
    logger.info("connection_requested", connection_id=connection.id, firm_id=firm_id)
    return FirmConnection.model_validate(connection)
