"""Administration: platform statistics, user management, security audit trail and cache control.

Every route requires the ADMIN role.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from adjusterhub.dependencies import get_admin_service, get_container, get_db, get_user_service, require_roles
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.security_event_repo import SecurityEventRepository
from adjusterhub.schemas.common import Pagination
from adjusterhub.schemas.enums import Role, SecurityEventType
from adjusterhub.schemas.security_event import SecurityEvent, SecurityEventList
from adjusterhub.schemas.user import AdminUserUpdate, UserList, UserProfile
from adjusterhub.services.admin_service import AdminService
from adjusterhub.services.user_service import UserService

logger = get_logger(__name__)
router = APIRouter()

require_admin = require_roles(Role.ADMIN)


@router.get("/stats")
def system_stats(
    admin: UserModel = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> Dict[str, Any]:
    """User, claim, firm, earning and document totals with growth and top adjusters."""
    return service.system_stats()


@router.get("/users", response_model=UserList)
def list_users(
    search: Optional[str] = Query(default=None, max_length=200),
    role: Optional[Role] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    admin: UserModel = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserList:
    items, total = service.list_users(
        search=search, role=role.value if role else None, page=page, limit=limit
    )
    return UserList(
        users=[UserProfile.model_validate(u) for u in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.patch("/users/{user_id}", response_model=UserProfile)
def update_user(
    user_id: int,
    payload: AdminUserUpdate,
    admin: UserModel = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserProfile:
    user = service.admin_update(admin, user_id, payload)
    logger.info(
        "user_updated_by_admin",
        target_user_id=user.id,
        changes=sorted(payload.model_dump(exclude_unset=True)),
    )
    return UserProfile.model_validate(user)


@router.get("/security-events", response_model=SecurityEventList)
def list_security_events(
    type: Optional[SecurityEventType] = None,
    user_id: Optional[int] = Query(default=None, alias="userId"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SecurityEventList:
    """Newest first. ``type`` takes the lower-case event names (``auth_failure``, ...)."""
    items, total = SecurityEventRepository(db).search(
        type=type.value if type else None, user_id=user_id, page=page, limit=limit
    )
    return SecurityEventList(
        events=[SecurityEvent.model_validate(e) for e in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/cache")
def cache_stats(admin: UserModel = Depends(require_admin)) -> Dict[str, Any]:
    return get_container().cache().stats()


@router.delete("/cache")
def clear_cache(admin: UserModel = Depends(require_admin)) -> Dict[str, Any]:
    cache = get_container().cache()
    cleared = cache.size()
    cache.clear()
    logger.warning("cache_cleared", entries=cleared, admin_id=admin.id)
    return {"success": True, "cleared": cleared}
