"""Profile self-service and admin user management."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from adjusterhub.engines.ttl_cache import TTLCache
from adjusterhub.errors import AppError
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.firm_repo import FirmRepository
from adjusterhub.repositories.session_repo import SessionRepository
from adjusterhub.repositories.user_repo import UserRepository
from adjusterhub.schemas.enums import Role
from adjusterhub.schemas.user import AdminUserUpdate, ProfileUpdate
from adjusterhub.security.sanitize import matches, sanitize_input, sanitize_text

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("first_name", "last_name", "license_number", "address", "city", "state")


class UserService:
    def __init__(
        self,
        db: Session,
        user_repo: UserRepository,
        session_repo: SessionRepository,
        firm_repo: FirmRepository,
        cache: TTLCache,
    ):
        self.db = db
        self.users = user_repo
        self.sessions = session_repo
        self.firms = firm_repo
        self.cache = cache

    def update_profile(self, user: UserModel, update: ProfileUpdate) -> UserModel:
        changes = update.model_dump(exclude_unset=True)
        if changes.get("phone") and not matches("phone", changes["phone"]):
            raise AppError.validation("Invalid phone number")
        if changes.get("zip_code") and not matches("zip_code", changes["zip_code"]):
            raise AppError.validation("Invalid zip code")

        for field in _TEXT_FIELDS:
            if changes.get(field) is not None:
                changes[field] = sanitize_text(changes[field])
        if changes.get("bio") is not None:
            changes["bio"] = sanitize_input(changes["bio"])
        if changes.get("specialties") is not None:
            changes["specialties"] = [s for s in (sanitize_text(x) for x in changes["specialties"]) if s]

        for field, value in changes.items():
            setattr(user, field, value)
        self.users.update(user)
        self.db.commit()
        self.cache.invalidate_by_tag(f"user:{user.id}")
        return user

    # ── admin ────────────────────────────────────────────────────────

    def list_users(
        self, *, search: Optional[str] = None, role: Optional[str] = None, page: int = 1, limit: int = 20
    ) -> Tuple[List[UserModel], int]:
        return self.users.search(search=search, role=role, page=page, limit=limit)

    def admin_update(self, actor: UserModel, user_id: int, update: AdminUserUpdate) -> UserModel:
        """Change role, firm or active flag. Deactivation revokes every session."""
        user = self.users.get(user_id)
        if user is None:
            raise AppError.not_found("User")
        changes = update.model_dump(exclude_unset=True)

        if changes.get("is_active") is False and user.id == actor.id:
            raise AppError.validation("You cannot deactivate your own account")

        if "firm_id" in changes and changes["firm_id"] is not None:
            if self.firms.get(changes["firm_id"]) is None:
                raise AppError.not_found("Firm")
        role = changes.get("role", Role(user.role))
        firm_id = changes.get("firm_id", user.firm_id)
        if role == Role.FIRM_ADMIN and firm_id is None:
            raise AppError.validation("Firm admins must belong to a firm")

        if "role" in changes:
            user.role = role.value
        if "firm_id" in changes:
            user.firm_id = firm_id
        if "is_active" in changes:
            user.is_active = changes["is_active"]
            if not user.is_active:
                revoked = self.sessions.delete_for_user(user.id)
                logger.info("Deactivated user %d, revoked %d sessions", user.id, revoked)

        self.users.update(user)
        self.db.commit()
        self.cache.invalidate_by_tag(f"user:{user.id}")
        return user
