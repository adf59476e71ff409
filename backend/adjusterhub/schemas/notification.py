"""Notification schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from adjusterhub.schemas.common import APIModel, Pagination
from adjusterhub.schemas.enums import NotificationType


class NotificationCreate(APIModel):
    type: NotificationType
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=2000)
    data: Optional[Dict[str, Any]] = None
    user_id: Optional[int] = None  # admins may target another user


class MarkReadRequest(APIModel):
    notification_ids: Optional[List[int]] = None
    mark_all_read: bool = False


class MarkReadResponse(APIModel):
    success: bool = True
    updated_count: int


class Notification(APIModel):
    id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    data: Optional[Dict[str, Any]] = None
    is_read: bool
    created_at: datetime


class NotificationList(APIModel):
    notifications: List[Notification]
    pagination: Pagination
    unread_count: int
