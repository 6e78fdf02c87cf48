from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..common.validators import as_bool, require_choice, require_non_empty
from ..core.constants import DEFAULT_NOTIFICATION_ROLES
from ..core.enums import NotificationCategory, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import SessionUser
from ..leave.repository import LeaveRepository
from .model import ALL_ROLES, Notification, parse_target_roles
from .repository import NotificationRepository

logger = logging.getLogger(__name__)

RESTRICTED_CATEGORIES = frozenset({NotificationCategory.SYSTEM, NotificationCategory.WA})


def _parse_roles(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        roles = tuple(str(v).strip().upper() for v in value if str(v).strip())
    else:
        roles = parse_target_roles(value)
    if not roles:
        raise ValidationError("targetRoles must name at least one role")
    known = {r.value for r in Role} | {ALL_ROLES}
    unknown = [r for r in roles if r not in known]
    if unknown:
        raise ValidationError(f"Unknown role(s) in targetRoles: {', '.join(unknown)}")
    return roles


class NotificationService:
    """Company announcements filtered by role, plus a live pending-leave reminder for management."""

    def __init__(self, notifications: NotificationRepository, leaves: LeaveRepository):
        self._notifications = notifications
        self._leaves = leaves

    def _guard_category(self, user: SessionUser, category: NotificationCategory) -> None:
        if category in RESTRICTED_CATEGORIES and user.role != Role.SUPERADMIN:
            raise AuthorizationError(f"Only SUPERADMIN can manage {category.value} notifications")

    def _pending_leave_item(self, user: SessionUser) -> Optional[Notification]:
        pending = self._leaves.count_pending(user.company_id)
        if pending <= 0:
            return None
        return Notification(
            id=0,
            company_id=user.company_id,
            title="Pending leave requests",
            message=f"{pending} leave request(s) waiting for approval",
            category=NotificationCategory.GENERAL,
            target_roles=tuple(r.value for r in Role if r.is_management),
            synthetic=True,
        )

    def list(self, user: SessionUser) -> list[Notification]:
        if user.is_management:
            items = list(self._notifications.list_for_company(user.company_id))
            reminder = self._pending_leave_item(user)
            return [reminder] + items if reminder else items
        rows = self._notifications.list_for_company(user.company_id, active_only=True)
        return [n for n in rows if n.targets(user.role)]

    def get(self, user: SessionUser, notification_id: int) -> Notification:
        notification = self._notifications.get_by_id(notification_id)
        if not notification or notification.company_id != user.company_id:
            raise NotFoundError("Notification not found")
        return notification

    def _fields(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        if "title" in payload:
            fields["title"] = require_non_empty(payload.get("title"), "Title")
        if "message" in payload:
            fields["message"] = require_non_empty(payload.get("message"), "Message")
        if "category" in payload:
            fields["category"] = require_choice(payload.get("category"), "category", NotificationCategory)
        if "targetRoles" in payload:
            fields["target_roles"] = _parse_roles(payload.get("targetRoles"))
        if "isActive" in payload:
            fields["is_active"] = as_bool(payload.get("isActive"))
        return fields

    def create(self, user: SessionUser, payload: Mapping[str, Any]) -> Notification:
        if not user.is_management:
            raise AuthorizationError("Forbidden")
        fields = self._fields(payload)
        for key, label in (("title", "Title"), ("message", "Message")):
            if key not in fields:
                raise ValidationError(f"{label} is required")
        fields.setdefault("category", NotificationCategory.GENERAL)
        fields.setdefault("target_roles", parse_target_roles(DEFAULT_NOTIFICATION_ROLES))
        fields.setdefault("is_active", True)
        fields["created_by"] = user.user_id
        self._guard_category(user, fields["category"])

        notification_id = self._notifications.create(user.company_id, fields)
        logger.info("User %s created %s notification %s", user.user_id, fields["category"].value, notification_id)
        return self.get(user, notification_id)

    def update(self, user: SessionUser, notification_id: int, payload: Mapping[str, Any]) -> Notification:
        if not user.is_management:
            raise AuthorizationError("Forbidden")
        current = self.get(user, notification_id)
        self._guard_category(user, current.category)
        fields = self._fields(payload)
        if not fields:
            raise ValidationError("Nothing to update")
        if "category" in fields:
            self._guard_category(user, fields["category"])

        self._notifications.update(notification_id, fields)
        return self.get(user, notification_id)

    def delete(self, user: SessionUser, notification_id: int) -> None:
        if not user.is_management:
            raise AuthorizationError("Forbidden")
        current = self.get(user, notification_id)
        self._guard_category(user, current.category)
        if not self._notifications.delete(notification_id):
            raise NotFoundError("Notification not found")
