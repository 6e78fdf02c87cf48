from __future__ import annotations

import logging
from typing import Optional

from ..common.pagination import Page, PageRequest
from ..core.enums import ActivityAction, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..employees.model import SessionUser
from .model import ActivityLog
from .repository import ActivityLogRepository

logger = logging.getLogger(__name__)


class ActivityLogService:
    def __init__(self, logs: ActivityLogRepository):
        self._logs = logs

    def record(self, *, company_id: int, user_id: Optional[int], action: ActivityAction | str, description: str) -> None:
        """Audit write that never fails the business operation it describes."""
        action_name = action.value if isinstance(action, ActivityAction) else str(action)
        try:
            self._logs.add(company_id=company_id, user_id=user_id, action=action_name, description=description)
        except Exception:
            logger.warning("Failed to record activity %s for user %s", action_name, user_id, exc_info=True)

    def list_logs(self, user: SessionUser, *, page: PageRequest, user_id: Optional[int] = None) -> Page[ActivityLog]:
        if not user.is_management:
            # Non-management users only ever see their own trail.
            return self._logs.list_page(company_id=user.company_id, user_id=user.user_id, page=page)
        company_id = None if user.role == Role.SUPERADMIN else user.company_id
        return self._logs.list_page(company_id=company_id, user_id=user_id, page=page)

    def delete(self, user: SessionUser, log_id: int) -> None:
        if user.role != Role.SUPERADMIN:
            raise AuthorizationError("Only SUPERADMIN can delete activity logs")
        if not self._logs.delete(log_id):
            raise NotFoundError("Activity log not found")
