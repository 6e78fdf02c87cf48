from __future__ import annotations

from typing import Optional, Protocol

from ..common.pagination import Page, PageRequest
from .model import ActivityLog


class ActivityLogRepository(Protocol):
    def add(self, *, company_id: int, user_id: Optional[int], action: str, description: str) -> int:
        raise NotImplementedError

    def list_page(self, *, company_id: Optional[int], user_id: Optional[int], page: PageRequest) -> Page[ActivityLog]:
        """``company_id=None`` lists every tenant (superadmin view)."""
        raise NotImplementedError

    def delete(self, log_id: int) -> bool:
        raise NotImplementedError
