from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ..common.pagination import Page, PageRequest
from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveFilters, LeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        company_id: int,
        type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        attachment: Optional[str],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def list_page(self, company_id: int, filters: LeaveFilters, page: PageRequest) -> Page[LeaveRequest]:
        raise NotImplementedError

    def approved_annual_days(self, employee_id: int, year: int) -> int:
        """Inclusive day count of APPROVED ANNUAL leave starting in ``year``."""
        raise NotImplementedError

    def count_pending(self, company_id: int) -> int:
        raise NotImplementedError

    def decide(self, leave_id: int, *, status: LeaveStatus, approved_by: int, decided_at: datetime) -> bool:
        """Move a PENDING request to ``status``; False if it was not pending."""
        raise NotImplementedError
