from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional, Protocol

from ..core.enums import LeaveStatus, Role
from .model import AttendanceCounts


class DashboardRepository(Protocol):
    """Aggregate reads behind the dashboard summary."""

    def attendance_by_day(
        self,
        company_id: int,
        start: date,
        end: date,
        *,
        employee_id: Optional[int] = None,
        exclude_roles: Iterable[Role] = (),
    ) -> Mapping[date, AttendanceCounts]:
        """On-time / late check-ins per local work date, ``start`` and ``end`` inclusive."""
        raise NotImplementedError

    def leave_status_counts(self, company_id: int, *, exclude_roles: Iterable[Role] = ()) -> Mapping[LeaveStatus, int]:
        raise NotImplementedError
