from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import CheckInStatus, CheckOutType, Role
from .model import AttendanceHistoryRow, AttendanceRecord, HistoryFilters


class AttendanceRepository(Protocol):
    """Attendance storage. Services depend on this interface, not on MySQL."""

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_open_for_employee(self, employee_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        employee_id: int,
        company_id: int,
        work_date: date,
        check_in: datetime,
        check_in_status: CheckInStatus,
        latitude: Optional[float],
        longitude: Optional[float],
        address: Optional[str],
    ) -> int:
        raise NotImplementedError

    def close(self, attendance_id: int, *, check_out: datetime, check_out_type: CheckOutType) -> bool:
        """Set the checkout only if the record is still open; False when nothing changed."""
        raise NotImplementedError

    def list_history(
        self,
        *,
        company_id: Optional[int],
        employee_id: Optional[int],
        filters: HistoryFilters,
        exclude_roles: Iterable[Role] = (),
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceHistoryRow]:
        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError
