from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import iso
from ..core.enums import AttendanceStatus, CheckInStatus, CheckOutType, Role


@dataclass(frozen=True)
class AttendanceRecord:
    """One working day of one employee. ``work_date`` is the business-local date."""

    id: int
    employee_id: int
    company_id: int
    work_date: date
    check_in: datetime
    check_out: Optional[datetime] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    check_in_status: CheckInStatus = CheckInStatus.ONTIME
    check_out_type: Optional[CheckOutType] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_out is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "companyId": self.company_id,
            "date": self.work_date.isoformat(),
            "checkIn": iso(self.check_in),
            "checkOut": iso(self.check_out),
            "status": self.status.value,
            "checkInStatus": self.check_in_status.value,
            "checkOutType": self.check_out_type.value if self.check_out_type else None,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
        }


@dataclass(frozen=True)
class AttendanceHistoryRow:
    record: AttendanceRecord
    employee_name: str
    role: Optional[Role] = None
    department_name: Optional[str] = None

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["employeeName"] = self.employee_name
        data["role"] = self.role.value if self.role else None
        data["department"] = self.department_name
        return data


@dataclass(frozen=True)
class HistoryFilters:
    search: Optional[str] = None
    employee_ids: list[int] = field(default_factory=list)
    roles: list[Role] = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    show_all: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.search or self.employee_ids or self.roles or self.start_date or self.end_date)
