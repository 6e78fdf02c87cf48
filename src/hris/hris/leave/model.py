from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import inclusive_days, iso
from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    id: int
    employee_id: int
    company_id: int
    type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus = LeaveStatus.PENDING
    attachment: Optional[str] = None
    approved_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    employee_name: Optional[str] = None
    employee_user_id: Optional[int] = None
    approver_name: Optional[str] = None

    @property
    def days(self) -> int:
        return inclusive_days(self.start_date, self.end_date)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "type": self.type.value,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "days": self.days,
            "reason": self.reason,
            "attachment": self.attachment,
            "status": self.status.value,
            "approvedBy": self.approved_by,
            "approverName": self.approver_name,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }


@dataclass(frozen=True)
class LeaveQuota:
    annual_quota: int
    used_quota: int

    @property
    def remaining_quota(self) -> int:
        return self.annual_quota - self.used_quota

    def to_dict(self) -> dict:
        return {
            "annualQuota": self.annual_quota,
            "usedQuota": self.used_quota,
            "remainingQuota": self.remaining_quota,
        }


@dataclass(frozen=True)
class LeaveFilters:
    status: Optional[LeaveStatus] = None
    type: Optional[LeaveType] = None
    search: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    employee_ids: list[int] = field(default_factory=list)
