from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from ..core.enums import LeaveStatus
from ..employees.model import Employee
from ..leave.model import LeaveQuota


class ChartRange(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class TodayStatus(str, Enum):
    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    PRESENT = "PRESENT"
    LATE = "LATE"
    CHECKED_OUT = "CHECKED_OUT"


@dataclass(frozen=True)
class AttendanceCounts:
    on_time: int = 0
    late: int = 0

    @property
    def present(self) -> int:
        return self.on_time + self.late

    def __add__(self, other: "AttendanceCounts") -> "AttendanceCounts":
        return AttendanceCounts(on_time=self.on_time + other.on_time, late=self.late + other.late)


@dataclass(frozen=True)
class ChartPoint:
    label: str
    start: date
    end: date
    counts: AttendanceCounts

    def to_dict(self) -> dict:
        return {"date": self.label, "present": self.counts.present, "late": self.counts.late}


@dataclass(frozen=True)
class ManagementSummary:
    total_employees: int
    new_this_month: int
    departments: int
    positions: int
    total_base_salary: float
    today: AttendanceCounts
    leave_stats: dict[LeaveStatus, int]
    recent_employees: list[Employee]
    chart: list[ChartPoint] = field(default_factory=list)

    @property
    def absent_today(self) -> int:
        return max(0, self.total_employees - self.today.present)

    def to_dict(self) -> dict:
        return {
            "totalEmployees": self.total_employees,
            "departments": {"total": self.departments},
            "positions": {"total": self.positions},
            "presentToday": self.today.present,
            "todayAttendance": {
                "onTime": self.today.on_time,
                "late": self.today.late,
                "absent": self.absent_today,
                "total": self.total_employees,
            },
            "totalPayroll": self.total_base_salary,
            "recentEmployees": [
                {
                    "id": e.id,
                    "name": e.name,
                    "position": e.position,
                    "department": e.department_name,
                    "joinDate": e.join_date.isoformat() if e.join_date else None,
                }
                for e in self.recent_employees
            ],
            "leaveStats": {s.value.lower(): self.leave_stats.get(s, 0) for s in LeaveStatus},
            "employeeStats": {"total": self.total_employees, "newThisMonth": self.new_this_month},
            "attendanceChart": [p.to_dict() for p in self.chart],
        }


@dataclass(frozen=True)
class EmployeeSummary:
    month_attendance: AttendanceCounts
    leave: LeaveQuota
    today_status: TodayStatus
    base_salary: float
    chart: list[ChartPoint] = field(default_factory=list)
    today_attendance_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "personalStats": {
                "attendanceCount": self.month_attendance.present,
                "latenessCount": self.month_attendance.late,
                "leaveBalance": self.leave.remaining_quota,
                "todayStatus": self.today_status.value,
                "todayAttendanceId": self.today_attendance_id,
                "baseSalary": self.base_salary,
            },
            "attendanceChart": [p.to_dict() for p in self.chart],
        }
