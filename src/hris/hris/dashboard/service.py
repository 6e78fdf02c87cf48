from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Mapping, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import business_tz, local_date, now_utc
from ..core.constants import DEFAULT_UTC_OFFSET_HOURS
from ..core.enums import CheckInStatus, Role
from ..core.exceptions import AuthorizationError
from ..employees.model import SessionUser
from ..employees.repository import EmployeeRepository
from ..leave.service import LeaveService
from ..organization.repository import DepartmentRepository, PositionRepository
from .model import AttendanceCounts, ChartPoint, ChartRange, EmployeeSummary, ManagementSummary, TodayStatus
from .repository import DashboardRepository


RECENT_EMPLOYEES = 5


def chart_buckets(today: date, chart_range: ChartRange) -> list[tuple[str, date, date]]:
    """(label, first day, last day) per chart point, oldest first.

    week: the last 7 days. month: the last 4 weeks ending today. year: each
    month of the current year.
    """
    if chart_range == ChartRange.WEEK:
        days = [today - timedelta(days=n) for n in range(6, -1, -1)]
        return [(d.isoformat(), d, d) for d in days]
    if chart_range == ChartRange.MONTH:
        first = today - timedelta(days=27)
        return [
            (f"W{w + 1}", first + timedelta(days=7 * w), first + timedelta(days=7 * w + 6))
            for w in range(4)
        ]
    buckets = []
    for month in range(1, 13):
        start = date(today.year, month, 1)
        end = date(today.year + 1, 1, 1) if month == 12 else date(today.year, month + 1, 1)
        buckets.append((start.strftime("%b"), start, end - timedelta(days=1)))
    return buckets


def _sum_between(by_day: Mapping[date, AttendanceCounts], start: date, end: date) -> AttendanceCounts:
    total = AttendanceCounts()
    for day, counts in by_day.items():
        if start <= day <= end:
            total = total + counts
    return total


class DashboardService:
    """Home-screen figures: company overview for management, personal stats otherwise."""

    def __init__(
        self,
        dashboard: DashboardRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        departments: DepartmentRepository,
        positions: PositionRepository,
        leave_service: LeaveService,
        *,
        tz: Optional[tzinfo] = None,
    ):
        self._dashboard = dashboard
        self._employees = employees
        self._attendance = attendance
        self._departments = departments
        self._positions = positions
        self._leave_service = leave_service
        self._tz = tz or business_tz(DEFAULT_UTC_OFFSET_HOURS)

    def summary(
        self,
        user: SessionUser,
        chart_range: ChartRange = ChartRange.WEEK,
        *,
        now: Optional[datetime] = None,
    ) -> ManagementSummary | EmployeeSummary:
        today = local_date(now or now_utc(), self._tz)
        if user.is_management:
            return self._management(user, today, chart_range)
        return self._personal(user, today, chart_range)

    def _chart(self, by_day: Mapping[date, AttendanceCounts], today: date, chart_range: ChartRange) -> list[ChartPoint]:
        return [
            ChartPoint(label=label, start=start, end=end, counts=_sum_between(by_day, start, end))
            for label, start, end in chart_buckets(today, chart_range)
        ]

    def _management(self, user: SessionUser, today: date, chart_range: ChartRange) -> ManagementSummary:
        exclude = () if user.role == Role.SUPERADMIN else (Role.SUPERADMIN,)
        staff = [e for e in self._employees.list_for_company(user.company_id) if e.role not in exclude]
        month_start = today.replace(day=1)

        buckets = chart_buckets(today, chart_range)
        first_day = min(buckets[0][1], today)
        by_day = self._dashboard.attendance_by_day(
            user.company_id, first_day, max(buckets[-1][2], today), exclude_roles=exclude
        )

        recent = sorted(staff, key=lambda e: (e.join_date or date.min, e.id), reverse=True)[:RECENT_EMPLOYEES]
        return ManagementSummary(
            total_employees=len(staff),
            new_this_month=sum(1 for e in staff if e.join_date and e.join_date >= month_start),
            departments=len(self._departments.list_with_counts(user.company_id)),
            positions=len(self._positions.list(user.company_id)),
            total_base_salary=sum(e.base_salary for e in staff),
            today=by_day.get(today, AttendanceCounts()),
            leave_stats=dict(self._dashboard.leave_status_counts(user.company_id, exclude_roles=exclude)),
            recent_employees=recent,
            chart=self._chart(by_day, today, chart_range),
        )

    def _personal(self, user: SessionUser, today: date, chart_range: ChartRange) -> EmployeeSummary:
        employee = self._employees.get_by_user_id(user.user_id)
        if not employee:
            raise AuthorizationError("Not an employee")

        buckets = chart_buckets(today, chart_range)
        month_start = today.replace(day=1)
        by_day = self._dashboard.attendance_by_day(
            user.company_id,
            min(buckets[0][1], month_start),
            max(buckets[-1][2], today),
            employee_id=employee.id,
        )

        record = self._attendance.get_for_employee_and_date(employee.id, today)
        if not record:
            status = TodayStatus.NOT_CHECKED_IN
        elif not record.is_open:
            status = TodayStatus.CHECKED_OUT
        elif record.check_in_status == CheckInStatus.LATE:
            status = TodayStatus.LATE
        else:
            status = TodayStatus.PRESENT

        return EmployeeSummary(
            month_attendance=_sum_between(by_day, month_start, today),
            leave=self._leave_service.quota_for(employee, today.year),
            today_status=status,
            base_salary=employee.base_salary,
            chart=self._chart(by_day, today, chart_range),
            today_attendance_id=record.id if record else None,
        )
