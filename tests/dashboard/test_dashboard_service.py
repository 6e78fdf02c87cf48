from datetime import date

import pytest

from src.hris.hris.activity.service import ActivityLogService
from src.hris.hris.attendance.model import AttendanceRecord
from src.hris.hris.core.enums import CheckInStatus, CheckOutType, LeaveStatus, LeaveType, Role
from src.hris.hris.core.exceptions import AuthorizationError
from src.hris.hris.dashboard.model import ChartRange, TodayStatus
from src.hris.hris.dashboard.service import DashboardService, chart_buckets
from src.hris.hris.employees.model import Employee
from src.hris.hris.leave.model import LeaveRequest
from src.hris.hris.leave.service import LeaveService
from src.hris.hris.organization.model import Department
from src.hris.hris.settings.service import SystemSettingsService

from tests.fakes import (
    InMemoryActivity,
    InMemoryAttendance,
    InMemoryDashboard,
    InMemoryDepartments,
    InMemoryEmployees,
    InMemoryLeaves,
    InMemoryPositions,
    InMemorySystemSettings,
    session_user,
)

ADMIN = session_user(100, Role.ADMIN, name="Admin")


@pytest.fixture
def now(local_time):
    return local_time(2025, 3, 10, 12, 0)


@pytest.fixture
def env(tz, local_time):
    employees = InMemoryEmployees(
        [
            Employee(id=10, user_id=1, company_id=1, name="Budi", role=Role.EMPLOYEE,
                     base_salary=5_000_000, join_date=date(2025, 3, 3)),
            Employee(id=11, user_id=2, company_id=1, name="Sari", role=Role.EMPLOYEE,
                     base_salary=7_000_000, join_date=date(2024, 1, 10)),
            Employee(id=12, user_id=9, company_id=1, name="Root", role=Role.SUPERADMIN, join_date=date(2025, 3, 5)),
            Employee(id=13, user_id=20, company_id=2, name="Elsewhere", role=Role.EMPLOYEE,
                     base_salary=9_000_000, join_date=date(2025, 3, 6)),
        ]
    )
    attendance = InMemoryAttendance(employees)
    for record_id, employee_id, day, status, closed in [
        (1, 10, date(2025, 3, 10), CheckInStatus.ONTIME, False),
        (2, 12, date(2025, 3, 10), CheckInStatus.ONTIME, False),
        (3, 11, date(2025, 3, 9), CheckInStatus.LATE, True),
        (4, 10, date(2025, 3, 1), CheckInStatus.LATE, True),
        (5, 13, date(2025, 3, 10), CheckInStatus.LATE, False),
    ]:
        check_in = local_time(day.year, day.month, day.day, 9, 0)
        attendance.add(
            AttendanceRecord(
                id=record_id,
                employee_id=employee_id,
                company_id=employees.get_by_id(employee_id).company_id,
                work_date=day,
                check_in=check_in,
                check_in_status=status,
                check_out=local_time(day.year, day.month, day.day, 17, 0) if closed else None,
                check_out_type=CheckOutType.MANUAL if closed else None,
            )
        )

    leaves = InMemoryLeaves(employees)
    for leave_id, employee_id, status, start, end in [
        (1, 11, LeaveStatus.PENDING, date(2025, 3, 20), date(2025, 3, 21)),
        (2, 10, LeaveStatus.APPROVED, date(2025, 2, 3), date(2025, 2, 4)),
        (3, 12, LeaveStatus.REJECTED, date(2025, 2, 3), date(2025, 2, 3)),
    ]:
        leaves.add(
            LeaveRequest(id=leave_id, employee_id=employee_id, company_id=1, type=LeaveType.ANNUAL,
                         start_date=start, end_date=end, reason="Family", status=status)
        )

    positions = InMemoryPositions()
    departments = InMemoryDepartments(positions)
    departments.create_with_positions(company_id=1, name="Engineering", code="ENG", description=None,
                                      position_titles=["Engineer", "Lead"])
    departments.create_with_positions(company_id=1, name="Finance", code="FIN", description=None,
                                      position_titles=["Accountant"])
    departments.departments[9] = Department(id=9, company_id=2, name="Other")

    settings = SystemSettingsService(InMemorySystemSettings())
    leave_service = LeaveService(leaves, employees, settings, ActivityLogService(InMemoryActivity()), tz=tz)
    service = DashboardService(
        InMemoryDashboard(attendance, leaves), employees, attendance, departments, positions, leave_service, tz=tz
    )
    return service, attendance


def test_management_summary_scopes_to_company_and_hides_superadmin(env, now):
    service, _ = env

    data = service.summary(ADMIN, now=now).to_dict()

    assert data["totalEmployees"] == 2
    assert data["todayAttendance"] == {"onTime": 1, "late": 0, "absent": 1, "total": 2}
    assert data["presentToday"] == 1
    assert data["totalPayroll"] == 12_000_000
    assert data["departments"] == {"total": 2}
    assert data["positions"] == {"total": 3}
    assert data["employeeStats"] == {"total": 2, "newThisMonth": 1}
    assert data["leaveStats"] == {"pending": 1, "approved": 1, "rejected": 0}
    assert [e["id"] for e in data["recentEmployees"]] == [10, 11]


def test_superadmin_summary_includes_superadmin_rows(env, now):
    service, _ = env

    summary = service.summary(session_user(9, Role.SUPERADMIN), now=now)

    assert summary.total_employees == 3
    assert summary.today.present == 2
    assert summary.leave_stats[LeaveStatus.REJECTED] == 1


def test_weekly_chart_counts_per_local_day(env, now):
    service, _ = env

    chart = service.summary(ADMIN, ChartRange.WEEK, now=now).to_dict()["attendanceChart"]

    assert [p["date"] for p in chart][0] == "2025-03-04"
    assert chart[-2] == {"date": "2025-03-09", "present": 1, "late": 1}
    assert chart[-1] == {"date": "2025-03-10", "present": 1, "late": 0}
    assert sum(p["present"] for p in chart[:-2]) == 0


def test_employee_summary_personal_stats(env, now):
    service, _ = env

    data = service.summary(session_user(1), ChartRange.MONTH, now=now).to_dict()

    assert data["personalStats"] == {
        "attendanceCount": 2,
        "latenessCount": 1,
        "leaveBalance": 10,
        "todayStatus": "PRESENT",
        "todayAttendanceId": 1,
        "baseSalary": 5_000_000,
    }
    assert [p["date"] for p in data["attendanceChart"]] == ["W1", "W2", "W3", "W4"]
    assert [p["present"] for p in data["attendanceChart"]] == [0, 0, 1, 1]


@pytest.mark.parametrize(
    "user_id, expected",
    [(1, TodayStatus.PRESENT), (2, TodayStatus.NOT_CHECKED_IN)],
)
def test_employee_today_status(env, now, user_id, expected):
    service, _ = env

    assert service.summary(session_user(user_id), now=now).today_status == expected


def test_employee_today_status_late_then_checked_out(env, now, local_time):
    service, attendance = env
    attendance.add(
        AttendanceRecord(id=6, employee_id=11, company_id=1, work_date=date(2025, 3, 10),
                         check_in=local_time(2025, 3, 10, 9, 30), check_in_status=CheckInStatus.LATE)
    )
    assert service.summary(session_user(2), now=now).today_status == TodayStatus.LATE

    attendance.close(6, check_out=now, check_out_type=CheckOutType.MANUAL)
    assert service.summary(session_user(2), now=now).today_status == TodayStatus.CHECKED_OUT


def test_user_without_profile_gets_no_personal_stats(env, now):
    service, _ = env

    with pytest.raises(AuthorizationError):
        service.summary(session_user(77), now=now)


def test_chart_buckets_cover_requested_range():
    today = date(2025, 3, 10)

    week = chart_buckets(today, ChartRange.WEEK)
    month = chart_buckets(today, ChartRange.MONTH)
    year = chart_buckets(today, ChartRange.YEAR)

    assert len(week) == 7 and week[-1][1:] == (today, today)
    assert month[0][1] == date(2025, 2, 11) and month[-1][2] == today
    assert len(year) == 12
    assert (year[1][1], year[1][2]) == (date(2025, 2, 1), date(2025, 2, 28))
    assert year[-1][2] == date(2025, 12, 31)
