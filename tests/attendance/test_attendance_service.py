from datetime import date, timedelta

import pytest

from src.hris.hris.activity.service import ActivityLogService
from src.hris.hris.attendance.model import AttendanceRecord, HistoryFilters
from src.hris.hris.attendance.service import AttendanceService
from src.hris.hris.core.enums import CheckInStatus, CheckOutType, Role
from src.hris.hris.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hris.hris.employees.model import Employee
from src.hris.hris.settings.service import SystemSettingsService

from tests.fakes import InMemoryActivity, InMemoryAttendance, InMemoryEmployees, InMemorySystemSettings, session_user

OFFICE_SETTINGS = {
    "office_latitude": "-6.2",
    "office_longitude": "106.816666",
    "attendance_radius_meters": "100",
    "office_start_time": "09:00",
    "office_end_time": "17:00",
    "enable_auto_checkout": "true",
}


@pytest.fixture
def env(tz):
    employees = InMemoryEmployees(
        [
            Employee(id=10, user_id=1, company_id=1, name="Budi", role=Role.EMPLOYEE),
            Employee(id=11, user_id=2, company_id=1, name="Sari", role=Role.EMPLOYEE),
        ]
    )
    attendance = InMemoryAttendance(employees)
    activity = InMemoryActivity()
    service = AttendanceService(
        attendance,
        employees,
        SystemSettingsService(InMemorySystemSettings({1: dict(OFFICE_SETTINGS)})),
        ActivityLogService(activity),
        tz=tz,
        history_limit=2,
    )
    return service, attendance, employees, activity


def test_check_in_inside_radius_is_on_time(env, local_time):
    service, attendance, _, activity = env

    record = service.check_in(session_user(1), latitude=-6.2001, longitude=106.816666, now=local_time(2025, 3, 10, 8, 55))

    assert record.work_date == date(2025, 3, 10)
    assert record.check_in_status == CheckInStatus.ONTIME
    assert record.is_open
    assert activity.actions == ["CHECK_IN"]


def test_check_in_after_start_minute_is_late(env, local_time):
    service, *_ = env

    record = service.check_in(session_user(1), latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 10, 9, 1))

    assert record.check_in_status == CheckInStatus.LATE


def test_check_in_outside_radius_creates_nothing(env, local_time):
    service, attendance, *_ = env

    with pytest.raises(ValidationError, match="outside the attendance radius"):
        service.check_in(session_user(1), latitude=-6.3, longitude=106.816666, now=local_time(2025, 3, 10, 8, 0))

    assert attendance.records == {}


def test_second_check_in_same_local_day_is_rejected(env, local_time):
    service, *_ = env
    user = session_user(1)
    service.check_in(user, latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 10, 8, 0))

    with pytest.raises(ValidationError, match="Already checked in"):
        service.check_in(user, latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 10, 23, 59))


def test_local_day_differs_from_utc_day(env, local_time):
    service, *_ = env

    # 06:30 local on the 11th is still the 10th in UTC
    record = service.check_in(session_user(1), latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 11, 6, 30))

    assert record.work_date == date(2025, 3, 11)


def test_check_in_auto_closes_previous_open_day(env, local_time):
    service, attendance, *_ = env
    attendance.add(
        AttendanceRecord(id=1, employee_id=10, company_id=1, work_date=date(2025, 3, 9), check_in=local_time(2025, 3, 9, 9, 0))
    )

    service.check_in(session_user(1), latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 10, 8, 0))

    closed = attendance.get_by_id(1)
    assert closed.check_out == local_time(2025, 3, 9, 17, 0)
    assert closed.check_out_type == CheckOutType.AUTO


def test_non_employee_cannot_check_in(env, local_time):
    service, *_ = env

    with pytest.raises(AuthorizationError, match="Not an employee"):
        service.check_in(session_user(99), latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 10, 8, 0))


def test_admin_gets_profile_created_on_first_check_in(env, local_time):
    service, _, employees, _ = env

    record = service.check_in(
        session_user(50, Role.ADMIN), latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 10, 8, 0)
    )

    assert employees.get_by_user_id(50).id == record.employee_id


def test_check_out_today_flow(env, local_time):
    service, *_ = env
    user = session_user(1)

    with pytest.raises(ValidationError, match="not checked in"):
        service.check_out_today(user, now=local_time(2025, 3, 10, 12, 0))

    service.check_in(user, latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 10, 8, 0))
    record = service.check_out_today(user, now=local_time(2025, 3, 10, 16, 0))
    assert record.check_out == local_time(2025, 3, 10, 16, 0)
    assert record.check_out_type == CheckOutType.MANUAL

    with pytest.raises(ValidationError, match="Already checked out"):
        service.check_out_today(user, now=local_time(2025, 3, 10, 16, 5))


def test_check_out_by_id_scoping(env, local_time):
    service, attendance, *_ = env
    record = service.check_in(session_user(1), latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 10, 8, 0))

    with pytest.raises(AuthorizationError):
        service.check_out(session_user(2), record.id, now=local_time(2025, 3, 10, 12, 0))

    closed = service.check_out(session_user(7, Role.ADMIN), record.id, now=local_time(2025, 3, 10, 12, 0))
    assert closed.check_out == local_time(2025, 3, 10, 12, 0)

    with pytest.raises(NotFoundError):
        service.check_out(session_user(1), record.id, now=local_time(2025, 3, 10, 13, 0))


def test_history_limit_applies_only_without_filters(env, local_time):
    service, attendance, *_ = env
    for day in range(3):
        attendance.add(
            AttendanceRecord(
                id=day + 1,
                employee_id=10,
                company_id=1,
                work_date=date(2025, 3, 5) + timedelta(days=day),
                check_in=local_time(2025, 3, 5 + day, 9, 0),
            )
        )
    user = session_user(1)

    rows, today = service.history(user, now=local_time(2025, 3, 10, 8, 0))
    assert len(rows) == 2
    assert today is None
    assert all(not r.record.is_open for r in rows)

    rows, _ = service.history(user, HistoryFilters(start_date=date(2025, 3, 1)), now=local_time(2025, 3, 10, 8, 0))
    assert len(rows) == 3


def test_management_history_excludes_superadmin_rows(env, local_time):
    service, attendance, *_ = env

    service.history(session_user(7, Role.ADMIN), now=local_time(2025, 3, 10, 8, 0))
    service.history(session_user(8, Role.SUPERADMIN), now=local_time(2025, 3, 10, 8, 0))

    admin_call, super_call = attendance.history_calls
    assert admin_call["company_id"] == 1
    assert admin_call["exclude_roles"] == (Role.SUPERADMIN,)
    assert super_call["company_id"] is None
    assert super_call["exclude_roles"] == ()


def test_all_flag_lifts_history_limit(env, local_time):
    service, attendance, *_ = env

    service.history(session_user(7, Role.ADMIN), HistoryFilters(show_all=True), now=local_time(2025, 3, 10, 8, 0))
    service.history(session_user(1), HistoryFilters(show_all=True), now=local_time(2025, 3, 10, 8, 0))
    service.history(session_user(1), now=local_time(2025, 3, 10, 8, 0))

    assert [call["limit"] for call in attendance.history_calls] == [None, None, 2]


def test_management_deletes_company_attendance(env, local_time):
    service, attendance, _, activity = env
    record = service.check_in(session_user(1), latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 10, 8, 0))

    service.delete(session_user(7, Role.ADMIN), record.id)

    assert attendance.get_by_id(record.id) is None
    assert activity.actions == ["CHECK_IN", "ATTENDANCE_DELETED"]
    with pytest.raises(NotFoundError):
        service.delete(session_user(7, Role.ADMIN), record.id)


def test_attendance_delete_scoping(env, local_time):
    service, attendance, *_ = env
    record = service.check_in(session_user(1), latitude=-6.2, longitude=106.816666, now=local_time(2025, 3, 10, 8, 0))

    with pytest.raises(AuthorizationError):
        service.delete(session_user(1), record.id)
    with pytest.raises(NotFoundError):
        service.delete(session_user(9, Role.ADMIN, company_id=2), record.id)
    assert attendance.get_by_id(record.id) is not None

    service.delete(session_user(8, Role.SUPERADMIN, company_id=2), record.id)
    assert attendance.get_by_id(record.id) is None
