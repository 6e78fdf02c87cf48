from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Optional

from ..activity.service import ActivityLogService
from ..common.datetime_utils import business_tz, local_date, now_utc
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_UTC_OFFSET_HOURS
from ..core.enums import ActivityAction, CheckOutType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import Employee, SessionUser
from ..employees.repository import EmployeeRepository
from ..settings.service import SystemSettingsService
from .auto_checkout import AutoCheckout
from .factory import CheckInStrategyFactory
from .geofence import ensure_within_radius
from .model import AttendanceHistoryRow, AttendanceRecord, HistoryFilters
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use cases: geofenced check-in, check-out, history with auto checkout."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        settings: SystemSettingsService,
        activity: ActivityLogService,
        *,
        tz: Optional[tzinfo] = None,
        strategy_factory: CheckInStrategyFactory | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._activity = activity
        self._tz = tz or business_tz(DEFAULT_UTC_OFFSET_HOURS)
        self._factory = strategy_factory or CheckInStrategyFactory()
        self._history_limit = int(history_limit)
        self._auto_checkout = AutoCheckout(attendance, tz=self._tz)

    def resolve_employee(self, user: SessionUser, *, now: Optional[datetime] = None) -> Employee:
        """Employee profile of the caller; management accounts get one on first use."""
        employee = self._employees.get_by_user_id(user.user_id)
        if employee:
            return employee
        if not user.is_management:
            raise AuthorizationError("Not an employee")

        now = now or now_utc()
        self._employees.create_profile(
            user_id=user.user_id,
            company_id=user.company_id,
            position=user.role.value,
            join_date=local_date(now, self._tz),
        )
        logger.info("Created employee profile for %s user %s", user.role.value, user.user_id)
        employee = self._employees.get_by_user_id(user.user_id)
        if not employee:
            raise NotFoundError("Employee profile could not be created")
        return employee

    def run_auto_checkout(self, employee_id: int, company_id: int, *, now: Optional[datetime] = None) -> int:
        office = self._settings.office(company_id)
        if not office.auto_checkout_enabled:
            return 0
        return self._auto_checkout.sweep(employee_id, now=now or now_utc(), end_time=office.end_time)

    def check_in(
        self,
        user: SessionUser,
        *,
        latitude: Optional[float],
        longitude: Optional[float],
        address: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_utc()
        office = self._settings.office(user.company_id)
        ensure_within_radius(office, latitude, longitude)

        employee = self.resolve_employee(user, now=now)
        if office.auto_checkout_enabled:
            self._auto_checkout.sweep(employee.id, now=now, end_time=office.end_time)

        today = local_date(now, self._tz)
        if self._attendance.get_for_employee_and_date(employee.id, today):
            raise ValidationError("Already checked in")

        local_now = now.astimezone(self._tz)
        strategy = self._factory.for_checkin(local_now=local_now, start_time=office.start_time)
        decision = strategy.decide_checkin(local_now=local_now, start_time=office.start_time)

        attendance_id = self._attendance.create_checkin(
            employee_id=employee.id,
            company_id=employee.company_id,
            work_date=today,
            check_in=now,
            check_in_status=decision.check_in_status,
            latitude=latitude,
            longitude=longitude,
            address=(address or "").strip() or None,
        )
        logger.info("Employee %s checked in (%s)", employee.id, decision.check_in_status.value)
        self._activity.record(
            company_id=user.company_id,
            user_id=user.user_id,
            action=ActivityAction.CHECK_IN,
            description=f"{user.name} checked in ({decision.check_in_status.value})",
        )

        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def check_out_today(self, user: SessionUser, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or now_utc()
        employee = self.resolve_employee(user, now=now)

        record = self._attendance.get_for_employee_and_date(employee.id, local_date(now, self._tz))
        if not record:
            raise ValidationError("You have not checked in today")
        if not record.is_open:
            raise ValidationError("Already checked out")

        self._attendance.close(record.id, check_out=now, check_out_type=CheckOutType.MANUAL)
        self._activity.record(
            company_id=user.company_id,
            user_id=user.user_id,
            action=ActivityAction.CHECK_OUT,
            description=f"{user.name} checked out",
        )
        return self._attendance.get_by_id(record.id) or record

    def check_out(self, user: SessionUser, attendance_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        """Manual checkout of a specific open record (own record, or any in the company for management)."""
        now = now or now_utc()
        record = self._attendance.get_by_id(attendance_id)
        if not record or (record.company_id != user.company_id and user.role != Role.SUPERADMIN):
            raise NotFoundError("Attendance record not found or already checked out")

        if not user.is_management:
            employee = self._employees.get_by_user_id(user.user_id)
            if not employee or employee.id != record.employee_id:
                raise AuthorizationError("You can only check out your own attendance")

        if not self._attendance.close(record.id, check_out=now, check_out_type=CheckOutType.MANUAL):
            raise NotFoundError("Attendance record not found or already checked out")

        self._activity.record(
            company_id=user.company_id,
            user_id=user.user_id,
            action=ActivityAction.CHECK_OUT_MANUAL,
            description=f"{user.name} closed attendance #{record.id}",
        )
        return self._attendance.get_by_id(record.id) or record

    def delete(self, user: SessionUser, attendance_id: int) -> None:
        if not user.is_management:
            raise AuthorizationError("Forbidden")
        record = self._attendance.get_by_id(attendance_id)
        if not record or (record.company_id != user.company_id and user.role != Role.SUPERADMIN):
            raise NotFoundError("Attendance record not found")
        if not self._attendance.delete(record.id):
            raise NotFoundError("Attendance record not found")

        logger.info("User %s deleted attendance %s of employee %s", user.user_id, record.id, record.employee_id)
        self._activity.record(
            company_id=record.company_id,
            user_id=user.user_id,
            action=ActivityAction.ATTENDANCE_DELETED,
            description=f"{user.name} deleted attendance #{record.id} ({record.work_date.isoformat()})",
        )

    def history(
        self,
        user: SessionUser,
        filters: Optional[HistoryFilters] = None,
        *,
        now: Optional[datetime] = None,
    ) -> tuple[list[AttendanceHistoryRow], Optional[AttendanceRecord]]:
        """History rows plus the caller's record for today (auto checkout runs first)."""
        now = now or now_utc()
        filters = filters or HistoryFilters()

        employee = self.resolve_employee(user, now=now)
        self.run_auto_checkout(employee.id, user.company_id, now=now)
        today_record = self._attendance.get_for_employee_and_date(employee.id, local_date(now, self._tz))

        # the cap only applies to an unfiltered listing, and `show_all` lifts it
        limit = self._history_limit if filters.is_empty and not filters.show_all else None
        if user.is_management:
            rows = self._attendance.list_history(
                company_id=None if user.role == Role.SUPERADMIN else user.company_id,
                employee_id=None,
                filters=filters,
                exclude_roles=() if user.role == Role.SUPERADMIN else (Role.SUPERADMIN,),
                limit=limit,
            )
        else:
            rows = self._attendance.list_history(
                company_id=user.company_id,
                employee_id=employee.id,
                filters=HistoryFilters(start_date=filters.start_date, end_date=filters.end_date),
                limit=limit,
            )
        return list(rows), today_record
