from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta, tzinfo
from typing import Any, Mapping, Optional

from ..activity.service import ActivityLogService
from ..common.datetime_utils import business_tz, inclusive_days, local_date, now_utc, parse_iso_date
from ..common.pagination import Page, PageRequest
from ..common.validators import require_choice, require_non_empty
from ..core.constants import DEFAULT_UTC_OFFSET_HOURS
from ..core.enums import ActivityAction, LeaveStatus, LeaveType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import Employee, SessionUser
from ..employees.repository import EmployeeRepository
from ..settings.service import SystemSettingsService
from .model import LeaveFilters, LeaveQuota, LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """Use cases: request leave against the annual quota, approve/reject, list."""

    def __init__(
        self,
        leaves: LeaveRepository,
        employees: EmployeeRepository,
        settings: SystemSettingsService,
        activity: ActivityLogService,
        *,
        tz: Optional[tzinfo] = None,
    ):
        self._leaves = leaves
        self._employees = employees
        self._settings = settings
        self._activity = activity
        self._tz = tz or business_tz(DEFAULT_UTC_OFFSET_HOURS)

    def quota_for(self, employee: Employee, year: int) -> LeaveQuota:
        annual = employee.annual_leave_quota or self._settings.leave(employee.company_id).annual_quota
        return LeaveQuota(annual_quota=annual, used_quota=self._leaves.approved_annual_days(employee.id, year))

    def _ensure_quota(self, employee: Employee, leave_type: LeaveType, start, end) -> None:
        if leave_type != LeaveType.ANNUAL:
            return
        requested = inclusive_days(start, end)
        quota = self.quota_for(employee, start.year)
        if requested > quota.remaining_quota:
            raise ValidationError(
                f"Insufficient leave quota. Remaining: {quota.remaining_quota} days, requested: {requested} days."
            )

    def create(self, user: SessionUser, payload: Mapping[str, Any], *, now: Optional[datetime] = None) -> LeaveRequest:
        now = now or now_utc()
        employee = self._employees.get_by_user_id(user.user_id)
        if not employee:
            raise AuthorizationError("Not an employee")

        leave_type = require_choice(payload.get("type"), "type", LeaveType)
        start = parse_iso_date(require_non_empty(payload.get("startDate"), "startDate"))
        end = parse_iso_date(require_non_empty(payload.get("endDate"), "endDate"))
        if end < start:
            raise ValidationError("endDate cannot be before startDate")
        reason = require_non_empty(payload.get("reason"), "Reason")

        min_notice = self._settings.leave(user.company_id).min_notice_days
        if leave_type == LeaveType.ANNUAL and min_notice > 0:
            earliest = local_date(now, self._tz) + timedelta(days=min_notice)
            if start < earliest:
                raise ValidationError(f"Annual leave must be requested at least {min_notice} days in advance")

        self._ensure_quota(employee, leave_type, start, end)

        leave_id = self._leaves.create(
            employee_id=employee.id,
            company_id=employee.company_id,
            type=leave_type,
            start_date=start,
            end_date=end,
            reason=reason,
            attachment=(payload.get("attachment") or "").strip() or None,
            created_at=now,
        )
        self._activity.record(
            company_id=user.company_id,
            user_id=user.user_id,
            action=ActivityAction.LEAVE_REQUEST_CREATED,
            description=f"{leave_type.value} leave requested {start.isoformat()} - {end.isoformat()}",
        )
        created = self._leaves.get_by_id(leave_id)
        if not created:
            raise NotFoundError("Leave request not found")
        return created

    def decide(
        self, user: SessionUser, leave_id: int, status: Any, *, now: Optional[datetime] = None
    ) -> LeaveRequest:
        if not user.is_management:
            raise AuthorizationError("Forbidden")
        try:
            status = LeaveStatus(status)
        except ValueError:
            raise ValidationError("Invalid status")
        if status == LeaveStatus.PENDING:
            raise ValidationError("Invalid status")

        leave = self._leaves.get_by_id(leave_id)
        if not leave or leave.company_id != user.company_id:
            raise NotFoundError("Leave request not found")
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError("Leave request has already been processed")

        if status == LeaveStatus.APPROVED:
            employee = self._employees.get_by_id(leave.employee_id)
            if employee:
                self._ensure_quota(employee, leave.type, leave.start_date, leave.end_date)

        if not self._leaves.decide(leave_id, status=status, approved_by=user.user_id, decided_at=now or now_utc()):
            raise ValidationError("Leave request has already been processed")
        logger.info("Leave %s %s by user %s", leave_id, status.value, user.user_id)

        if leave.employee_user_id:
            self._activity.record(
                company_id=user.company_id,
                user_id=leave.employee_user_id,
                action=ActivityAction.LEAVE_STATUS_CHANGED,
                description=f"Leave request {status.value} by {user.name}",
            )
        if leave.employee_user_id != user.user_id:
            self._activity.record(
                company_id=user.company_id,
                user_id=user.user_id,
                action=ActivityAction.LEAVE_APPROVAL,
                description=f"{status.value} leave request #{leave_id}",
            )
        return self._leaves.get_by_id(leave_id) or leave

    def list(
        self,
        user: SessionUser,
        filters: LeaveFilters,
        page: PageRequest,
        *,
        now: Optional[datetime] = None,
    ) -> tuple[Page[LeaveRequest], Optional[LeaveQuota]]:
        """Paginated requests plus the quota summary when exactly one employee is in view."""
        if not user.is_management:
            employee = self._employees.get_by_user_id(user.user_id)
            if not employee:
                raise AuthorizationError("Not an employee")
            filters = replace(filters, employee_ids=[employee.id])

        result = self._leaves.list_page(user.company_id, filters, page)

        quota = None
        if len(filters.employee_ids) == 1:
            employee = self._employees.get_by_id(filters.employee_ids[0])
            if employee and employee.company_id == user.company_id:
                quota = self.quota_for(employee, local_date(now or now_utc(), self._tz).year)
        return result, quota
