from __future__ import annotations

import logging
import time as time_module
from typing import Any, Optional

from ..activity.service import ActivityLogService
from ..common.validators import optional_int
from ..core.enums import ActivityAction, PayrollStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..database.mysql_base import run_with_retry
from ..employees.model import SessionUser
from ..employees.repository import EmployeeRepository
from ..settings.service import PayrollSettingsService
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import GenerationResult, Payroll, period_of
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


def _month_year(month: Any, year: Any) -> tuple[int, int]:
    if month in (None, "") or year in (None, ""):
        raise ValidationError("Month and Year are required")
    month_i = optional_int(month, "month")
    year_i = optional_int(year, "year")
    if not 1 <= month_i <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if not 1900 <= year_i <= 9999:
        raise ValidationError("Year is out of range")
    return month_i, year_i


class PayrollService:
    """Use cases: generate monthly DRAFT payroll, list it, finalize rows as PAID."""

    def __init__(
        self,
        payrolls: PayrollRepository,
        employees: EmployeeRepository,
        settings: PayrollSettingsService,
        activity: ActivityLogService,
        *,
        calculator: PayrollCalculator | None = None,
        lock_retries: int = 3,
        retry_delay: float = 0.1,
        sleep=time_module.sleep,
    ):
        self._payrolls = payrolls
        self._employees = employees
        self._settings = settings
        self._activity = activity
        self._calculator = calculator or StandardPayrollCalculator()
        self._lock_retries = int(lock_retries)
        self._retry_delay = float(retry_delay)
        self._sleep = sleep

    def generate(self, user: SessionUser, month: Any, year: Any) -> GenerationResult:
        """(Re)compute the period for every employee of the company.

        Rows still in DRAFT are overwritten with fresh figures; any other status
        is left untouched, so re-running converges to the same DRAFT values.
        """
        if not user.is_management:
            raise AuthorizationError("Forbidden")
        month_i, year_i = _month_year(month, year)
        period = period_of(year_i, month_i)

        settings = self._settings.settings_map(user.company_id)
        figures = {
            employee.id: self._calculator.calculate(employee, settings)
            for employee in self._employees.list_for_company(user.company_id)
        }

        result = run_with_retry(
            lambda: self._payrolls.apply_generation(user.company_id, period, figures),
            retries=self._lock_retries,
            delay=self._retry_delay,
            sleep=self._sleep,
        )
        logger.info(
            "Payroll %04d-%02d for company %s: inserted=%s updated=%s skipped=%s",
            year_i, month_i, user.company_id, result.inserted, result.updated, result.skipped,
        )
        self._activity.record(
            company_id=user.company_id,
            user_id=user.user_id,
            action=ActivityAction.PAYROLL_GENERATED,
            description=f"Generated payroll {year_i:04d}-{month_i:02d} ({result.count} records)",
        )
        return result

    def list(self, user: SessionUser, *, month: Any = None, year: Any = None) -> list[Payroll]:
        month_i = optional_int(month, "month")
        year_i = optional_int(year, "year")
        employee_id: Optional[int] = None
        if not user.is_management:
            employee = self._employees.get_by_user_id(user.user_id)
            if not employee:
                raise AuthorizationError("Not an employee")
            employee_id = employee.id
        return list(self._payrolls.list(user.company_id, year=year_i, month=month_i, employee_id=employee_id))

    def mark_paid(self, user: SessionUser, payroll_id: int) -> Payroll:
        if not user.is_management:
            raise AuthorizationError("Forbidden")
        payroll = self._payrolls.get_by_id(payroll_id)
        if not payroll or payroll.company_id != user.company_id:
            raise NotFoundError("Payroll record not found")
        if payroll.status != PayrollStatus.DRAFT or not self._payrolls.mark_paid(payroll_id):
            raise ValidationError("Only DRAFT payroll can be marked as paid")
        return self._payrolls.get_by_id(payroll_id) or payroll
