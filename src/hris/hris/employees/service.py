from __future__ import annotations

import logging
import random
from datetime import date
from typing import Any, Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..activity.service import ActivityLogService
from ..common.datetime_utils import parse_optional_date
from ..common.pagination import Page, PageRequest
from ..common.validators import (
    as_bool,
    optional_int,
    require_choice,
    require_int,
    require_non_empty,
    require_number,
    validate_password,
)
from ..core.constants import DEFAULT_ANNUAL_LEAVE_QUOTA, DEFAULT_TAX_STATUS
from ..core.enums import ActivityAction, Role, SalaryTarget
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..organization.repository import DepartmentRepository, PositionRepository
from ..payroll.tax import PTKP_ANNUAL
from .model import Employee, NewEmployee, SessionUser, User
from .repository import EmployeeRepository, UserRepository
from .username import base_username, unique_username

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, identifier: str, password: str) -> SessionUser:
        identifier = (identifier or "").strip()
        user = self._users.get_by_login(identifier) if identifier else None
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # unknown hash method, e.g. placeholder values in seed data
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        return SessionUser(user_id=user.id, company_id=user.company_id, role=user.role, name=user.name)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _tax_status(value: Any) -> str:
    status = (str(value).strip().upper() if value else DEFAULT_TAX_STATUS)
    if status not in PTKP_ANNUAL:
        raise ValidationError(f"Unknown tax status: {status}")
    return status


def _salary(value: Any) -> float:
    salary = require_number(value, "baseSalary")
    if salary < 0:
        raise ValidationError("baseSalary cannot be negative")
    return salary


class EmployeeService:
    """Use case: manage employees of a company (management only)."""

    def __init__(
        self,
        employees: EmployeeRepository,
        users: UserRepository,
        departments: DepartmentRepository,
        positions: PositionRepository,
        activity: ActivityLogService,
        *,
        rng: Optional[random.Random] = None,
    ):
        self._employees = employees
        self._users = users
        self._departments = departments
        self._positions = positions
        self._activity = activity
        self._rng = rng

    @staticmethod
    def _require_management(user: SessionUser) -> None:
        if not user.is_management:
            raise AuthorizationError("Forbidden")

    def _department_id(self, company_id: int, value: Any) -> Optional[int]:
        department_id = optional_int(value, "departmentId")
        if department_id is not None:
            department = self._departments.get_by_id(department_id)
            if not department or department.company_id != company_id:
                raise ValidationError("Department not found")
        return department_id

    def _position_id(self, company_id: int, value: Any, department_id: Optional[int] = None) -> Optional[int]:
        position_id = optional_int(value, "positionId")
        if position_id is not None:
            position = self._positions.get_by_id(position_id)
            if not position or position.company_id != company_id:
                raise ValidationError("Position not found")
            if department_id is not None and position.department_id not in (None, department_id):
                raise ValidationError("Position does not belong to the department")
        return position_id

    def list(
        self,
        user: SessionUser,
        *,
        page: PageRequest,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
    ) -> Page[Employee]:
        self._require_management(user)
        return self._employees.list_page(
            user.company_id,
            page=page,
            search=(search or "").strip() or None,
            department_id=department_id,
            exclude_roles=(Role.ADMIN, Role.SUPERADMIN),
        )

    def get(self, user: SessionUser, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee or employee.company_id != user.company_id:
            raise NotFoundError("Employee not found")
        if not user.is_management and employee.user_id != user.user_id:
            raise AuthorizationError("Forbidden")
        return employee

    def create(self, user: SessionUser, payload: Mapping[str, Any]) -> Employee:
        self._require_management(user)

        name = require_non_empty(payload.get("name"), "Name")
        password = validate_password(payload.get("password"))
        email = _optional_str(payload.get("email"))
        phone = _optional_str(payload.get("phone"))
        if email and self._users.email_exists(email):
            raise ValidationError("Email already exists")

        base = base_username(username=_optional_str(payload.get("username")), phone=phone, email=email, name=name)
        username = unique_username(base, self._users.username_exists, rng=self._rng)

        quota = payload.get("annualLeaveQuota")
        department_id = self._department_id(user.company_id, payload.get("departmentId"))
        new = NewEmployee(
            company_id=user.company_id,
            name=name,
            username=username,
            email=email,
            phone=phone,
            password_hash=generate_password_hash(password),
            role=Role.EMPLOYEE,
            base_salary=_salary(payload.get("baseSalary") or 0),
            department_id=department_id,
            position_id=self._position_id(user.company_id, payload.get("positionId"), department_id),
            position=_optional_str(payload.get("position")) or "Staff",
            join_date=parse_optional_date(payload.get("joinDate")) or date.today(),
            annual_leave_quota=require_int(quota, "annualLeaveQuota") if quota not in (None, "") else DEFAULT_ANNUAL_LEAVE_QUOTA,
            npwp=_optional_str(payload.get("npwp")),
            tax_status=_tax_status(payload.get("taxStatus")),
            bpjs_kesehatan=as_bool(payload.get("bpjsKesehatan", True)),
            bpjs_ketenagakerjaan=as_bool(payload.get("bpjsKetenagakerjaan", True)),
        )
        employee_id = self._employees.create_with_user(new)
        logger.info("Company %s created employee %s (%s)", user.company_id, employee_id, username)

        created = self._employees.get_by_id(employee_id)
        if not created:
            raise NotFoundError("Employee not found")
        self._activity.record(
            company_id=user.company_id,
            user_id=created.user_id,
            action=ActivityAction.EMPLOYEE_CREATED,
            description=f"Employee account {username} created by {user.name}",
        )
        return created

    def update(self, user: SessionUser, employee_id: int, payload: Mapping[str, Any]) -> Employee:
        self._require_management(user)
        self.get(user, employee_id)

        fields: dict[str, Any] = {}
        if "name" in payload:
            fields["name"] = require_non_empty(payload.get("name"), "Name")
        if "email" in payload:
            fields["email"] = _optional_str(payload.get("email"))
        if "phone" in payload:
            fields["phone"] = _optional_str(payload.get("phone"))
        if "baseSalary" in payload:
            fields["base_salary"] = _salary(payload.get("baseSalary"))
        if "departmentId" in payload:
            fields["department_id"] = self._department_id(user.company_id, payload.get("departmentId"))
        if "positionId" in payload:
            fields["position_id"] = self._position_id(
                user.company_id, payload.get("positionId"), fields.get("department_id")
            )
        if "position" in payload:
            fields["position"] = _optional_str(payload.get("position"))
        if "joinDate" in payload:
            fields["join_date"] = parse_optional_date(payload.get("joinDate"))
        if "annualLeaveQuota" in payload:
            fields["annual_leave_quota"] = require_int(payload.get("annualLeaveQuota"), "annualLeaveQuota")
        if "npwp" in payload:
            fields["npwp"] = _optional_str(payload.get("npwp"))
        if "taxStatus" in payload:
            fields["tax_status"] = _tax_status(payload.get("taxStatus"))
        if "bpjsKesehatan" in payload:
            fields["bpjs_kesehatan"] = as_bool(payload.get("bpjsKesehatan"))
        if "bpjsKetenagakerjaan" in payload:
            fields["bpjs_ketenagakerjaan"] = as_bool(payload.get("bpjsKetenagakerjaan"))

        if not fields:
            raise ValidationError("Nothing to update")
        self._employees.update(employee_id, fields)
        return self.get(user, employee_id)

    def delete(self, user: SessionUser, employee_id: int) -> None:
        self._require_management(user)
        employee = self.get(user, employee_id)
        if employee.user_id == user.user_id:
            raise ValidationError("You cannot delete your own account")
        if not self._employees.delete(employee_id):
            raise NotFoundError("Employee not found")

    def bulk_update_salary(self, user: SessionUser, payload: Mapping[str, Any]) -> int:
        """Set one base salary for every employee of a department or position.

        Returns how many employee rows matched.
        """
        self._require_management(user)
        target = require_choice(payload.get("type"), "type", SalaryTarget)
        target_id = require_int(payload.get("id"), "id")
        if payload.get("baseSalary") in (None, ""):
            raise ValidationError("baseSalary is required")
        salary = require_number(payload.get("baseSalary"), "baseSalary")
        if salary <= 0:
            raise ValidationError("baseSalary must be greater than zero")

        if target == SalaryTarget.DEPARTMENT:
            self._department_id(user.company_id, target_id)
            count = self._employees.update_base_salary(user.company_id, salary, department_id=target_id)
        else:
            self._position_id(user.company_id, target_id)
            count = self._employees.update_base_salary(user.company_id, salary, position_id=target_id)

        logger.info("Company %s set base salary %s for %s %s (%s rows)", user.company_id, salary, target.value, target_id, count)
        self._activity.record(
            company_id=user.company_id,
            user_id=user.user_id,
            action=ActivityAction.SALARY_BULK_UPDATED,
            description=f"Base salary of {target.value} {target_id} set to {salary:,.0f} for {count} employees by {user.name}",
        )
        return count


class AccountService:
    """Use case: manage ADMIN / COMPANY_OWNER accounts of a company."""

    MANAGED_ROLES = (Role.ADMIN, Role.COMPANY_OWNER)

    def __init__(self, users: UserRepository):
        self._users = users

    def list(self, user: SessionUser, role: Role) -> list[User]:
        if not user.is_management:
            raise AuthorizationError("Forbidden")
        company_id = None if user.role == Role.SUPERADMIN else user.company_id
        return list(self._users.list_by_roles(company_id, [role]))

    def create(self, user: SessionUser, payload: Mapping[str, Any]) -> User:
        role = require_choice(payload.get("role") or Role.ADMIN.value, "role", Role)
        if role not in self.MANAGED_ROLES:
            raise ValidationError("role must be ADMIN or COMPANY_OWNER")
        if not user.is_management:
            raise AuthorizationError("Forbidden")
        if role == Role.COMPANY_OWNER and user.role not in (Role.SUPERADMIN, Role.COMPANY_OWNER):
            raise AuthorizationError("Only SUPERADMIN or COMPANY_OWNER can create owners")

        name = require_non_empty(payload.get("name"), "Name")
        password = validate_password(payload.get("password"))
        email = _optional_str(payload.get("email"))
        if email and self._users.email_exists(email):
            raise ValidationError("Email already exists")

        company_id = user.company_id
        if user.role == Role.SUPERADMIN and payload.get("companyId") not in (None, ""):
            company_id = require_int(payload.get("companyId"), "companyId")

        base = base_username(
            username=_optional_str(payload.get("username")),
            phone=_optional_str(payload.get("phone")),
            email=email,
            name=name,
        )
        user_id = self._users.create_user(
            company_id=company_id,
            name=name,
            username=unique_username(base, self._users.username_exists),
            email=email,
            phone=_optional_str(payload.get("phone")),
            password_hash=generate_password_hash(password),
            role=role,
        )
        created = self._users.get_by_id(user_id)
        if not created:
            raise NotFoundError("User not found")
        return created

    def delete(self, user: SessionUser, user_id: int, role: Role = Role.ADMIN) -> None:
        """Delete an account holding ``role``; other users are not reachable here."""
        if role not in self.MANAGED_ROLES:
            raise ValidationError("role must be ADMIN or COMPANY_OWNER")
        if user.role not in (Role.SUPERADMIN, Role.COMPANY_OWNER):
            raise AuthorizationError("Only SUPERADMIN or COMPANY_OWNER can delete accounts")
        if user_id == user.user_id:
            raise ValidationError("You cannot delete your own account")

        target = self._users.get_by_id(user_id)
        if (
            not target
            or target.role != role
            or (user.role != Role.SUPERADMIN and target.company_id != user.company_id)
        ):
            raise NotFoundError(f"{role.value} account not found")
        if not self._users.delete_by_id(user_id):
            raise NotFoundError(f"{role.value} account not found")
        logger.info("User %s deleted %s account %s", user.user_id, role.value, user_id)
