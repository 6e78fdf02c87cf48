from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.constants import DEFAULT_ANNUAL_LEAVE_QUOTA, DEFAULT_TAX_STATUS
from ..core.enums import Role


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    company_id: int
    role: Role
    name: str

    @property
    def is_management(self) -> bool:
        return self.role.is_management


@dataclass(frozen=True)
class User:
    """Login account. Plain data, no DB access."""

    id: int
    company_id: int
    name: str
    username: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    password_hash: str
    role: Role
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "companyId": self.company_id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "phone": self.phone,
            "role": self.role.value,
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class Employee:
    """Employment record attached to a user (payroll and attendance hang off it)."""

    id: int
    user_id: int
    company_id: int
    base_salary: float = 0.0
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    position: Optional[str] = None
    join_date: Optional[date] = None
    annual_leave_quota: int = DEFAULT_ANNUAL_LEAVE_QUOTA
    npwp: Optional[str] = None
    tax_status: str = DEFAULT_TAX_STATUS
    bpjs_kesehatan: bool = True
    bpjs_ketenagakerjaan: bool = True
    # joined columns
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None
    department_name: Optional[str] = None

    @property
    def has_npwp(self) -> bool:
        return bool(self.npwp and self.npwp.strip())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "companyId": self.company_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value if self.role else None,
            "departmentId": self.department_id,
            "departmentName": self.department_name,
            "positionId": self.position_id,
            "position": self.position,
            "baseSalary": self.base_salary,
            "joinDate": self.join_date.isoformat() if self.join_date else None,
            "annualLeaveQuota": self.annual_leave_quota,
            "npwp": self.npwp,
            "taxStatus": self.tax_status,
            "bpjsKesehatan": self.bpjs_kesehatan,
            "bpjsKetenagakerjaan": self.bpjs_ketenagakerjaan,
        }


@dataclass(frozen=True)
class NewEmployee:
    company_id: int
    name: str
    username: str
    email: Optional[str]
    phone: Optional[str]
    password_hash: str
    role: Role
    base_salary: float = 0.0
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    position: Optional[str] = None
    join_date: Optional[date] = None
    annual_leave_quota: int = DEFAULT_ANNUAL_LEAVE_QUOTA
    npwp: Optional[str] = None
    tax_status: str = DEFAULT_TAX_STATUS
    bpjs_kesehatan: bool = True
    bpjs_ketenagakerjaan: bool = True
