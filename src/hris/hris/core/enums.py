from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    SUPERADMIN = "SUPERADMIN"
    COMPANY_OWNER = "COMPANY_OWNER"
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    EMPLOYEE = "EMPLOYEE"

    @property
    def is_management(self) -> bool:
        return self in MANAGEMENT_ROLES


MANAGEMENT_ROLES = frozenset({Role.SUPERADMIN, Role.COMPANY_OWNER, Role.ADMIN})


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"


class CheckInStatus(str, Enum):
    ONTIME = "ONTIME"
    LATE = "LATE"


class CheckOutType(str, Enum):
    MANUAL = "MANUAL"
    AUTO = "AUTO"


class LeaveType(str, Enum):
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    PERMIT = "PERMIT"
    UNPAID = "UNPAID"


class LeaveStatus(str, Enum):
    """Approval flow state of a leave request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class PayrollStatus(str, Enum):
    """DRAFT rows are recomputed by generation; PAID rows are final."""

    DRAFT = "DRAFT"
    PAID = "PAID"


class JobStatus(str, Enum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class EmploymentType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"


class ApplicantStatus(str, Enum):
    NEW = "NEW"
    SCREENING = "SCREENING"
    INTERVIEW = "INTERVIEW"
    OFFERED = "OFFERED"
    HIRED = "HIRED"
    REJECTED = "REJECTED"


class NotificationCategory(str, Enum):
    GENERAL = "general"
    SYSTEM = "system"
    WA = "wa"


class ActivityAction(str, Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    CHECK_OUT_MANUAL = "CHECK_OUT_MANUAL"
    LEAVE_REQUEST_CREATED = "LEAVE_REQUEST_CREATED"
    LEAVE_STATUS_CHANGED = "LEAVE_STATUS_CHANGED"
    LEAVE_APPROVAL = "LEAVE_APPROVAL"
    EMPLOYEE_CREATED = "EMPLOYEE_CREATED"
    PAYROLL_GENERATED = "PAYROLL_GENERATED"
    ATTENDANCE_DELETED = "ATTENDANCE_DELETED"
    SALARY_BULK_UPDATED = "SALARY_BULK_UPDATED"


class SalaryTarget(str, Enum):
    """Grouping a bulk base-salary update applies to."""

    DEPARTMENT = "department"
    POSITION = "position"
