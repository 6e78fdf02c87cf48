"""In-memory repositories used by the service tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from src.hris.hris.activity.model import ActivityLog
from src.hris.hris.attendance.model import AttendanceHistoryRow, AttendanceRecord, HistoryFilters
from src.hris.hris.common.pagination import Page, PageRequest, paginate_list
from src.hris.hris.dashboard.model import AttendanceCounts
from src.hris.hris.core.enums import (
    ApplicantStatus,
    CheckInStatus,
    CheckOutType,
    LeaveStatus,
    LeaveType,
    PayrollStatus,
    Role,
)
from src.hris.hris.employees.model import Employee, NewEmployee, SessionUser, User
from src.hris.hris.leave.model import LeaveFilters, LeaveRequest
from src.hris.hris.notifications.model import Notification
from src.hris.hris.organization.model import Department, Position
from src.hris.hris.payroll.calculator.base import PayslipFigures
from src.hris.hris.payroll.model import GenerationResult, Payroll
from src.hris.hris.recruitment.model import Applicant, JobPosting, JobSort
from src.hris.hris.settings.model import PayrollSetting


def session_user(user_id: int = 1, role: Role = Role.EMPLOYEE, company_id: int = 1, name: str = "Budi") -> SessionUser:
    return SessionUser(user_id=user_id, company_id=company_id, role=role, name=name)


class InMemorySystemSettings:
    def __init__(self, values: Optional[dict[int, dict[str, str]]] = None):
        self.values = values or {}

    def get_map(self, company_id: int) -> dict[str, str]:
        return dict(self.values.get(company_id, {}))

    def upsert_many(self, company_id: int, values: Mapping[str, str]) -> None:
        self.values.setdefault(company_id, {}).update(values)


class InMemoryPayrollSettings:
    def __init__(self, rows: Iterable[PayrollSetting] = ()):
        self.rows = {(r.company_id, r.key): r for r in rows}

    def list_for_company(self, company_id: int) -> list[PayrollSetting]:
        return [r for (cid, _), r in self.rows.items() if cid == company_id]

    def save_many(self, company_id: int, settings) -> int:
        for s in settings:
            self.rows[(company_id, s.key)] = s
        return len(settings)


class InMemoryActivity:
    def __init__(self):
        self.logs: list[ActivityLog] = []

    def add(self, *, company_id: int, user_id: Optional[int], action: str, description: str) -> int:
        log = ActivityLog(
            id=len(self.logs) + 1,
            company_id=company_id,
            user_id=user_id,
            action=action,
            description=description,
            created_at=datetime(2025, 1, 1),
        )
        self.logs.append(log)
        return log.id

    def list_page(self, *, company_id: Optional[int], user_id: Optional[int], page: PageRequest) -> Page[ActivityLog]:
        rows = [
            log
            for log in reversed(self.logs)
            if (company_id is None or log.company_id == company_id) and (user_id is None or log.user_id == user_id)
        ]
        return paginate_list(rows, page)

    def delete(self, log_id: int) -> bool:
        before = len(self.logs)
        self.logs = [log for log in self.logs if log.id != log_id]
        return len(self.logs) < before

    @property
    def actions(self) -> list[str]:
        return [log.action for log in self.logs]


class InMemoryUsers:
    def __init__(self, users: Iterable[User] = ()):
        self.users = {u.id: u for u in users}

    def _next_id(self) -> int:
        return max(self.users, default=0) + 1

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_login(self, identifier: str) -> Optional[User]:
        for user in self.users.values():
            if identifier in (user.username, user.email):
                return user
        return None

    def username_exists(self, username: str) -> bool:
        return any(u.username == username for u in self.users.values())

    def email_exists(self, email: str) -> bool:
        return any(u.email == email for u in self.users.values())

    def list_by_roles(self, company_id: Optional[int], roles) -> list[User]:
        roles = set(roles)
        return [
            u for u in self.users.values() if u.role in roles and (company_id is None or u.company_id == company_id)
        ]

    def create_user(self, *, company_id, name, username, email, phone, password_hash, role) -> int:
        user_id = self._next_id()
        self.users[user_id] = User(
            id=user_id,
            company_id=company_id,
            name=name,
            username=username,
            email=email,
            phone=phone,
            password_hash=password_hash,
            role=role,
        )
        return user_id

    def delete_by_id(self, user_id: int) -> bool:
        return self.users.pop(user_id, None) is not None


class InMemoryEmployees:
    def __init__(self, employees: Iterable[Employee] = (), users: Optional[InMemoryUsers] = None):
        self.employees = {e.id: e for e in employees}
        self.users = users or InMemoryUsers()

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees.get(employee_id)

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        for employee in self.employees.values():
            if employee.user_id == user_id:
                return employee
        return None

    def create_profile(self, *, user_id: int, company_id: int, position: Optional[str], join_date: date) -> int:
        employee_id = max(self.employees, default=0) + 1
        self.employees[employee_id] = Employee(
            id=employee_id, user_id=user_id, company_id=company_id, position=position, join_date=join_date
        )
        return employee_id

    def create_with_user(self, new: NewEmployee) -> int:
        user_id = self.users.create_user(
            company_id=new.company_id,
            name=new.name,
            username=new.username,
            email=new.email,
            phone=new.phone,
            password_hash=new.password_hash,
            role=new.role,
        )
        employee_id = max(self.employees, default=0) + 1
        self.employees[employee_id] = Employee(
            id=employee_id,
            user_id=user_id,
            company_id=new.company_id,
            base_salary=new.base_salary,
            department_id=new.department_id,
            position_id=new.position_id,
            position=new.position,
            join_date=new.join_date,
            annual_leave_quota=new.annual_leave_quota,
            npwp=new.npwp,
            tax_status=new.tax_status,
            bpjs_kesehatan=new.bpjs_kesehatan,
            bpjs_ketenagakerjaan=new.bpjs_ketenagakerjaan,
            name=new.name,
            email=new.email,
            role=new.role,
        )
        return employee_id

    def list_for_company(self, company_id: int) -> list[Employee]:
        return [e for e in self.employees.values() if e.company_id == company_id]

    def list_page(self, company_id: int, *, page: PageRequest, search=None, department_id=None, exclude_roles=()):
        rows = [
            e
            for e in self.list_for_company(company_id)
            if e.role not in set(exclude_roles)
            and (department_id is None or e.department_id == department_id)
            and (not search or search.lower() in (e.name or "").lower())
        ]
        return paginate_list(rows, page)

    def update(self, employee_id: int, fields: Mapping[str, Any]) -> bool:
        current = self.employees.get(employee_id)
        if not current:
            return False
        known = {k: v for k, v in fields.items() if k in Employee.__dataclass_fields__}
        self.employees[employee_id] = replace(current, **known)
        return True

    def delete(self, employee_id: int) -> bool:
        employee = self.employees.pop(employee_id, None)
        if employee:
            self.users.delete_by_id(employee.user_id)
        return employee is not None

    def update_base_salary(self, company_id: int, base_salary: float, *, department_id=None, position_id=None) -> int:
        matched = [
            e
            for e in self.list_for_company(company_id)
            if (department_id is not None and e.department_id == department_id)
            or (position_id is not None and e.position_id == position_id)
        ]
        for e in matched:
            self.employees[e.id] = replace(e, base_salary=base_salary)
        return len(matched)


class InMemoryAttendance:
    def __init__(self, employees: Optional[InMemoryEmployees] = None):
        self.records: dict[int, AttendanceRecord] = {}
        self.employees = employees or InMemoryEmployees()
        self.history_calls: list[dict] = []

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        self.records[record.id] = record
        return record

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(attendance_id)

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for record in self.records.values():
            if record.employee_id == employee_id and record.work_date == work_date:
                return record
        return None

    def list_open_for_employee(self, employee_id: int) -> list[AttendanceRecord]:
        return [r for r in self.records.values() if r.employee_id == employee_id and r.is_open]

    def create_checkin(
        self,
        *,
        employee_id: int,
        company_id: int,
        work_date: date,
        check_in: datetime,
        check_in_status: CheckInStatus,
        latitude,
        longitude,
        address,
    ) -> int:
        if self.get_for_employee_and_date(employee_id, work_date):
            raise AssertionError("duplicate (employee_id, work_date)")
        attendance_id = max(self.records, default=0) + 1
        self.records[attendance_id] = AttendanceRecord(
            id=attendance_id,
            employee_id=employee_id,
            company_id=company_id,
            work_date=work_date,
            check_in=check_in,
            check_in_status=check_in_status,
            latitude=latitude,
            longitude=longitude,
            address=address,
        )
        return attendance_id

    def close(self, attendance_id: int, *, check_out: datetime, check_out_type: CheckOutType) -> bool:
        record = self.records.get(attendance_id)
        if not record or not record.is_open:
            return False
        self.records[attendance_id] = replace(record, check_out=check_out, check_out_type=check_out_type)
        return True

    def delete(self, attendance_id: int) -> bool:
        return self.records.pop(attendance_id, None) is not None

    def list_history(
        self,
        *,
        company_id: Optional[int],
        employee_id: Optional[int],
        filters: HistoryFilters,
        exclude_roles=(),
        limit: Optional[int] = None,
    ) -> list[AttendanceHistoryRow]:
        self.history_calls.append(
            {"company_id": company_id, "employee_id": employee_id, "exclude_roles": tuple(exclude_roles), "limit": limit}
        )
        rows = []
        for record in sorted(self.records.values(), key=lambda r: r.check_in, reverse=True):
            employee = self.employees.get_by_id(record.employee_id)
            if company_id is not None and record.company_id != company_id:
                continue
            if employee_id is not None and record.employee_id != employee_id:
                continue
            if employee and employee.role in set(exclude_roles):
                continue
            rows.append(AttendanceHistoryRow(record=record, employee_name=employee.name if employee else "?"))
        return rows[:limit] if limit else rows


class InMemoryLeaves:
    def __init__(self, employees: Optional[InMemoryEmployees] = None):
        self.leaves: dict[int, LeaveRequest] = {}
        self.employees = employees or InMemoryEmployees()

    def add(self, leave: LeaveRequest) -> LeaveRequest:
        self.leaves[leave.id] = leave
        return leave

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        return self.leaves.get(leave_id)

    def create(self, *, employee_id, company_id, type, start_date, end_date, reason, attachment, created_at) -> int:
        leave_id = max(self.leaves, default=0) + 1
        employee = self.employees.get_by_id(employee_id)
        self.leaves[leave_id] = LeaveRequest(
            id=leave_id,
            employee_id=employee_id,
            company_id=company_id,
            type=type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            attachment=attachment,
            created_at=created_at,
            employee_user_id=employee.user_id if employee else None,
        )
        return leave_id

    def list_page(self, company_id: int, filters: LeaveFilters, page: PageRequest) -> Page[LeaveRequest]:
        rows = [
            l
            for l in self.leaves.values()
            if l.company_id == company_id
            and (not filters.employee_ids or l.employee_id in filters.employee_ids)
            and (filters.status is None or l.status == filters.status)
        ]
        return paginate_list(rows, page)

    def approved_annual_days(self, employee_id: int, year: int) -> int:
        return sum(
            l.days
            for l in self.leaves.values()
            if l.employee_id == employee_id
            and l.type == LeaveType.ANNUAL
            and l.status == LeaveStatus.APPROVED
            and l.start_date.year == year
        )

    def count_pending(self, company_id: int) -> int:
        return sum(1 for l in self.leaves.values() if l.company_id == company_id and l.status == LeaveStatus.PENDING)

    def decide(self, leave_id: int, *, status: LeaveStatus, approved_by: int, decided_at: datetime) -> bool:
        leave = self.leaves.get(leave_id)
        if not leave or leave.status != LeaveStatus.PENDING:
            return False
        self.leaves[leave_id] = replace(leave, status=status, approved_by=approved_by, updated_at=decided_at)
        return True


class InMemoryPayrolls:
    def __init__(self):
        self.rows: dict[int, Payroll] = {}
        self.generation_calls = 0

    def _row(self, payroll_id: int, employee_id: int, company_id: int, period: date, f: PayslipFigures) -> Payroll:
        return Payroll(
            id=payroll_id,
            employee_id=employee_id,
            company_id=company_id,
            period=period,
            base_salary=f.base_salary,
            allowances=f.allowances,
            deductions=f.deductions,
            pph21=f.pph21,
            net_salary=f.net_salary,
            total_salary=f.total_salary,
        )

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        return self.rows.get(payroll_id)

    def list(self, company_id: int, *, year=None, month=None, employee_id=None) -> list[Payroll]:
        return [
            p
            for p in self.rows.values()
            if p.company_id == company_id
            and (year is None or p.year == year)
            and (month is None or p.month == month)
            and (employee_id is None or p.employee_id == employee_id)
        ]

    def get_for_period(self, company_id: int, period: date) -> dict[int, Payroll]:
        return {p.employee_id: p for p in self.rows.values() if p.company_id == company_id and p.period == period}

    def apply_generation(self, company_id: int, period: date, figures) -> GenerationResult:
        self.generation_calls += 1
        existing = self.get_for_period(company_id, period)
        inserted = updated = skipped = 0
        for employee_id, payslip in figures.items():
            current = existing.get(employee_id)
            if current is None:
                payroll_id = max(self.rows, default=0) + 1
                self.rows[payroll_id] = self._row(payroll_id, employee_id, company_id, period, payslip)
                inserted += 1
            elif current.status != PayrollStatus.DRAFT:
                skipped += 1
            else:
                self.rows[current.id] = self._row(current.id, employee_id, company_id, period, payslip)
                updated += 1
        return GenerationResult(inserted=inserted, updated=updated, skipped=skipped)

    def mark_paid(self, payroll_id: int) -> bool:
        row = self.rows.get(payroll_id)
        if not row or row.status != PayrollStatus.DRAFT:
            return False
        self.rows[payroll_id] = replace(row, status=PayrollStatus.PAID)
        return True


class InMemoryDashboard:
    """Aggregates computed over the attendance and leave fakes."""

    def __init__(self, attendance: InMemoryAttendance, leaves: InMemoryLeaves):
        self.attendance = attendance
        self.leaves = leaves

    def _role(self, employee_id: int):
        employee = self.attendance.employees.get_by_id(employee_id)
        return employee.role if employee else None

    def attendance_by_day(self, company_id, start, end, *, employee_id=None, exclude_roles=()):
        counts: dict[date, AttendanceCounts] = {}
        for r in self.attendance.records.values():
            if r.company_id != company_id or not start <= r.work_date <= end:
                continue
            if employee_id is not None and r.employee_id != employee_id:
                continue
            if self._role(r.employee_id) in set(exclude_roles):
                continue
            late = r.check_in_status == CheckInStatus.LATE
            counts[r.work_date] = counts.get(r.work_date, AttendanceCounts()) + AttendanceCounts(
                on_time=0 if late else 1, late=1 if late else 0
            )
        return counts

    def leave_status_counts(self, company_id, *, exclude_roles=()):
        counts: dict[LeaveStatus, int] = {}
        for leave in self.leaves.leaves.values():
            if leave.company_id != company_id or self._role(leave.employee_id) in set(exclude_roles):
                continue
            counts[leave.status] = counts.get(leave.status, 0) + 1
        return counts


class InMemoryDepartments:
    def __init__(self, positions: Optional["InMemoryPositions"] = None):
        self.departments: dict[int, Department] = {}
        self.positions = positions

    def list_with_counts(self, company_id: int) -> list[Department]:
        return [d for d in self.departments.values() if d.company_id == company_id]

    def get_by_id(self, department_id: int) -> Optional[Department]:
        return self.departments.get(department_id)

    def get_by_name(self, company_id: int, name: str) -> Optional[Department]:
        for d in self.departments.values():
            if d.company_id == company_id and d.name.lower() == name.lower():
                return d
        return None

    def create_with_positions(self, *, company_id, name, code, description, position_titles) -> int:
        department_id = max(self.departments, default=0) + 1
        self.departments[department_id] = Department(
            id=department_id, company_id=company_id, name=name, code=code, description=description
        )
        if self.positions is not None:
            for level, title in enumerate(position_titles, start=1):
                self.positions.create(company_id=company_id, department_id=department_id, title=title, level=level)
        return department_id

    def update(self, department_id: int, fields) -> bool:
        self.departments[department_id] = replace(self.departments[department_id], **fields)
        return True

    def delete(self, department_id: int) -> bool:
        return self.departments.pop(department_id, None) is not None


class InMemoryPositions:
    def __init__(self):
        self.positions: dict[int, Position] = {}

    def list(self, company_id: int, *, department_id=None) -> list[Position]:
        return [
            p
            for p in self.positions.values()
            if p.company_id == company_id and (department_id is None or p.department_id == department_id)
        ]

    def get_by_id(self, position_id: int) -> Optional[Position]:
        return self.positions.get(position_id)

    def create(self, *, company_id, department_id, title, level) -> int:
        position_id = max(self.positions, default=0) + 1
        self.positions[position_id] = Position(
            id=position_id, company_id=company_id, department_id=department_id, title=title, level=level
        )
        return position_id

    def update(self, position_id: int, fields) -> bool:
        self.positions[position_id] = replace(self.positions[position_id], **fields)
        return True

    def delete(self, position_id: int) -> bool:
        return self.positions.pop(position_id, None) is not None


_SORT_KEYS = {
    JobSort.LATEST: (lambda j: (j.posted_date, j.id), True),
    JobSort.OLDEST: (lambda j: (j.posted_date, j.id), False),
    JobSort.AZ: (lambda j: j.title, False),
    JobSort.ZA: (lambda j: j.title, True),
}


class InMemoryJobs:
    def __init__(self):
        self.jobs: dict[int, JobPosting] = {}

    def list_page(self, company_id: int, *, page: PageRequest, q=None, status=None, sort=JobSort.LATEST):
        rows = [
            j
            for j in self.jobs.values()
            if j.company_id == company_id
            and (status is None or j.status == status)
            and (not q or q.lower() in j.title.lower())
        ]
        key, reverse = _SORT_KEYS[sort]
        return paginate_list(sorted(rows, key=key, reverse=reverse), page)

    def get_by_id(self, job_id: int) -> Optional[JobPosting]:
        return self.jobs.get(job_id)

    def create(self, company_id: int, fields) -> int:
        job_id = max(self.jobs, default=0) + 1
        self.jobs[job_id] = JobPosting(id=job_id, company_id=company_id, **fields)
        return job_id

    def update(self, job_id: int, fields) -> bool:
        self.jobs[job_id] = replace(self.jobs[job_id], **fields)
        return True

    def delete(self, job_id: int) -> bool:
        return self.jobs.pop(job_id, None) is not None


class InMemoryApplicants:
    def __init__(self, jobs: InMemoryJobs):
        self.applicants: dict[int, Applicant] = {}
        self.jobs = jobs

    def list(self, company_id: int, *, job_id=None, status: Optional[ApplicantStatus] = None) -> list[Applicant]:
        return [
            a
            for a in self.applicants.values()
            if a.company_id == company_id
            and (job_id is None or a.job_id == job_id)
            and (status is None or a.status == status)
        ]

    def get_by_id(self, applicant_id: int) -> Optional[Applicant]:
        return self.applicants.get(applicant_id)

    def create(self, job_id: int, fields) -> int:
        applicant_id = max(self.applicants, default=0) + 1
        job = self.jobs.get_by_id(job_id)
        self.applicants[applicant_id] = Applicant(
            id=applicant_id, job_id=job_id, company_id=job.company_id, job_title=job.title, **fields
        )
        return applicant_id

    def update(self, applicant_id: int, fields) -> bool:
        self.applicants[applicant_id] = replace(self.applicants[applicant_id], **fields)
        return True

    def delete(self, applicant_id: int) -> bool:
        return self.applicants.pop(applicant_id, None) is not None


class InMemoryNotifications:
    def __init__(self):
        self.rows: dict[int, Notification] = {}

    def list_for_company(self, company_id: int, *, active_only: bool = False) -> list[Notification]:
        return [n for n in self.rows.values() if n.company_id == company_id and (n.is_active or not active_only)]

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        return self.rows.get(notification_id)

    def create(self, company_id: int, fields) -> int:
        notification_id = max(self.rows, default=0) + 1
        self.rows[notification_id] = Notification(id=notification_id, company_id=company_id, **fields)
        return notification_id

    def update(self, notification_id: int, fields) -> bool:
        self.rows[notification_id] = replace(self.rows[notification_id], **fields)
        return True

    def delete(self, notification_id: int) -> bool:
        return self.rows.pop(notification_id, None) is not None


class ScriptedCursor:
    def __init__(self, conn: "ScriptedConnection"):
        self._conn = conn
        self._rows: list = []
        self.rowcount = 0
        self.lastrowid = None

    def execute(self, sql: str, params=()):
        sql = " ".join(sql.split())
        params = tuple(params or ())
        self._conn.factory.executed.append((sql, params))
        outcome = self._conn.factory.respond(sql, params)
        if isinstance(outcome, BaseException):
            raise outcome
        outcome = outcome or {}
        self._rows = list(outcome.get("rows", []))
        self.rowcount = outcome.get("rowcount", len(self._rows))
        self.lastrowid = outcome.get("lastrowid")

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class ScriptedConnection:
    def __init__(self, factory: "ScriptedConnectionFactory"):
        self.factory = factory

    def cursor(self, dictionary: bool = True):
        return ScriptedCursor(self)

    def commit(self):
        self.factory.commits += 1

    def rollback(self):
        self.factory.rollbacks += 1

    def close(self):
        pass


class ScriptedConnectionFactory:
    """Stands in for DatabaseConnection; ``respond(sql, params)`` returns rows/rowcount or an exception."""

    def __init__(self, respond=None):
        self.respond = respond or (lambda sql, params: None)
        self.executed: list[tuple[str, tuple]] = []
        self.commits = 0
        self.rollbacks = 0

    def connect(self):
        return ScriptedConnection(self)
