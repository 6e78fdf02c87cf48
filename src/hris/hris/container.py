from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from .activity.mysql_activity_repository import MySQLActivityLogRepository
from .activity.service import ActivityLogService
from .attendance.factory import CheckInStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import business_tz
from .dashboard.mysql_dashboard_repository import MySQLDashboardRepository
from .dashboard.service import DashboardService
from .core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_UTC_OFFSET_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.mysql_user_repository import MySQLUserRepository
from .employees.service import AccountService, AuthService, EmployeeService
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.service import LeaveService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.service import NotificationService
from .organization.mysql_organization_repository import MySQLDepartmentRepository, MySQLPositionRepository
from .organization.service import DepartmentService, PositionService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .recruitment.mysql_recruitment_repository import MySQLApplicantRepository, MySQLJobRepository
from .recruitment.service import ApplicantService, JobPostingService
from .settings.mysql_settings_repository import MySQLPayrollSettingRepository, MySQLSystemSettingRepository
from .settings.service import PayrollSettingsService, SystemSettingsService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    activity_service: ActivityLogService
    system_settings_service: SystemSettingsService
    payroll_settings_service: PayrollSettingsService
    auth_service: AuthService
    employee_service: EmployeeService
    account_service: AccountService
    attendance_service: AttendanceService
    department_service: DepartmentService
    position_service: PositionService
    leave_service: LeaveService
    payroll_service: PayrollService
    job_service: JobPostingService
    applicant_service: ApplicantService
    notification_service: NotificationService
    dashboard_service: DashboardService


def build_container(*, db_config: dict, settings: Optional[ModuleType] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    tz = business_tz(float(getattr(settings, "UTC_OFFSET_HOURS", DEFAULT_UTC_OFFSET_HOURS)))

    users_repo = MySQLUserRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    departments_repo = MySQLDepartmentRepository(conn)
    positions_repo = MySQLPositionRepository(conn)
    payrolls_repo = MySQLPayrollRepository(conn)

    activity_service = ActivityLogService(MySQLActivityLogRepository(conn))
    system_settings_service = SystemSettingsService(
        MySQLSystemSettingRepository(conn),
        lock_retries=int(getattr(settings, "DB_LOCK_RETRIES", 3)),
    )
    payroll_settings_service = PayrollSettingsService(MySQLPayrollSettingRepository(conn))
    job_service = JobPostingService(MySQLJobRepository(conn), positions_repo)
    leave_service = LeaveService(leaves_repo, employees_repo, system_settings_service, activity_service, tz=tz)

    return Container(
        conn=conn,
        activity_service=activity_service,
        system_settings_service=system_settings_service,
        payroll_settings_service=payroll_settings_service,
        auth_service=AuthService(users_repo),
        employee_service=EmployeeService(employees_repo, users_repo, departments_repo, positions_repo, activity_service),
        account_service=AccountService(users_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            employees_repo,
            system_settings_service,
            activity_service,
            tz=tz,
            strategy_factory=CheckInStrategyFactory(),
            history_limit=int(getattr(settings, "HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)),
        ),
        department_service=DepartmentService(departments_repo),
        position_service=PositionService(positions_repo, departments_repo),
        leave_service=leave_service,
        payroll_service=PayrollService(
            payrolls_repo,
            employees_repo,
            payroll_settings_service,
            activity_service,
            lock_retries=int(getattr(settings, "DB_LOCK_RETRIES", 3)),
        ),
        job_service=job_service,
        applicant_service=ApplicantService(MySQLApplicantRepository(conn), job_service),
        notification_service=NotificationService(MySQLNotificationRepository(conn), leaves_repo),
        dashboard_service=DashboardService(
            MySQLDashboardRepository(conn),
            employees_repo,
            attendance_repo,
            departments_repo,
            positions_repo,
            leave_service,
            tz=tz,
        ),
    )
