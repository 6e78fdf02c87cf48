from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional

from ..core.enums import CheckInStatus, LeaveStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_date, placeholders
from .model import AttendanceCounts
from .repository import DashboardRepository


def _role_filter(exclude_roles: Iterable[Role], where: list, params: list) -> None:
    roles = [r.value for r in exclude_roles]
    if roles:
        where.append(f"u.role NOT IN ({placeholders(roles)})")
        params.extend(roles)


class MySQLDashboardRepository(DashboardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def attendance_by_day(
        self,
        company_id: int,
        start: date,
        end: date,
        *,
        employee_id: Optional[int] = None,
        exclude_roles: Iterable[Role] = (),
    ) -> Mapping[date, AttendanceCounts]:
        where = ["a.company_id=%s", "a.work_date BETWEEN %s AND %s"]
        params: list = [company_id, start, end]
        if employee_id is not None:
            where.append("a.employee_id=%s")
            params.append(employee_id)
        _role_filter(exclude_roles, where, params)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.work_date,
                       SUM(a.check_in_status=%s) AS on_time,
                       SUM(a.check_in_status=%s) AS late
                FROM attendance a
                JOIN employees e ON e.id = a.employee_id
                JOIN users u ON u.id = e.user_id
                WHERE {' AND '.join(where)}
                GROUP BY a.work_date
                """,
                (CheckInStatus.ONTIME.value, CheckInStatus.LATE.value) + tuple(params),
            )
            return {
                normalize_mysql_date(r["work_date"]): AttendanceCounts(
                    on_time=int(r["on_time"] or 0), late=int(r["late"] or 0)
                )
                for r in fetchall(cur)
            }

    def leave_status_counts(self, company_id: int, *, exclude_roles: Iterable[Role] = ()) -> Mapping[LeaveStatus, int]:
        where = ["l.company_id=%s"]
        params: list = [company_id]
        _role_filter(exclude_roles, where, params)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT l.status, COUNT(*) AS total
                FROM leave_requests l
                JOIN employees e ON e.id = l.employee_id
                JOIN users u ON u.id = e.user_id
                WHERE {' AND '.join(where)}
                GROUP BY l.status
                """,
                tuple(params),
            )
            return {LeaveStatus(r["status"]): int(r["total"]) for r in fetchall(cur)}
