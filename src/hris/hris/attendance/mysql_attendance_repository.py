from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import from_db_utc, to_db_utc
from ..core.enums import AttendanceStatus, CheckInStatus, CheckOutType, Role
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, placeholders
from .model import AttendanceHistoryRow, AttendanceRecord, HistoryFilters
from .repository import AttendanceRepository

_COLUMNS = """
    a.id, a.employee_id, a.company_id, a.work_date, a.check_in, a.check_out,
    a.status, a.check_in_status, a.check_out_type, a.latitude, a.longitude, a.address
"""


def _to_record(row: dict) -> AttendanceRecord:
    return AttendanceRecord(
        id=int(row["id"]),
        employee_id=int(row["employee_id"]),
        company_id=int(row["company_id"]),
        work_date=normalize_mysql_date(row["work_date"]),
        check_in=from_db_utc(row["check_in"]),
        check_out=from_db_utc(row.get("check_out")),
        status=AttendanceStatus(row.get("status") or AttendanceStatus.PRESENT.value),
        check_in_status=CheckInStatus(row.get("check_in_status") or CheckInStatus.ONTIME.value),
        check_out_type=CheckOutType(row["check_out_type"]) if row.get("check_out_type") else None,
        latitude=row.get("latitude"),
        longitude=row.get("longitude"),
        address=row.get("address"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance a WHERE a.id=%s", (attendance_id,))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance a WHERE a.employee_id=%s AND a.work_date=%s",
                (employee_id, work_date),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def list_open_for_employee(self, employee_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance a WHERE a.employee_id=%s AND a.check_out IS NULL ORDER BY a.work_date",
                (employee_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_checkin(
        self,
        *,
        employee_id: int,
        company_id: int,
        work_date: date,
        check_in: datetime,
        check_in_status: CheckInStatus,
        latitude: Optional[float],
        longitude: Optional[float],
        address: Optional[str],
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(employee_id, company_id, work_date, check_in, status, check_in_status,
                                           latitude, longitude, address)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        employee_id,
                        company_id,
                        work_date,
                        to_db_utc(check_in),
                        AttendanceStatus.PRESENT.value,
                        check_in_status.value,
                        latitude,
                        longitude,
                        address,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            # uq_attendance_employee_date: a concurrent request checked in first
            raise ValidationError("Already checked in") from exc

    def close(self, attendance_id: int, *, check_out: datetime, check_out_type: CheckOutType) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance SET check_out=%s, check_out_type=%s WHERE id=%s AND check_out IS NULL",
                (to_db_utc(check_out), check_out_type.value, attendance_id),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE id=%s", (attendance_id,))
            return cur.rowcount > 0

    def list_history(
        self,
        *,
        company_id: Optional[int],
        employee_id: Optional[int],
        filters: HistoryFilters,
        exclude_roles: Iterable[Role] = (),
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceHistoryRow]:
        where = ["1=1"]
        params: list = []
        if company_id is not None:
            where.append("a.company_id=%s")
            params.append(company_id)
        if employee_id is not None:
            where.append("a.employee_id=%s")
            params.append(employee_id)
        excluded = [r.value for r in exclude_roles]
        if excluded:
            where.append(f"u.role NOT IN ({placeholders(excluded)})")
            params.extend(excluded)
        if filters.employee_ids:
            where.append(f"a.employee_id IN ({placeholders(filters.employee_ids)})")
            params.extend(filters.employee_ids)
        if filters.roles:
            where.append(f"u.role IN ({placeholders(filters.roles)})")
            params.extend(r.value for r in filters.roles)
        if filters.search:
            where.append("u.name LIKE %s")
            params.append(f"%{filters.search}%")
        if filters.start_date:
            where.append("a.work_date >= %s")
            params.append(filters.start_date)
        if filters.end_date:
            where.append("a.work_date <= %s")
            params.append(filters.end_date)

        sql = f"""
            SELECT {_COLUMNS}, u.name AS employee_name, u.role AS user_role, d.name AS department_name
            FROM attendance a
            JOIN employees e ON e.id = a.employee_id
            JOIN users u ON u.id = e.user_id
            LEFT JOIN departments d ON d.id = e.department_id
            WHERE {' AND '.join(where)}
            ORDER BY a.work_date DESC, a.check_in DESC
        """
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                AttendanceHistoryRow(
                    record=_to_record(r),
                    employee_name=r.get("employee_name") or "",
                    role=Role(r["user_role"]) if r.get("user_role") else None,
                    department_name=r.get("department_name"),
                )
                for r in fetchall(cur)
            ]
