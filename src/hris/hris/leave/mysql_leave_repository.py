from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import from_db_utc, to_db_utc
from ..common.pagination import Page, PageRequest
from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, placeholders
from .model import LeaveFilters, LeaveRequest
from .repository import LeaveRepository

_SELECT = """
    SELECT l.id, l.employee_id, l.company_id, l.type, l.start_date, l.end_date, l.reason, l.attachment,
           l.status, l.approved_by, l.created_at, l.updated_at,
           u.name AS employee_name, u.id AS employee_user_id, a.name AS approver_name
    FROM leave_requests l
    JOIN employees e ON e.id = l.employee_id
    JOIN users u ON u.id = e.user_id
    LEFT JOIN users a ON a.id = l.approved_by
"""


def _to_leave(row: dict) -> LeaveRequest:
    return LeaveRequest(
        id=int(row["id"]),
        employee_id=int(row["employee_id"]),
        company_id=int(row["company_id"]),
        type=LeaveType(row["type"]),
        start_date=normalize_mysql_date(row["start_date"]),
        end_date=normalize_mysql_date(row["end_date"]),
        reason=row["reason"],
        attachment=row.get("attachment"),
        status=LeaveStatus(row["status"]),
        approved_by=row.get("approved_by"),
        created_at=from_db_utc(row.get("created_at")),
        updated_at=from_db_utc(row.get("updated_at")),
        employee_name=row.get("employee_name"),
        employee_user_id=row.get("employee_user_id"),
        approver_name=row.get("approver_name"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE l.id=%s", (leave_id,))
            row = fetchone(cur)
            return _to_leave(row) if row else None

    def create(
        self,
        *,
        employee_id: int,
        company_id: int,
        type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        attachment: Optional[str],
        created_at: datetime,
    ) -> int:
        stamp = to_db_utc(created_at)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(employee_id, company_id, type, start_date, end_date, reason, attachment,
                                           status, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee_id,
                    company_id,
                    type.value,
                    start_date,
                    end_date,
                    reason,
                    attachment,
                    LeaveStatus.PENDING.value,
                    stamp,
                    stamp,
                ),
            )
            return int(cur.lastrowid)

    def list_page(self, company_id: int, filters: LeaveFilters, page: PageRequest) -> Page[LeaveRequest]:
        where = ["l.company_id=%s"]
        params: list = [company_id]
        if filters.status:
            where.append("l.status=%s")
            params.append(filters.status.value)
        if filters.type:
            where.append("l.type=%s")
            params.append(filters.type.value)
        if filters.search:
            where.append("(u.name LIKE %s OR l.reason LIKE %s)")
            params.extend([f"%{filters.search}%"] * 2)
        if filters.start_date:
            where.append("l.end_date >= %s")
            params.append(filters.start_date)
        if filters.end_date:
            where.append("l.start_date <= %s")
            params.append(filters.end_date)
        if filters.employee_ids:
            where.append(f"l.employee_id IN ({placeholders(filters.employee_ids)})")
            params.extend(filters.employee_ids)
        where_sql = " AND ".join(where)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM leave_requests l
                JOIN employees e ON e.id = l.employee_id
                JOIN users u ON u.id = e.user_id
                WHERE {where_sql}
                """,
                tuple(params),
            )
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                _SELECT + f" WHERE {where_sql} ORDER BY l.created_at DESC, l.id DESC LIMIT %s OFFSET %s",
                tuple(params) + (page.limit, page.offset),
            )
            items = [_to_leave(r) for r in fetchall(cur)]
        return Page(items=items, total=total, request=page)

    def approved_annual_days(self, employee_id: int, year: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COALESCE(SUM(DATEDIFF(end_date, start_date) + 1), 0) AS used
                FROM leave_requests
                WHERE employee_id=%s AND status=%s AND type=%s AND YEAR(start_date)=%s
                """,
                (employee_id, LeaveStatus.APPROVED.value, LeaveType.ANNUAL.value, year),
            )
            return int((fetchone(cur) or {}).get("used") or 0)

    def count_pending(self, company_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS total FROM leave_requests WHERE company_id=%s AND status=%s",
                (company_id, LeaveStatus.PENDING.value),
            )
            return int((fetchone(cur) or {}).get("total") or 0)

    def decide(self, leave_id: int, *, status: LeaveStatus, approved_by: int, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approved_by=%s, updated_at=%s
                WHERE id=%s AND status=%s
                """,
                (status.value, approved_by, to_db_utc(decided_at), leave_id, LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0
