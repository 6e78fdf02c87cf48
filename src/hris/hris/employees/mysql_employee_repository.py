from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, placeholders
from .model import Employee, NewEmployee
from .repository import EmployeeRepository

_SELECT = """
    SELECT e.id, e.user_id, e.company_id, e.department_id, e.position_id, e.position, e.base_salary,
           e.join_date, e.annual_leave_quota, e.npwp, e.tax_status, e.bpjs_kesehatan, e.bpjs_ketenagakerjaan,
           u.name, u.email, u.role, d.name AS department_name
    FROM employees e
    JOIN users u ON u.id = e.user_id
    LEFT JOIN departments d ON d.id = e.department_id
"""

UPDATABLE_COLUMNS = (
    "department_id",
    "position_id",
    "position",
    "base_salary",
    "join_date",
    "annual_leave_quota",
    "npwp",
    "tax_status",
    "bpjs_kesehatan",
    "bpjs_ketenagakerjaan",
)


def _to_employee(row: dict) -> Employee:
    return Employee(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        company_id=int(row["company_id"]),
        department_id=row.get("department_id"),
        position_id=row.get("position_id"),
        position=row.get("position"),
        base_salary=float(row.get("base_salary") or 0),
        join_date=normalize_mysql_date(row.get("join_date")),
        annual_leave_quota=int(row.get("annual_leave_quota") or 0),
        npwp=row.get("npwp"),
        tax_status=row.get("tax_status") or "TK/0",
        bpjs_kesehatan=bool(row.get("bpjs_kesehatan")),
        bpjs_ketenagakerjaan=bool(row.get("bpjs_ketenagakerjaan")),
        name=row.get("name"),
        email=row.get("email"),
        role=Role(row["role"]) if row.get("role") else None,
        department_name=row.get("department_name"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.id=%s", (employee_id,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.user_id=%s", (user_id,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def create_profile(self, *, user_id: int, company_id: int, position: Optional[str], join_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(user_id, company_id, position, base_salary, join_date)
                VALUES(%s,%s,%s,0,%s)
                """,
                (user_id, company_id, position, join_date),
            )
            return int(cur.lastrowid)

    def create_with_user(self, new: NewEmployee) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(company_id, name, username, email, phone, password_hash, role, is_active, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,1,UTC_TIMESTAMP())
                """,
                (new.company_id, new.name, new.username, new.email, new.phone, new.password_hash, new.role.value),
            )
            user_id = int(cur.lastrowid)
            cur.execute(
                """
                INSERT INTO employees(user_id, company_id, department_id, position_id, position, base_salary,
                                      join_date, annual_leave_quota, npwp, tax_status,
                                      bpjs_kesehatan, bpjs_ketenagakerjaan)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user_id,
                    new.company_id,
                    new.department_id,
                    new.position_id,
                    new.position,
                    new.base_salary,
                    new.join_date,
                    new.annual_leave_quota,
                    new.npwp,
                    new.tax_status,
                    int(new.bpjs_kesehatan),
                    int(new.bpjs_ketenagakerjaan),
                ),
            )
            return int(cur.lastrowid)

    def list_for_company(self, company_id: int) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.company_id=%s ORDER BY u.name", (company_id,))
            return [_to_employee(r) for r in fetchall(cur)]

    def list_page(
        self,
        company_id: int,
        *,
        page: PageRequest,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        exclude_roles: Iterable[Role] = (),
    ) -> Page[Employee]:
        where = ["e.company_id=%s"]
        params: list = [company_id]
        excluded = [r.value for r in exclude_roles]
        if excluded:
            where.append(f"u.role NOT IN ({placeholders(excluded)})")
            params.extend(excluded)
        if search:
            where.append("(u.name LIKE %s OR u.email LIKE %s OR u.username LIKE %s)")
            params.extend([f"%{search}%"] * 3)
        if department_id is not None:
            where.append("e.department_id=%s")
            params.append(department_id)
        where_sql = " AND ".join(where)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(*) AS total FROM employees e JOIN users u ON u.id = e.user_id WHERE {where_sql}",
                tuple(params),
            )
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                _SELECT + f" WHERE {where_sql} ORDER BY u.name LIMIT %s OFFSET %s",
                tuple(params) + (page.limit, page.offset),
            )
            items = [_to_employee(r) for r in fetchall(cur)]
        return Page(items=items, total=total, request=page)

    def update(self, employee_id: int, fields: Mapping[str, Any]) -> bool:
        columns = [c for c in UPDATABLE_COLUMNS if c in fields]
        user_columns = [c for c in ("name", "email", "phone") if c in fields]
        if not columns and not user_columns:
            return False

        with db_cursor(self._conn_factory) as (_, cur):
            changed = False
            if columns:
                assignments = ", ".join(f"{c}=%s" for c in columns)
                cur.execute(
                    f"UPDATE employees SET {assignments} WHERE id=%s",
                    tuple(fields[c] for c in columns) + (employee_id,),
                )
                changed = cur.rowcount > 0
            if user_columns:
                assignments = ", ".join(f"u.{c}=%s" for c in user_columns)
                cur.execute(
                    f"UPDATE users u JOIN employees e ON e.user_id = u.id SET {assignments} WHERE e.id=%s",
                    tuple(fields[c] for c in user_columns) + (employee_id,),
                )
                changed = changed or cur.rowcount > 0
            return changed

    def delete(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM employees WHERE id=%s", (employee_id,))
            row = fetchone(cur)
            if not row:
                return False
            cur.execute("DELETE FROM employees WHERE id=%s", (employee_id,))
            cur.execute("DELETE FROM users WHERE id=%s", (row["user_id"],))
            return True

    def update_base_salary(
        self,
        company_id: int,
        base_salary: float,
        *,
        department_id: Optional[int] = None,
        position_id: Optional[int] = None,
    ) -> int:
        if (department_id is None) == (position_id is None):
            raise ValueError("exactly one of department_id or position_id is required")
        column, target_id = ("department_id", department_id) if department_id is not None else ("position_id", position_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE employees SET base_salary=%s WHERE company_id=%s AND {column}=%s",
                (base_salary, company_id, target_id),
            )
            return cur.rowcount
