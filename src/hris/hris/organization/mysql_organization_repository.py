from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Department, Position
from .repository import DepartmentRepository, PositionRepository

_DEPARTMENT_SELECT = """
    SELECT d.id, d.company_id, d.name, d.code, d.description,
           (SELECT COUNT(*) FROM employees e WHERE e.department_id = d.id) AS employee_count
    FROM departments d
"""

_POSITION_SELECT = """
    SELECT p.id, p.company_id, p.department_id, p.title, p.level, d.name AS department_name
    FROM positions p
    LEFT JOIN departments d ON d.id = p.department_id
"""


def _to_department(row: dict) -> Department:
    return Department(
        id=int(row["id"]),
        company_id=int(row["company_id"]),
        name=row["name"],
        code=row.get("code"),
        description=row.get("description"),
        employee_count=int(row.get("employee_count") or 0),
    )


def _to_position(row: dict) -> Position:
    return Position(
        id=int(row["id"]),
        company_id=int(row["company_id"]),
        department_id=row.get("department_id"),
        title=row["title"],
        level=int(row.get("level") or 0),
        department_name=row.get("department_name"),
    )


def _update(cur, table: str, allowed: Sequence[str], row_id: int, fields: Mapping[str, Any]) -> bool:
    columns = [c for c in allowed if c in fields]
    if not columns:
        return False
    assignments = ", ".join(f"{c}=%s" for c in columns)
    cur.execute(f"UPDATE {table} SET {assignments} WHERE id=%s", tuple(fields[c] for c in columns) + (row_id,))
    return cur.rowcount > 0


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_with_counts(self, company_id: int) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_DEPARTMENT_SELECT + " WHERE d.company_id=%s ORDER BY d.name", (company_id,))
            return [_to_department(r) for r in fetchall(cur)]

    def get_by_id(self, department_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_DEPARTMENT_SELECT + " WHERE d.id=%s", (department_id,))
            row = fetchone(cur)
            return _to_department(row) if row else None

    def get_by_name(self, company_id: int, name: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_DEPARTMENT_SELECT + " WHERE d.company_id=%s AND d.name=%s", (company_id, name))
            row = fetchone(cur)
            return _to_department(row) if row else None

    def create_with_positions(
        self,
        *,
        company_id: int,
        name: str,
        code: Optional[str],
        description: Optional[str],
        position_titles: Sequence[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO departments(company_id, name, code, description) VALUES(%s,%s,%s,%s)",
                (company_id, name, code, description),
            )
            department_id = int(cur.lastrowid)
            for level, title in enumerate(position_titles, start=1):
                cur.execute(
                    "INSERT INTO positions(company_id, department_id, title, level) VALUES(%s,%s,%s,%s)",
                    (company_id, department_id, title, level),
                )
            return department_id

    def update(self, department_id: int, fields: Mapping[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return _update(cur, "departments", ("name", "code", "description"), department_id, fields)

    def delete(self, department_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM departments WHERE id=%s", (department_id,))
            return cur.rowcount > 0


class MySQLPositionRepository(PositionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(self, company_id: int, *, department_id: Optional[int] = None) -> Sequence[Position]:
        sql = _POSITION_SELECT + " WHERE p.company_id=%s"
        params: list = [company_id]
        if department_id is not None:
            sql += " AND p.department_id=%s"
            params.append(department_id)
        sql += " ORDER BY d.name, p.level, p.title"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_position(r) for r in fetchall(cur)]

    def get_by_id(self, position_id: int) -> Optional[Position]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_POSITION_SELECT + " WHERE p.id=%s", (position_id,))
            row = fetchone(cur)
            return _to_position(row) if row else None

    def create(self, *, company_id: int, department_id: Optional[int], title: str, level: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO positions(company_id, department_id, title, level) VALUES(%s,%s,%s,%s)",
                (company_id, department_id, title, level),
            )
            return int(cur.lastrowid)

    def update(self, position_id: int, fields: Mapping[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return _update(cur, "positions", ("department_id", "title", "level"), position_id, fields)

    def delete(self, position_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM positions WHERE id=%s", (position_id,))
            return cur.rowcount > 0
