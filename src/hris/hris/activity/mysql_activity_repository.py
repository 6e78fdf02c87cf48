from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import from_db_utc
from ..common.pagination import Page, PageRequest
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ActivityLog
from .repository import ActivityLogRepository


class MySQLActivityLogRepository(ActivityLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, *, company_id: int, user_id: Optional[int], action: str, description: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_logs (company_id, user_id, action, description, created_at)
                VALUES (%s, %s, %s, %s, UTC_TIMESTAMP())
                """,
                (company_id, user_id, action, description),
            )
            return int(cur.lastrowid)

    def list_page(self, *, company_id: Optional[int], user_id: Optional[int], page: PageRequest) -> Page[ActivityLog]:
        where = ["1=1"]
        params: list = []
        if company_id is not None:
            where.append("a.company_id=%s")
            params.append(company_id)
        if user_id is not None:
            where.append("a.user_id=%s")
            params.append(user_id)
        where_sql = " AND ".join(where)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM activity_logs a WHERE {where_sql}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT a.id, a.company_id, a.user_id, a.action, a.description, a.created_at, u.name AS user_name
                FROM activity_logs a
                LEFT JOIN users u ON u.id = a.user_id
                WHERE {where_sql}
                ORDER BY a.created_at DESC, a.id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            items = [
                ActivityLog(
                    id=int(r["id"]),
                    company_id=int(r["company_id"]),
                    user_id=r.get("user_id"),
                    action=r["action"],
                    description=r["description"],
                    created_at=from_db_utc(r["created_at"]),
                    user_name=r.get("user_name"),
                )
                for r in fetchall(cur)
            ]
        return Page(items=items, total=total, request=page)

    def delete(self, log_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM activity_logs WHERE id=%s", (log_id,))
            return cur.rowcount > 0
