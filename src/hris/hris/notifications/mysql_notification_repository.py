from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import from_db_utc
from ..core.enums import NotificationCategory
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Notification, parse_target_roles
from .repository import NotificationRepository

COLUMNS = ("title", "message", "category", "target_roles", "is_active", "created_by")


def _to_notification(row: dict) -> Notification:
    return Notification(
        id=int(row["id"]),
        company_id=int(row["company_id"]),
        title=row["title"],
        message=row["message"],
        category=NotificationCategory(row.get("category") or NotificationCategory.GENERAL.value),
        target_roles=parse_target_roles(row.get("target_roles")),
        is_active=bool(row.get("is_active")),
        created_by=row.get("created_by"),
        created_at=from_db_utc(row.get("created_at")),
    )


def _db_value(column: str, value: Any) -> Any:
    if column == "category":
        return value.value
    if column == "target_roles":
        return ",".join(value)
    if column == "is_active":
        return 1 if value else 0
    return value


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_company(self, company_id: int, *, active_only: bool = False) -> Sequence[Notification]:
        sql = "SELECT * FROM notifications WHERE company_id=%s"
        if active_only:
            sql += " AND is_active=1"
        sql += " ORDER BY created_at DESC, id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (company_id,))
            return [_to_notification(r) for r in fetchall(cur)]

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM notifications WHERE id=%s", (notification_id,))
            row = fetchone(cur)
            return _to_notification(row) if row else None

    def create(self, company_id: int, fields: Mapping[str, Any]) -> int:
        columns = [c for c in COLUMNS if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO notifications (company_id, {", ".join(columns)}, created_at)
                VALUES (%s, {", ".join(["%s"] * len(columns))}, UTC_TIMESTAMP())
                """,
                (company_id,) + tuple(_db_value(c, fields[c]) for c in columns),
            )
            return int(cur.lastrowid)

    def update(self, notification_id: int, fields: Mapping[str, Any]) -> bool:
        columns = [c for c in COLUMNS if c in fields]
        if not columns:
            return False
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE notifications SET {', '.join(f'{c}=%s' for c in columns)} WHERE id=%s",
                tuple(_db_value(c, fields[c]) for c in columns) + (notification_id,),
            )
            return cur.rowcount > 0

    def delete(self, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM notifications WHERE id=%s", (notification_id,))
            return cur.rowcount > 0
