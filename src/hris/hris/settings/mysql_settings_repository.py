from __future__ import annotations

from typing import Mapping, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PayrollSetting
from .repository import PayrollSettingRepository, SystemSettingRepository


class MySQLSystemSettingRepository(SystemSettingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_map(self, company_id: int) -> dict[str, str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_key, value FROM system_settings WHERE company_id=%s", (company_id,))
            return {r["setting_key"]: r["value"] for r in fetchall(cur)}

    def upsert_many(self, company_id: int, values: Mapping[str, str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            for key, value in values.items():
                cur.execute(
                    """
                    INSERT INTO system_settings (company_id, setting_key, value, updated_at)
                    VALUES (%s, %s, %s, UTC_TIMESTAMP())
                    ON DUPLICATE KEY UPDATE value=VALUES(value), updated_at=UTC_TIMESTAMP()
                    """,
                    (company_id, key, value),
                )


class MySQLPayrollSettingRepository(PayrollSettingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_company(self, company_id: int) -> Sequence[PayrollSetting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT company_id, setting_key, value, label, description, is_active
                FROM payroll_settings
                WHERE company_id=%s
                ORDER BY id
                """,
                (company_id,),
            )
            return [
                PayrollSetting(
                    company_id=int(r["company_id"]),
                    key=r["setting_key"],
                    value=str(r["value"]),
                    label=r.get("label"),
                    description=r.get("description"),
                    is_active=bool(r.get("is_active", 1)),
                )
                for r in fetchall(cur)
            ]

    def save_many(self, company_id: int, items: Sequence[PayrollSetting]) -> int:
        written = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for item in items:
                cur.execute(
                    "SELECT id FROM payroll_settings WHERE setting_key=%s AND company_id=%s",
                    (item.key, company_id),
                )
                existing = fetchone(cur)
                if existing:
                    cur.execute(
                        "UPDATE payroll_settings SET value=%s, is_active=%s WHERE id=%s",
                        (item.value, int(item.is_active), existing["id"]),
                    )
                else:
                    cur.execute(
                        """
                        INSERT INTO payroll_settings (company_id, setting_key, value, label, description, is_active)
                        VALUES (%s, %s, %s, %s, %s, %s)
                        """,
                        (company_id, item.key, item.value, item.label, item.description, int(item.is_active)),
                    )
                written += 1
        return written
