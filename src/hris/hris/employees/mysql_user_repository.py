from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import User
from .repository import UserRepository

_COLUMNS = "id, company_id, name, username, email, phone, password_hash, role, is_active"


def _to_user(row: dict) -> User:
    return User(
        id=int(row["id"]),
        company_id=int(row["company_id"]),
        name=row["name"],
        username=row.get("username"),
        email=row.get("email"),
        phone=row.get("phone"),
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_login(self, identifier: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE username=%s OR email=%s ORDER BY id LIMIT 1",
                (identifier, identifier),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def username_exists(self, username: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM users WHERE username=%s", (username,))
            return fetchone(cur) is not None

    def email_exists(self, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM users WHERE email=%s", (email,))
            return fetchone(cur) is not None

    def list_by_roles(self, company_id: Optional[int], roles: Iterable[Role]) -> Sequence[User]:
        role_values = [r.value for r in roles]
        if not role_values:
            return []
        sql = f"SELECT {_COLUMNS} FROM users WHERE role IN ({placeholders(role_values)})"
        params: list = list(role_values)
        if company_id is not None:
            sql += " AND company_id=%s"
            params.append(company_id)
        sql += " ORDER BY id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        company_id: int,
        name: str,
        username: str,
        email: Optional[str],
        phone: Optional[str],
        password_hash: str,
        role: Role,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(company_id, name, username, email, phone, password_hash, role, is_active, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,1,UTC_TIMESTAMP())
                """,
                (company_id, name, username, email, phone, password_hash, role.value),
            )
            return int(cur.lastrowid)

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE id=%s", (user_id,))
            return cur.rowcount > 0
