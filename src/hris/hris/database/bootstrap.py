from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[4]
SCHEMA_PATH = REPO_ROOT / "database" / "schema.sql"
SEED_PATH = REPO_ROOT / "database" / "seed.sql"

DEMO_USERS = (
    # (name, username, email, password, role, has employee profile)
    ("Super Admin", "superadmin", "superadmin@hris.local", "superadmin123", "SUPERADMIN", False),
    ("Admin Demo", "admin", "admin@hris.local", "admin123", "ADMIN", False),
    ("Budi Santoso", "budi", "budi@hris.local", "employee123", "EMPLOYEE", True),
)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of the configured DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a SQL script on ';' outside of quoted strings."""
    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            continue
        if ch == ";" and quote is None:
            buf.pop()
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: Path) -> None:
    target = DBConfig.from_dict(db_config)
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    _run_script(db_config, Path(schema_path))
    logger.info("Schema applied from %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path = SEED_PATH) -> None:
    _run_script(db_config, Path(seed_path))
    logger.info("Seed applied from %s", seed_path)


def ensure_demo_users(db_config: dict, *, company_id: int = 1) -> None:
    """Upsert demo accounts with real password hashes (seed.sql cannot hash)."""
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        for name, username, email, password, role, has_employee in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT id FROM users WHERE username=%s", (username,))
            existing = cur.fetchone()
            if existing:
                user_id = int(existing["id"])
                cur.execute(
                    "UPDATE users SET name=%s, email=%s, password_hash=%s, role=%s, is_active=1 WHERE id=%s",
                    (name, email, password_hash, role, user_id),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (company_id, name, username, email, password_hash, role, is_active)
                    VALUES (%s, %s, %s, %s, %s, %s, 1)
                    """,
                    (company_id, name, username, email, password_hash, role),
                )
                user_id = int(cur.lastrowid)

            if has_employee:
                cur.execute("SELECT id FROM employees WHERE user_id=%s", (user_id,))
                if not cur.fetchone():
                    cur.execute(
                        """
                        INSERT INTO employees (user_id, company_id, position, base_salary, join_date)
                        VALUES (%s, %s, %s, %s, CURRENT_DATE)
                        """,
                        (user_id, company_id, "Staff", 8000000),
                    )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
