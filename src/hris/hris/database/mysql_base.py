from __future__ import annotations

import logging
import time as time_module
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOCK_ERRNOS = frozenset({errorcode.ER_LOCK_WAIT_TIMEOUT, errorcode.ER_LOCK_DEADLOCK})


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on any error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def placeholders(values: Sequence[Any]) -> str:
    return ",".join(["%s"] * len(values))


def is_lock_error(exc: BaseException) -> bool:
    return isinstance(exc, mysql.connector.Error) and getattr(exc, "errno", None) in LOCK_ERRNOS


def run_with_retry(operation: Callable[[], T], *, retries: int = 3, delay: float = 0.1, sleep=time_module.sleep) -> T:
    """Run ``operation`` again when MySQL reports a lock wait timeout or deadlock.

    Waits ``delay * attempt`` seconds between attempts. Other errors propagate
    immediately; the last lock error propagates once attempts run out.
    """

    attempt = 1
    while True:
        try:
            return operation()
        except mysql.connector.Error as e:
            if not is_lock_error(e) or attempt >= retries:
                raise
            logger.warning("Database locked (errno=%s), retry %s/%s", e.errno, attempt, retries)
            sleep(delay * attempt)
            attempt += 1


def normalize_mysql_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()
