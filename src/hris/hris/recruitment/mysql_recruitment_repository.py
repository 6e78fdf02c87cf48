from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import from_db_utc, to_db_utc
from ..common.pagination import Page, PageRequest
from ..core.enums import ApplicantStatus, EmploymentType, JobStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Applicant, JobPosting, JobSort
from .repository import ApplicantRepository, JobRepository

JOB_COLUMNS = (
    "position_id",
    "title",
    "description",
    "requirements",
    "location",
    "employment_type",
    "salary_min",
    "salary_max",
    "status",
    "posted_date",
    "closing_date",
    "created_by",
)

APPLICANT_COLUMNS = ("name", "email", "phone", "resume_url", "status", "notes")

_ORDER_BY = {
    JobSort.LATEST: "j.posted_date DESC, j.id DESC",
    JobSort.OLDEST: "j.posted_date ASC, j.id ASC",
    JobSort.AZ: "j.title ASC",
    JobSort.ZA: "j.title DESC",
}

_JOB_SELECT = """
    SELECT j.*, (SELECT COUNT(*) FROM applicants a WHERE a.job_id = j.id) AS applicant_count
    FROM job_postings j
"""

_APPLICANT_SELECT = """
    SELECT a.*, j.company_id, j.title AS job_title
    FROM applicants a
    JOIN job_postings j ON j.id = a.job_id
"""


def _db_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_db_utc(value)
    return value


def _to_job(row: dict) -> JobPosting:
    return JobPosting(
        id=int(row["id"]),
        company_id=int(row["company_id"]),
        position_id=row.get("position_id"),
        title=row["title"],
        description=row.get("description"),
        requirements=row.get("requirements"),
        location=row.get("location"),
        employment_type=EmploymentType(row.get("employment_type") or EmploymentType.FULL_TIME.value),
        salary_min=float(row["salary_min"]) if row.get("salary_min") is not None else None,
        salary_max=float(row["salary_max"]) if row.get("salary_max") is not None else None,
        status=JobStatus(row.get("status") or JobStatus.DRAFT.value),
        posted_date=from_db_utc(row.get("posted_date")),
        closing_date=normalize_mysql_date(row.get("closing_date")),
        created_by=row.get("created_by"),
        applicant_count=int(row.get("applicant_count") or 0),
    )


def _to_applicant(row: dict) -> Applicant:
    return Applicant(
        id=int(row["id"]),
        job_id=int(row["job_id"]),
        company_id=int(row["company_id"]),
        name=row["name"],
        email=row.get("email"),
        phone=row.get("phone"),
        resume_url=row.get("resume_url"),
        status=ApplicantStatus(row.get("status") or ApplicantStatus.NEW.value),
        notes=row.get("notes"),
        applied_at=from_db_utc(row.get("applied_at")),
        job_title=row.get("job_title"),
    )


def _insert(cur, table: str, allowed: Sequence[str], fixed: Mapping[str, Any], fields: Mapping[str, Any]) -> int:
    data = dict(fixed)
    data.update({c: _db_value(fields[c]) for c in allowed if c in fields})
    columns = ", ".join(data)
    marks = ", ".join(["%s"] * len(data))
    cur.execute(f"INSERT INTO {table} ({columns}) VALUES ({marks})", tuple(data.values()))
    return int(cur.lastrowid)


def _update(cur, table: str, allowed: Sequence[str], row_id: int, fields: Mapping[str, Any]) -> bool:
    columns = [c for c in allowed if c in fields]
    if not columns:
        return False
    assignments = ", ".join(f"{c}=%s" for c in columns)
    cur.execute(
        f"UPDATE {table} SET {assignments} WHERE id=%s",
        tuple(_db_value(fields[c]) for c in columns) + (row_id,),
    )
    return cur.rowcount > 0


class MySQLJobRepository(JobRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_page(
        self,
        company_id: int,
        *,
        page: PageRequest,
        q: Optional[str] = None,
        status: Optional[JobStatus] = None,
        sort: JobSort = JobSort.LATEST,
    ) -> Page[JobPosting]:
        where = ["j.company_id=%s"]
        params: list = [company_id]
        if q:
            where.append("(j.title LIKE %s OR j.location LIKE %s)")
            params.extend([f"%{q}%"] * 2)
        if status:
            where.append("j.status=%s")
            params.append(status.value)
        where_sql = " AND ".join(where)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM job_postings j WHERE {where_sql}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                _JOB_SELECT + f" WHERE {where_sql} ORDER BY {_ORDER_BY[sort]} LIMIT %s OFFSET %s",
                tuple(params) + (page.limit, page.offset),
            )
            items = [_to_job(r) for r in fetchall(cur)]
        return Page(items=items, total=total, request=page)

    def get_by_id(self, job_id: int) -> Optional[JobPosting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_JOB_SELECT + " WHERE j.id=%s", (job_id,))
            row = fetchone(cur)
            return _to_job(row) if row else None

    def create(self, company_id: int, fields: Mapping[str, Any]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return _insert(cur, "job_postings", JOB_COLUMNS, {"company_id": company_id}, fields)

    def update(self, job_id: int, fields: Mapping[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return _update(cur, "job_postings", JOB_COLUMNS, job_id, fields)

    def delete(self, job_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM job_postings WHERE id=%s", (job_id,))
            return cur.rowcount > 0


class MySQLApplicantRepository(ApplicantRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(
        self, company_id: int, *, job_id: Optional[int] = None, status: Optional[ApplicantStatus] = None
    ) -> Sequence[Applicant]:
        sql = _APPLICANT_SELECT + " WHERE j.company_id=%s"
        params: list = [company_id]
        if job_id is not None:
            sql += " AND a.job_id=%s"
            params.append(job_id)
        if status is not None:
            sql += " AND a.status=%s"
            params.append(status.value)
        sql += " ORDER BY a.applied_at DESC, a.id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_applicant(r) for r in fetchall(cur)]

    def get_by_id(self, applicant_id: int) -> Optional[Applicant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_APPLICANT_SELECT + " WHERE a.id=%s", (applicant_id,))
            row = fetchone(cur)
            return _to_applicant(row) if row else None

    def create(self, job_id: int, fields: Mapping[str, Any]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return _insert(cur, "applicants", APPLICANT_COLUMNS, {"job_id": job_id}, fields)

    def update(self, applicant_id: int, fields: Mapping[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return _update(cur, "applicants", APPLICANT_COLUMNS, applicant_id, fields)

    def delete(self, applicant_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM applicants WHERE id=%s", (applicant_id,))
            return cur.rowcount > 0
