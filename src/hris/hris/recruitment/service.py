from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import now_utc, parse_optional_date
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_int, optional_number, require_choice, require_int, require_non_empty
from ..core.enums import ApplicantStatus, EmploymentType, JobStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import SessionUser
from ..organization.repository import PositionRepository
from .model import Applicant, JobPosting, JobSort
from .repository import ApplicantRepository, JobRepository

logger = logging.getLogger(__name__)

# payload key -> column; anything else (postedDate, createdBy, companyId...) is ignored on update
JOB_FIELDS = {
    "title": "title",
    "description": "description",
    "requirements": "requirements",
    "location": "location",
    "employmentType": "employment_type",
    "salaryMin": "salary_min",
    "salaryMax": "salary_max",
    "status": "status",
    "closingDate": "closing_date",
    "positionId": "position_id",
}

APPLICANT_FIELDS = {
    "name": "name",
    "email": "email",
    "phone": "phone",
    "resumeUrl": "resume_url",
    "status": "status",
    "notes": "notes",
}


def _require_management(user: SessionUser) -> None:
    if not user.is_management:
        raise AuthorizationError("Forbidden")


def _text(value: Any) -> Optional[str]:
    return (str(value).strip() or None) if value is not None else None


class JobPostingService:
    def __init__(self, jobs: JobRepository, positions: PositionRepository):
        self._jobs = jobs
        self._positions = positions

    def _job_fields(self, user: SessionUser, payload: Mapping[str, Any]) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for key, column in JOB_FIELDS.items():
            if key not in payload:
                continue
            value = payload.get(key)
            if column == "employment_type":
                value = require_choice(value, key, EmploymentType)
            elif column == "status":
                value = require_choice(value, key, JobStatus)
            elif column in ("salary_min", "salary_max"):
                value = optional_number(value, key)
            elif column == "closing_date":
                value = parse_optional_date(value)
            elif column == "position_id":
                value = optional_int(value, key)
                if value is not None:
                    position = self._positions.get_by_id(value)
                    if not position or position.company_id != user.company_id:
                        raise NotFoundError("Position not found")
            else:
                value = _text(value)
            fields[column] = value

        low, high = fields.get("salary_min"), fields.get("salary_max")
        if low is not None and high is not None and low > high:
            raise ValidationError("salaryMin cannot be greater than salaryMax")
        return fields

    def list(
        self,
        user: SessionUser,
        *,
        page: PageRequest,
        q: Optional[str] = None,
        status: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> Page[JobPosting]:
        return self._jobs.list_page(
            user.company_id,
            page=page,
            q=(q or "").strip() or None,
            status=require_choice(status, "status", JobStatus) if status else None,
            sort=require_choice(sort.upper(), "sort", JobSort) if sort else JobSort.LATEST,
        )

    def get(self, user: SessionUser, job_id: int) -> JobPosting:
        job = self._jobs.get_by_id(job_id)
        if not job or job.company_id != user.company_id:
            raise NotFoundError("Job posting not found")
        return job

    def create(self, user: SessionUser, payload: Mapping[str, Any], *, now: Optional[datetime] = None) -> JobPosting:
        _require_management(user)
        fields = self._job_fields(user, payload)

        if not fields.get("title"):
            position_id = fields.get("position_id")
            position = self._positions.get_by_id(position_id) if position_id else None
            if not position:
                raise ValidationError("Title is required")
            fields["title"] = position.title
        fields.setdefault("status", JobStatus.DRAFT)
        fields.setdefault("employment_type", EmploymentType.FULL_TIME)
        fields["posted_date"] = now or now_utc()
        fields["created_by"] = user.user_id

        job_id = self._jobs.create(user.company_id, fields)
        logger.info("Company %s created job posting %s (%s)", user.company_id, job_id, fields["title"])
        return self.get(user, job_id)

    def update(self, user: SessionUser, job_id: int, payload: Mapping[str, Any]) -> JobPosting:
        _require_management(user)
        self.get(user, job_id)
        fields = self._job_fields(user, payload)
        if not fields:
            raise ValidationError("Nothing to update")
        if "title" in fields and not fields["title"]:
            raise ValidationError("Title is required")
        self._jobs.update(job_id, fields)
        return self.get(user, job_id)

    def delete(self, user: SessionUser, job_id: int) -> None:
        _require_management(user)
        self.get(user, job_id)
        if not self._jobs.delete(job_id):
            raise NotFoundError("Job posting not found")


class ApplicantService:
    def __init__(self, applicants: ApplicantRepository, jobs: JobPostingService):
        self._applicants = applicants
        self._jobs = jobs

    def _applicant_fields(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for key, column in APPLICANT_FIELDS.items():
            if key not in payload:
                continue
            if column == "status":
                fields[column] = require_choice(payload.get(key), key, ApplicantStatus)
            elif column == "name":
                fields[column] = require_non_empty(payload.get(key), "Name")
            else:
                fields[column] = _text(payload.get(key))
        return fields

    def list(
        self, user: SessionUser, *, job_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[Applicant]:
        _require_management(user)
        if job_id is not None:
            self._jobs.get(user, job_id)
        return list(
            self._applicants.list(
                user.company_id,
                job_id=job_id,
                status=require_choice(status, "status", ApplicantStatus) if status else None,
            )
        )

    def get(self, user: SessionUser, applicant_id: int) -> Applicant:
        _require_management(user)
        applicant = self._applicants.get_by_id(applicant_id)
        if not applicant or applicant.company_id != user.company_id:
            raise NotFoundError("Applicant not found")
        return applicant

    def create(self, user: SessionUser, payload: Mapping[str, Any]) -> Applicant:
        _require_management(user)
        job = self._jobs.get(user, require_int(payload.get("jobId"), "jobId"))
        fields = self._applicant_fields(payload)
        if not fields.get("name"):
            raise ValidationError("Name is required")
        fields.setdefault("status", ApplicantStatus.NEW)

        applicant_id = self._applicants.create(job.id, fields)
        logger.info("Applicant %s added to job %s", applicant_id, job.id)
        return self.get(user, applicant_id)

    def update(self, user: SessionUser, applicant_id: int, payload: Mapping[str, Any]) -> Applicant:
        self.get(user, applicant_id)
        fields = self._applicant_fields(payload)
        if not fields:
            raise ValidationError("Nothing to update")
        self._applicants.update(applicant_id, fields)
        return self.get(user, applicant_id)

    def delete(self, user: SessionUser, applicant_id: int) -> None:
        self.get(user, applicant_id)
        if not self._applicants.delete(applicant_id):
            raise NotFoundError("Applicant not found")
