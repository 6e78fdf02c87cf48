from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

from ..common.datetime_utils import iso
from ..core.enums import ApplicantStatus, EmploymentType, JobStatus


class JobSort(str, Enum):
    LATEST = "LATEST"
    OLDEST = "OLDEST"
    AZ = "AZ"
    ZA = "ZA"


@dataclass(frozen=True)
class JobPosting:
    id: int
    company_id: int
    title: str
    status: JobStatus = JobStatus.DRAFT
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    position_id: Optional[int] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    posted_date: Optional[datetime] = None
    closing_date: Optional[date] = None
    created_by: Optional[int] = None
    applicant_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "companyId": self.company_id,
            "positionId": self.position_id,
            "title": self.title,
            "description": self.description,
            "requirements": self.requirements,
            "location": self.location,
            "employmentType": self.employment_type.value,
            "salaryMin": self.salary_min,
            "salaryMax": self.salary_max,
            "status": self.status.value,
            "postedDate": iso(self.posted_date),
            "closingDate": self.closing_date.isoformat() if self.closing_date else None,
            "createdBy": self.created_by,
            "applicantCount": self.applicant_count,
        }


@dataclass(frozen=True)
class Applicant:
    id: int
    job_id: int
    company_id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    resume_url: Optional[str] = None
    status: ApplicantStatus = ApplicantStatus.NEW
    notes: Optional[str] = None
    applied_at: Optional[datetime] = None
    job_title: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "jobId": self.job_id,
            "jobTitle": self.job_title,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "resumeUrl": self.resume_url,
            "status": self.status.value,
            "notes": self.notes,
            "appliedAt": iso(self.applied_at),
        }
