from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import ApplicantStatus, JobStatus
from .model import Applicant, JobPosting, JobSort


class JobRepository(Protocol):
    def list_page(
        self,
        company_id: int,
        *,
        page: PageRequest,
        q: Optional[str] = None,
        status: Optional[JobStatus] = None,
        sort: JobSort = JobSort.LATEST,
    ) -> Page[JobPosting]:
        raise NotImplementedError

    def get_by_id(self, job_id: int) -> Optional[JobPosting]:
        raise NotImplementedError

    def create(self, company_id: int, fields: Mapping[str, Any]) -> int:
        raise NotImplementedError

    def update(self, job_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, job_id: int) -> bool:
        raise NotImplementedError


class ApplicantRepository(Protocol):
    def list(
        self, company_id: int, *, job_id: Optional[int] = None, status: Optional[ApplicantStatus] = None
    ) -> Sequence[Applicant]:
        raise NotImplementedError

    def get_by_id(self, applicant_id: int) -> Optional[Applicant]:
        raise NotImplementedError

    def create(self, job_id: int, fields: Mapping[str, Any]) -> int:
        raise NotImplementedError

    def update(self, applicant_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, applicant_id: int) -> bool:
        raise NotImplementedError
