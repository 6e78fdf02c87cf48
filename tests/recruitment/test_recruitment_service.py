from datetime import datetime, timedelta, timezone

import pytest

from src.hris.hris.common.pagination import PageRequest
from src.hris.hris.core.enums import ApplicantStatus, EmploymentType, JobStatus, Role
from src.hris.hris.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hris.hris.recruitment.service import ApplicantService, JobPostingService

from tests.fakes import InMemoryApplicants, InMemoryJobs, InMemoryPositions, session_user

ADMIN = session_user(100, Role.ADMIN)
OTHER_ADMIN = session_user(200, Role.ADMIN, company_id=2)
NOW = datetime(2025, 3, 10, 2, 0, tzinfo=timezone.utc)


@pytest.fixture
def env():
    positions = InMemoryPositions()
    positions.create(company_id=1, department_id=None, title="Backend Engineer", level=3)
    jobs = InMemoryJobs()
    job_service = JobPostingService(jobs, positions)
    return job_service, ApplicantService(InMemoryApplicants(jobs), job_service), jobs


def test_create_job_defaults(env):
    job_service, *_ = env

    job = job_service.create(ADMIN, {"positionId": 1, "location": "Jakarta"}, now=NOW)

    assert job.title == "Backend Engineer"
    assert job.status == JobStatus.DRAFT
    assert job.employment_type == EmploymentType.FULL_TIME
    assert job.posted_date == NOW
    assert job.created_by == 100


def test_create_job_needs_title_or_position(env):
    job_service, *_ = env

    with pytest.raises(ValidationError, match="Title is required"):
        job_service.create(ADMIN, {"location": "Jakarta"}, now=NOW)


def test_create_job_validates_salary_range(env):
    job_service, *_ = env

    with pytest.raises(ValidationError, match="salaryMin"):
        job_service.create(ADMIN, {"title": "QA", "salaryMin": 9_000_000, "salaryMax": 5_000_000}, now=NOW)


def test_update_ignores_protected_fields(env):
    job_service, *_ = env
    job = job_service.create(ADMIN, {"title": "QA"}, now=NOW)

    updated = job_service.update(
        ADMIN,
        job.id,
        {"status": "OPEN", "postedDate": "2020-01-01", "createdBy": 5, "companyId": 2, "createdAt": "x"},
    )

    assert updated.status == JobStatus.OPEN
    assert updated.posted_date == NOW
    assert updated.created_by == 100
    assert updated.company_id == 1


def test_list_jobs_search_filter_and_sort(env):
    job_service, *_ = env
    for offset, (title, status) in enumerate([("Designer", "OPEN"), ("Accountant", "OPEN"), ("Cook", "CLOSED")]):
        job_service.create(ADMIN, {"title": title, "status": status}, now=NOW + timedelta(days=offset))

    latest = job_service.list(ADMIN, page=PageRequest())
    assert [j.title for j in latest.items] == ["Cook", "Accountant", "Designer"]

    az = job_service.list(ADMIN, page=PageRequest(), status="OPEN", sort="az")
    assert [j.title for j in az.items] == ["Accountant", "Designer"]

    found = job_service.list(ADMIN, page=PageRequest(limit=1), q="sign")
    assert found.metadata() == {"total": 1, "page": 1, "limit": 1, "totalPages": 1}

    with pytest.raises(ValidationError):
        job_service.list(ADMIN, page=PageRequest(), sort="RANDOM")


def test_jobs_are_company_scoped(env):
    job_service, *_ = env
    job = job_service.create(ADMIN, {"title": "QA"}, now=NOW)

    with pytest.raises(NotFoundError):
        job_service.get(OTHER_ADMIN, job.id)
    with pytest.raises(NotFoundError):
        job_service.delete(OTHER_ADMIN, job.id)
    with pytest.raises(AuthorizationError):
        job_service.create(session_user(1), {"title": "QA"}, now=NOW)


def test_applicant_lifecycle(env):
    job_service, applicants, _ = env
    job = job_service.create(ADMIN, {"title": "QA"}, now=NOW)

    applicant = applicants.create(ADMIN, {"jobId": job.id, "name": "Rina", "email": "rina@mail.id"})
    assert applicant.status == ApplicantStatus.NEW
    assert applicant.job_title == "QA"

    moved = applicants.update(ADMIN, applicant.id, {"status": "INTERVIEW", "notes": "Strong SQL"})
    assert (moved.status, moved.notes) == (ApplicantStatus.INTERVIEW, "Strong SQL")

    assert [a.id for a in applicants.list(ADMIN, job_id=job.id, status="INTERVIEW")] == [applicant.id]
    assert applicants.list(ADMIN, status="HIRED") == []

    with pytest.raises(NotFoundError):
        applicants.get(OTHER_ADMIN, applicant.id)

    applicants.delete(ADMIN, applicant.id)
    with pytest.raises(NotFoundError):
        applicants.get(ADMIN, applicant.id)


def test_applicant_needs_job_of_same_company(env):
    job_service, applicants, _ = env
    job = job_service.create(OTHER_ADMIN, {"title": "Driver"}, now=NOW)

    with pytest.raises(NotFoundError):
        applicants.create(ADMIN, {"jobId": job.id, "name": "Rina"})
    with pytest.raises(ValidationError):
        applicants.create(ADMIN, {"name": "Rina"})
