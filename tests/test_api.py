from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

from src.hris.hris.activity.service import ActivityLogService
from src.hris.hris.attendance.service import AttendanceService
from src.hris.hris.core.enums import Role
from src.hris.hris.employees.model import Employee, User
from src.hris.hris.employees.service import AuthService
from src.hris.hris.main import create_app
from src.hris.hris.payroll.service import PayrollService
from src.hris.hris.settings.service import PayrollSettingsService, SystemSettingsService

from tests.fakes import (
    InMemoryActivity,
    InMemoryAttendance,
    InMemoryEmployees,
    InMemoryPayrollSettings,
    InMemoryPayrolls,
    InMemorySystemSettings,
    InMemoryUsers,
)


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    users = InMemoryUsers(
        [
            User(
                id=1,
                company_id=1,
                name="Budi",
                username="budi",
                email="budi@corp.id",
                phone=None,
                password_hash=generate_password_hash("Secret123!"),
                role=Role.EMPLOYEE,
            )
        ]
    )
    employees = InMemoryEmployees(
        [Employee(id=10, user_id=1, company_id=1, name="Budi", base_salary=10_000_000, npwp="1")], users=users
    )
    activity = ActivityLogService(InMemoryActivity())
    system_settings = SystemSettingsService(
        InMemorySystemSettings(
            {1: {"office_latitude": "-6.2", "office_longitude": "106.816666", "attendance_radius_meters": "100"}}
        )
    )
    container = SimpleNamespace(
        auth_service=AuthService(users),
        activity_service=activity,
        system_settings_service=system_settings,
        payroll_settings_service=PayrollSettingsService(InMemoryPayrollSettings()),
        attendance_service=AttendanceService(InMemoryAttendance(employees), employees, system_settings, activity),
        payroll_service=PayrollService(
            InMemoryPayrolls(), employees, PayrollSettingsService(InMemoryPayrollSettings()), activity
        ),
    )
    app = create_app(container)
    return app.test_client()


def _login_as(client, user_id, role, name="Someone"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["company_id"] = 1
        sess["role"] = role.value
        sess["name"] = name


def test_requires_login(client):
    response = client.get("/api/attendance")

    assert response.status_code == 401
    assert response.get_json() == {"error": "Unauthorized"}


def test_login_and_session(client):
    bad = client.post("/api/auth/login", json={"username": "budi", "password": "nope"})
    assert bad.status_code == 401
    assert bad.get_json()["error"] == "Invalid username or password"

    ok = client.post("/api/auth/login", json={"username": "budi", "password": "Secret123!"})
    assert ok.status_code == 200
    assert client.get("/api/auth/session").get_json()["role"] == "EMPLOYEE"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/session").status_code == 401


def test_check_in_outside_radius_returns_400(client):
    _login_as(client, 1, Role.EMPLOYEE)

    response = client.post("/api/attendance", json={"latitude": -6.3, "longitude": 106.816666})

    assert response.status_code == 400
    assert "outside the attendance radius" in response.get_json()["error"]


def test_check_in_then_history(client):
    _login_as(client, 1, Role.EMPLOYEE)

    created = client.post("/api/attendance", json={"latitude": -6.2, "longitude": 106.816666})
    assert created.status_code == 201

    history = client.get("/api/attendance").get_json()
    assert history["todayDateAttendance"]["id"] == created.get_json()["attendance"]["id"]
    assert len(history["history"]) == 1

    export = client.get("/api/attendance/export.csv")
    assert export.mimetype == "text/csv"
    assert b"employeeName" in export.data


def test_management_routes_reject_employees(client):
    _login_as(client, 1, Role.EMPLOYEE)

    assert client.post("/api/system/settings", json={"office_start_time": "08:00"}).status_code == 403
    assert client.post("/api/payroll", json={"month": 3, "year": 2025}).status_code == 403


def test_settings_validation_error_is_json(client):
    _login_as(client, 100, Role.ADMIN)

    response = client.put("/api/system/settings", json={"office_latitude": "123"})

    assert response.status_code == 400
    assert "office_latitude" in response.get_json()["error"]


def test_payroll_generate_and_export(client):
    _login_as(client, 100, Role.ADMIN)

    generated = client.post("/api/payroll", json={"month": 3, "year": 2025})
    assert generated.get_json()["count"] == 1

    listed = client.get("/api/payroll?month=3&year=2025").get_json()
    assert listed[0]["netSalary"] == 9_350_000

    export = client.get("/api/payroll/export.xlsx?month=3&year=2025")
    assert export.status_code == 200
    assert export.data[:2] == b"PK"


def test_unknown_route_is_json_404(client):
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert "error" in response.get_json()


def test_attendance_delete_is_management_only(client):
    _login_as(client, 1, Role.EMPLOYEE)
    created = client.post("/api/attendance", json={"latitude": -6.2, "longitude": 106.816666}).get_json()
    attendance_id = created["attendance"]["id"]

    assert client.delete(f"/api/attendance/{attendance_id}").status_code == 403

    _login_as(client, 100, Role.ADMIN)
    assert client.delete(f"/api/attendance/{attendance_id}").status_code == 200
    missing = client.delete(f"/api/attendance/{attendance_id}")
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "Attendance record not found"


def test_history_all_flag_is_accepted(client):
    _login_as(client, 1, Role.EMPLOYEE)

    response = client.get("/api/attendance?all=true")

    assert response.status_code == 200
    assert response.get_json()["history"] == []


def test_bulk_salary_update_rejects_employees(client):
    _login_as(client, 1, Role.EMPLOYEE)

    response = client.post("/api/employees/bulk-update", json={"type": "department", "id": 1, "baseSalary": 1})

    assert response.status_code == 403
