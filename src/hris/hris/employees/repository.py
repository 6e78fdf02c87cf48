from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import Role
from .model import Employee, NewEmployee, User


class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_login(self, identifier: str) -> Optional[User]:
        """Look a user up by username or email."""
        raise NotImplementedError

    def username_exists(self, username: str) -> bool:
        raise NotImplementedError

    def email_exists(self, email: str) -> bool:
        raise NotImplementedError

    def list_by_roles(self, company_id: Optional[int], roles: Iterable[Role]) -> Sequence[User]:
        raise NotImplementedError

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
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def create_profile(self, *, user_id: int, company_id: int, position: Optional[str], join_date: date) -> int:
        """Attach an empty employee profile to an existing user."""
        raise NotImplementedError

    def create_with_user(self, new: NewEmployee) -> int:
        """Insert user + employee in one transaction; returns the employee id."""
        raise NotImplementedError

    def list_for_company(self, company_id: int) -> Sequence[Employee]:
        raise NotImplementedError

    def list_page(
        self,
        company_id: int,
        *,
        page: PageRequest,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        exclude_roles: Iterable[Role] = (),
    ) -> Page[Employee]:
        raise NotImplementedError

    def update(self, employee_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, employee_id: int) -> bool:
        """Remove the employee together with its user account."""
        raise NotImplementedError

    def update_base_salary(
        self,
        company_id: int,
        base_salary: float,
        *,
        department_id: Optional[int] = None,
        position_id: Optional[int] = None,
    ) -> int:
        """Set ``base_salary`` for the company's employees in one department or position."""
        raise NotImplementedError
