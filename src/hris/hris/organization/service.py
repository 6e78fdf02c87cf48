from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..common.validators import optional_int, require_int, require_non_empty
from ..core.constants import DEFAULT_POSITION_TITLES
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import SessionUser
from .model import Department, Position
from .repository import DepartmentRepository, PositionRepository

logger = logging.getLogger(__name__)


def _require_management(user: SessionUser) -> None:
    if not user.is_management:
        raise AuthorizationError("Forbidden")


class DepartmentService:
    def __init__(self, departments: DepartmentRepository):
        self._departments = departments

    def list(self, user: SessionUser) -> list[Department]:
        return list(self._departments.list_with_counts(user.company_id))

    def get(self, user: SessionUser, department_id: int) -> Department:
        department = self._departments.get_by_id(department_id)
        if not department or department.company_id != user.company_id:
            raise NotFoundError("Department not found")
        return department

    def create(self, user: SessionUser, payload: Mapping[str, Any]) -> Department:
        """New department plus the standard ladder of positions (Intern .. Director)."""
        _require_management(user)
        name = require_non_empty(payload.get("name"), "Department name")
        if self._departments.get_by_name(user.company_id, name):
            raise ValidationError("Department name with this name already exists")

        department_id = self._departments.create_with_positions(
            company_id=user.company_id,
            name=name,
            code=(payload.get("code") or "").strip() or None,
            description=(payload.get("description") or "").strip() or None,
            position_titles=DEFAULT_POSITION_TITLES,
        )
        logger.info("Company %s created department %s (%s)", user.company_id, department_id, name)
        return self.get(user, department_id)

    def update(self, user: SessionUser, department_id: int, payload: Mapping[str, Any]) -> Department:
        _require_management(user)
        current = self.get(user, department_id)

        fields: dict[str, Any] = {}
        if "name" in payload:
            name = require_non_empty(payload.get("name"), "Department name")
            existing = self._departments.get_by_name(user.company_id, name)
            if existing and existing.id != current.id:
                raise ValidationError("Department name with this name already exists")
            fields["name"] = name
        for key in ("code", "description"):
            if key in payload:
                fields[key] = (payload.get(key) or "").strip() or None
        if not fields:
            raise ValidationError("Nothing to update")

        self._departments.update(department_id, fields)
        return self.get(user, department_id)

    def delete(self, user: SessionUser, department_id: int) -> None:
        _require_management(user)
        self.get(user, department_id)
        if not self._departments.delete(department_id):
            raise NotFoundError("Department not found")


class PositionService:
    def __init__(self, positions: PositionRepository, departments: DepartmentRepository):
        self._positions = positions
        self._departments = departments

    def _check_department(self, user: SessionUser, department_id: Optional[int]) -> None:
        if department_id is None:
            return
        department = self._departments.get_by_id(department_id)
        if not department or department.company_id != user.company_id:
            raise ValidationError("Department not found")

    def list(self, user: SessionUser, *, department_id: Optional[int] = None) -> list[Position]:
        return list(self._positions.list(user.company_id, department_id=department_id))

    def get(self, user: SessionUser, position_id: int) -> Position:
        position = self._positions.get_by_id(position_id)
        if not position or position.company_id != user.company_id:
            raise NotFoundError("Position not found")
        return position

    def create(self, user: SessionUser, payload: Mapping[str, Any]) -> Position:
        _require_management(user)
        title = require_non_empty(payload.get("title"), "Title")
        department_id = optional_int(payload.get("departmentId"), "departmentId")
        self._check_department(user, department_id)
        level = payload.get("level")
        position_id = self._positions.create(
            company_id=user.company_id,
            department_id=department_id,
            title=title,
            level=require_int(level, "level") if level not in (None, "") else 0,
        )
        return self.get(user, position_id)

    def update(self, user: SessionUser, position_id: int, payload: Mapping[str, Any]) -> Position:
        _require_management(user)
        self.get(user, position_id)

        fields: dict[str, Any] = {}
        if "title" in payload:
            fields["title"] = require_non_empty(payload.get("title"), "Title")
        if "departmentId" in payload:
            fields["department_id"] = optional_int(payload.get("departmentId"), "departmentId")
            self._check_department(user, fields["department_id"])
        if "level" in payload:
            fields["level"] = require_int(payload.get("level"), "level")
        if not fields:
            raise ValidationError("Nothing to update")

        self._positions.update(position_id, fields)
        return self.get(user, position_id)

    def delete(self, user: SessionUser, position_id: int) -> None:
        _require_management(user)
        self.get(user, position_id)
        if not self._positions.delete(position_id):
            raise NotFoundError("Position not found")
