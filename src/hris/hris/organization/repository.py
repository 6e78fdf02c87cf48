from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Department, Position


class DepartmentRepository(Protocol):
    def list_with_counts(self, company_id: int) -> Sequence[Department]:
        raise NotImplementedError

    def get_by_id(self, department_id: int) -> Optional[Department]:
        raise NotImplementedError

    def get_by_name(self, company_id: int, name: str) -> Optional[Department]:
        raise NotImplementedError

    def create_with_positions(
        self,
        *,
        company_id: int,
        name: str,
        code: Optional[str],
        description: Optional[str],
        position_titles: Sequence[str],
    ) -> int:
        """Insert the department and its starter positions in one transaction."""
        raise NotImplementedError

    def update(self, department_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, department_id: int) -> bool:
        raise NotImplementedError


class PositionRepository(Protocol):
    def list(self, company_id: int, *, department_id: Optional[int] = None) -> Sequence[Position]:
        raise NotImplementedError

    def get_by_id(self, position_id: int) -> Optional[Position]:
        raise NotImplementedError

    def create(self, *, company_id: int, department_id: Optional[int], title: str, level: int) -> int:
        raise NotImplementedError

    def update(self, position_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, position_id: int) -> bool:
        raise NotImplementedError
