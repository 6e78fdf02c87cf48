from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Department:
    id: int
    company_id: int
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    employee_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "companyId": self.company_id,
            "name": self.name,
            "code": self.code,
            "description": self.description,
            "employeeCount": self.employee_count,
        }


@dataclass(frozen=True)
class Position:
    id: int
    company_id: int
    title: str
    department_id: Optional[int] = None
    level: int = 0
    department_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "companyId": self.company_id,
            "departmentId": self.department_id,
            "departmentName": self.department_name,
            "title": self.title,
            "level": self.level,
        }
