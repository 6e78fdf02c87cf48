from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import PayrollStatus


def period_of(year: int, month: int) -> date:
    """Payroll periods are stored as the first day of the month."""
    return date(year, month, 1)


@dataclass(frozen=True)
class Payroll:
    id: int
    employee_id: int
    company_id: int
    period: date
    base_salary: float
    allowances: float
    deductions: float
    pph21: float
    net_salary: float
    total_salary: float
    status: PayrollStatus = PayrollStatus.DRAFT
    employee_name: Optional[str] = None
    department_name: Optional[str] = None
    position: Optional[str] = None

    @property
    def month(self) -> int:
        return self.period.month

    @property
    def year(self) -> int:
        return self.period.year

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "department": self.department_name,
            "position": self.position,
            "month": self.month,
            "year": self.year,
            "baseSalary": self.base_salary,
            "allowances": self.allowances,
            "deductions": self.deductions,
            "pph21": self.pph21,
            "netSalary": self.net_salary,
            "totalSalary": self.total_salary,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class GenerationResult:
    inserted: int
    updated: int
    skipped: int

    @property
    def count(self) -> int:
        return self.inserted + self.updated

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "inserted": self.inserted,
            "updated": self.updated,
            "skipped": self.skipped,
            "message": f"Successfully generated {self.count} payroll records.",
        }
