from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...employees.model import Employee
from ...settings.model import PayrollSettingsMap
from ..tax import BpjsContribution


@dataclass(frozen=True)
class PayslipFigures:
    base_salary: float
    allowances: float
    bpjs: BpjsContribution
    deductions: float
    pph21: int
    net_salary: float
    total_salary: float


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, employee: Employee, settings: PayrollSettingsMap) -> PayslipFigures:
        raise NotImplementedError
