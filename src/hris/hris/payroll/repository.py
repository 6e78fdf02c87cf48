from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from .calculator.base import PayslipFigures
from .model import GenerationResult, Payroll


class PayrollRepository(Protocol):
    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    def list(
        self,
        company_id: int,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Payroll]:
        raise NotImplementedError

    def apply_generation(
        self, company_id: int, period: date, figures: Mapping[int, PayslipFigures]
    ) -> GenerationResult:
        """Write one period's figures (keyed by employee id) in one transaction.

        The period's existing rows are locked first. Employees without a row get a
        new DRAFT row, DRAFT rows are overwritten, and any other status is skipped.
        """
        raise NotImplementedError

    def mark_paid(self, payroll_id: int) -> bool:
        raise NotImplementedError
