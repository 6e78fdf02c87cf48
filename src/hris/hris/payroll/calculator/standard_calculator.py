from __future__ import annotations

from ...core.constants import DEFAULT_TAX_STATUS
from ...employees.model import Employee
from ...settings.model import PayrollSettingsMap
from ..tax import calculate_bpjs, calculate_pph21
from .base import PayrollCalculator, PayslipFigures


class StandardPayrollCalculator(PayrollCalculator):
    """Standard monthly rule: base - enrolled BPJS programmes - PPh21, no allowances.

    PPh21 is computed on the base salary before BPJS deductions.
    """

    def calculate(self, employee: Employee, settings: PayrollSettingsMap) -> PayslipFigures:
        base = float(employee.base_salary or 0)
        bpjs = calculate_bpjs(base, settings)

        deductions = 0
        if employee.bpjs_kesehatan:
            deductions += bpjs.kesehatan
        if employee.bpjs_ketenagakerjaan:
            deductions += bpjs.ketenagakerjaan + bpjs.pensiun

        pph21 = calculate_pph21(base, employee.tax_status or DEFAULT_TAX_STATUS, employee.has_npwp, settings)
        net = base - deductions - pph21

        return PayslipFigures(
            base_salary=base,
            allowances=0,
            bpjs=bpjs,
            deductions=deductions,
            pph21=pph21,
            net_salary=net,
            total_salary=net,
        )
