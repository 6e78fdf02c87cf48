from __future__ import annotations

import io
from typing import Sequence

import pandas as pd

from .model import Payroll

EXCEL_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def payroll_frame(rows: Sequence[Payroll]) -> pd.DataFrame:
    data = [
        {
            "Employee": r.employee_name or "",
            "Department": r.department_name or "",
            "Position": r.position or "",
            "Period": r.period.strftime("%Y-%m"),
            "Base Salary": r.base_salary,
            "Allowances": r.allowances,
            "Deductions": r.deductions,
            "PPh21": r.pph21,
            "Net Salary": r.net_salary,
            "Status": r.status.value,
        }
        for r in rows
    ]
    return pd.DataFrame(
        data,
        columns=[
            "Employee",
            "Department",
            "Position",
            "Period",
            "Base Salary",
            "Allowances",
            "Deductions",
            "PPh21",
            "Net Salary",
            "Status",
        ],
    )


def payroll_workbook(rows: Sequence[Payroll], *, sheet_name: str = "Payroll") -> io.BytesIO:
    """Write the rows to an in-memory xlsx (nothing touches the disk)."""
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        payroll_frame(rows).to_excel(writer, index=False, sheet_name=sheet_name)
    output.seek(0)
    return output
