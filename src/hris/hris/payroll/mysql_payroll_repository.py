from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Sequence

from ..core.enums import PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .calculator.base import PayslipFigures
from .model import GenerationResult, Payroll
from .repository import PayrollRepository

_SELECT = """
    SELECT p.id, p.employee_id, p.company_id, p.period, p.base_salary, p.allowances, p.deductions, p.pph21,
           p.net_salary, p.total_salary, p.status,
           u.name AS employee_name, d.name AS department_name, e.position
    FROM payrolls p
    JOIN employees e ON e.id = p.employee_id
    JOIN users u ON u.id = e.user_id
    LEFT JOIN departments d ON d.id = e.department_id
"""


def _to_payroll(row: dict) -> Payroll:
    return Payroll(
        id=int(row["id"]),
        employee_id=int(row["employee_id"]),
        company_id=int(row["company_id"]),
        period=normalize_mysql_date(row["period"]),
        base_salary=float(row["base_salary"] or 0),
        allowances=float(row["allowances"] or 0),
        deductions=float(row["deductions"] or 0),
        pph21=float(row["pph21"] or 0),
        net_salary=float(row["net_salary"] or 0),
        total_salary=float(row["total_salary"] or 0),
        status=PayrollStatus(row["status"]),
        employee_name=row.get("employee_name"),
        department_name=row.get("department_name"),
        position=row.get("position"),
    )


def _amounts(f: PayslipFigures) -> tuple:
    return (f.base_salary, f.allowances, f.deductions, f.pph21, f.net_salary, f.total_salary)


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.id=%s", (payroll_id,))
            row = fetchone(cur)
            return _to_payroll(row) if row else None

    def list(
        self,
        company_id: int,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Payroll]:
        where = ["p.company_id=%s"]
        params: list = [company_id]
        if year is not None:
            where.append("YEAR(p.period)=%s")
            params.append(year)
        if month is not None:
            where.append("MONTH(p.period)=%s")
            params.append(month)
        if employee_id is not None:
            where.append("p.employee_id=%s")
            params.append(employee_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {' AND '.join(where)} ORDER BY p.period DESC, u.name", tuple(params))
            return [_to_payroll(r) for r in fetchall(cur)]

    def apply_generation(
        self, company_id: int, period: date, figures: Mapping[int, PayslipFigures]
    ) -> GenerationResult:
        inserted = updated = skipped = 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, employee_id, status FROM payrolls WHERE company_id=%s AND period=%s FOR UPDATE",
                (company_id, period),
            )
            existing = {int(r["employee_id"]): r for r in fetchall(cur)}

            for employee_id, payslip in figures.items():
                row = existing.get(employee_id)
                if row is None:
                    cur.execute(
                        """
                        INSERT INTO payrolls(employee_id, company_id, period, base_salary, allowances, deductions,
                                             pph21, net_salary, total_salary, status, created_at, updated_at)
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,UTC_TIMESTAMP(),UTC_TIMESTAMP())
                        """,
                        (employee_id, company_id, period) + _amounts(payslip) + (PayrollStatus.DRAFT.value,),
                    )
                    inserted += 1
                elif row["status"] != PayrollStatus.DRAFT.value:
                    skipped += 1
                else:
                    cur.execute(
                        """
                        UPDATE payrolls
                        SET base_salary=%s, allowances=%s, deductions=%s, pph21=%s, net_salary=%s, total_salary=%s,
                            updated_at=UTC_TIMESTAMP()
                        WHERE id=%s AND status=%s
                        """,
                        _amounts(payslip) + (int(row["id"]), PayrollStatus.DRAFT.value),
                    )
                    # connections use CLIENT_FOUND_ROWS: matched rows, not changed rows
                    updated += cur.rowcount
        return GenerationResult(inserted=inserted, updated=updated, skipped=skipped)

    def mark_paid(self, payroll_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE payrolls SET status=%s, updated_at=UTC_TIMESTAMP() WHERE id=%s AND status=%s",
                (PayrollStatus.PAID.value, payroll_id, PayrollStatus.DRAFT.value),
            )
            return cur.rowcount > 0
