"""Indonesian payroll deductions: PPh21 income tax and BPJS contributions.

All functions are pure: same salary, status and settings always give the same
amounts. Monetary results are whole rupiah rounded half up.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..common.numbers import round_half_up
from ..core.constants import DEFAULT_TAX_STATUS
from ..settings.model import PayrollSettingsMap

# Annual non-taxable income (PTKP) per marital / dependant status.
PTKP_ANNUAL: dict[str, int] = {
    "TK/0": 54_000_000,
    "TK/1": 58_500_000,
    "TK/2": 63_000_000,
    "TK/3": 67_500_000,
    "K/0": 58_500_000,
    "K/1": 63_000_000,
    "K/2": 67_500_000,
    "K/3": 72_000_000,
    "K/I/0": 112_500_000,
}

# (width of the PKP slice, setting key). None = everything above.
PPH21_LAYERS: tuple[tuple[Optional[int], str], ...] = (
    (60_000_000, "tax_pph21_layer1"),
    (190_000_000, "tax_pph21_layer2"),
    (250_000_000, "tax_pph21_layer3"),
    (4_500_000_000, "tax_pph21_layer4"),
    (None, "tax_pph21_layer5"),
)

NO_NPWP_SURCHARGE = 1.2

BPJS_HEALTH_WAGE_CAP = 12_000_000
PENSION_WAGE_CAP = 10_042_300


def ptkp_for(status: Optional[str]) -> int:
    return PTKP_ANNUAL.get((status or DEFAULT_TAX_STATUS).strip().upper(), PTKP_ANNUAL[DEFAULT_TAX_STATUS])


def progressive_tax(pkp: float, settings: PayrollSettingsMap) -> float:
    remaining = pkp
    tax = 0.0
    for width, key in PPH21_LAYERS:
        if remaining <= 0:
            break
        taxed = remaining if width is None else min(remaining, width)
        tax += taxed * settings.rate(key)
        remaining -= taxed
    return tax


def calculate_pph21(
    monthly_gross: float,
    ptkp_status: str = DEFAULT_TAX_STATUS,
    has_npwp: bool = True,
    settings: Optional[PayrollSettingsMap] = None,
) -> int:
    """Monthly PPh21 withholding for a regular monthly salary."""
    if monthly_gross <= 0:
        return 0
    settings = settings or PayrollSettingsMap()

    annual_gross = monthly_gross * 12
    biaya_jabatan = min(
        annual_gross * settings.rate("tax_biaya_jabatan_percent"),
        settings.value("tax_biaya_jabatan_max") * 12,
    )
    annual_net = annual_gross - biaya_jabatan

    pkp = math.floor(max(annual_net - ptkp_for(ptkp_status), 0) / 1000) * 1000
    if pkp <= 0:
        return 0

    annual_tax = progressive_tax(pkp, settings)
    if not has_npwp:
        annual_tax *= NO_NPWP_SURCHARGE
    return round_half_up(annual_tax / 12)


@dataclass(frozen=True)
class BpjsContribution:
    """Employee-side BPJS deductions for one month."""

    kesehatan: int
    ketenagakerjaan: int
    pensiun: int
    total: int

    def to_dict(self) -> dict:
        return {
            "kesehatan": self.kesehatan,
            "ketenagakerjaan": self.ketenagakerjaan,
            "pensiun": self.pensiun,
            "total": self.total,
        }


def calculate_bpjs(base_salary: float, settings: Optional[PayrollSettingsMap] = None) -> BpjsContribution:
    if base_salary <= 0:
        return BpjsContribution(kesehatan=0, ketenagakerjaan=0, pensiun=0, total=0)
    settings = settings or PayrollSettingsMap()

    kesehatan = min(base_salary, BPJS_HEALTH_WAGE_CAP) * settings.rate("bpjs_health_percent")
    ketenagakerjaan = base_salary * settings.rate("bpjs_employment_percent")
    pensiun = min(base_salary, PENSION_WAGE_CAP) * settings.rate("pension_percent")

    return BpjsContribution(
        kesehatan=round_half_up(kesehatan),
        ketenagakerjaan=round_half_up(ketenagakerjaan),
        pensiun=round_half_up(pensiun),
        total=round_half_up(kesehatan + ketenagakerjaan + pensiun),
    )
