from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Mapping, Optional

from ..core.constants import DEFAULT_ANNUAL_LEAVE_QUOTA, DEFAULT_OFFICE_END_TIME, DEFAULT_OFFICE_START_TIME

SYSTEM_SETTING_KEYS = (
    "otp_duration_minutes",
    "otp_message_template",
    "jwt_expiration_hours",
    "jwt_expiration_minutes",
    "office_latitude",
    "office_longitude",
    "attendance_radius_meters",
    "office_start_time",
    "office_end_time",
    "enable_auto_checkout",
    "leave_annual_quota",
    "leave_min_notice",
)

PAYROLL_DEFAULTS: dict[str, float] = {
    "bpjs_health_percent": 1,
    "bpjs_employment_percent": 2,
    "pension_percent": 1,
    "tax_biaya_jabatan_percent": 5,
    "tax_biaya_jabatan_max": 500000,
    "tax_pph21_layer1": 5,
    "tax_pph21_layer2": 15,
    "tax_pph21_layer3": 25,
    "tax_pph21_layer4": 30,
    "tax_pph21_layer5": 35,
}


def _hhmm(value: Optional[str], default: str) -> time:
    raw = (value or default).strip()
    try:
        hours, minutes = raw.split(":")[:2]
        return time(int(hours), int(minutes))
    except ValueError:
        hours, minutes = default.split(":")
        return time(int(hours), int(minutes))


def _float(value: Optional[str]) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class OfficeSettings:
    """Typed view over the per-company system_settings map used by attendance."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius_meters: float = 0.0
    start_time: time = time(9, 0)
    end_time: time = time(17, 0)
    auto_checkout_enabled: bool = False

    @property
    def geofence_enabled(self) -> bool:
        return bool(self.latitude) and bool(self.longitude) and self.radius_meters > 0

    @classmethod
    def from_map(cls, values: Mapping[str, str]) -> "OfficeSettings":
        return cls(
            latitude=_float(values.get("office_latitude")),
            longitude=_float(values.get("office_longitude")),
            radius_meters=_float(values.get("attendance_radius_meters")) or 0.0,
            start_time=_hhmm(values.get("office_start_time"), DEFAULT_OFFICE_START_TIME),
            end_time=_hhmm(values.get("office_end_time"), DEFAULT_OFFICE_END_TIME),
            auto_checkout_enabled=values.get("enable_auto_checkout") == "true",
        )


@dataclass(frozen=True)
class LeaveSettings:
    annual_quota: int = DEFAULT_ANNUAL_LEAVE_QUOTA
    min_notice_days: int = 0

    @classmethod
    def from_map(cls, values: Mapping[str, str]) -> "LeaveSettings":
        quota = _float(values.get("leave_annual_quota"))
        notice = _float(values.get("leave_min_notice"))
        return cls(
            annual_quota=int(quota) if quota is not None else DEFAULT_ANNUAL_LEAVE_QUOTA,
            min_notice_days=int(notice) if notice is not None else 0,
        )


@dataclass(frozen=True)
class PayrollSetting:
    company_id: int
    key: str
    value: str
    label: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "companyId": self.company_id,
            "key": self.key,
            "value": self.value,
            "label": self.label,
            "description": self.description,
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class PayrollSettingsMap:
    """Flattened payroll settings: ``values[key]`` plus ``active[key]`` per key.

    Missing keys fall back to the statutory defaults; missing flags mean active.
    """

    values: dict[str, float] = field(default_factory=dict)
    active: dict[str, bool] = field(default_factory=dict)

    def rate(self, key: str) -> float:
        """Percentage setting as a fraction, 0 when the setting is switched off."""
        if not self.active.get(key, True):
            return 0.0
        return self.value(key) / 100

    def value(self, key: str) -> float:
        if key in self.values:
            return self.values[key]
        return float(PAYROLL_DEFAULTS.get(key, 0))

    def is_active(self, key: str) -> bool:
        return self.active.get(key, True)

    @classmethod
    def from_rows(cls, rows) -> "PayrollSettingsMap":
        values: dict[str, float] = {}
        active: dict[str, bool] = {}
        for row in rows:
            parsed = _float(row.value)
            if parsed is not None:
                values[row.key] = parsed
            active[row.key] = bool(row.is_active)
        return cls(values=values, active=active)

    def to_dict(self) -> dict:
        out: dict = {}
        for key in sorted(set(PAYROLL_DEFAULTS) | set(self.values)):
            out[key] = self.value(key)
            out[f"{key}_active"] = self.is_active(key)
        return out
