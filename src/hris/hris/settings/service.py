from __future__ import annotations

import logging
import time as time_module
from typing import Any, Iterable, Mapping

from ..common.datetime_utils import parse_hhmm
from ..common.validators import as_bool, require_non_empty, require_number
from ..core.constants import DEFAULT_SETTINGS_COMPANY_ID
from ..core.exceptions import AuthorizationError, ValidationError
from ..database.mysql_base import run_with_retry
from ..employees.model import SessionUser
from .model import (
    PAYROLL_DEFAULTS,
    SYSTEM_SETTING_KEYS,
    LeaveSettings,
    OfficeSettings,
    PayrollSetting,
    PayrollSettingsMap,
)
from .repository import PayrollSettingRepository, SystemSettingRepository

logger = logging.getLogger(__name__)

_NON_NEGATIVE_INT_KEYS = (
    "otp_duration_minutes",
    "jwt_expiration_hours",
    "jwt_expiration_minutes",
    "leave_annual_quota",
    "leave_min_notice",
)


class SystemSettingsService:
    """Per-company system settings with validation and lock-retry on save."""

    def __init__(
        self,
        settings: SystemSettingRepository,
        *,
        lock_retries: int = 3,
        retry_delay: float = 0.1,
        sleep=time_module.sleep,
    ):
        self._settings = settings
        self._lock_retries = int(lock_retries)
        self._retry_delay = float(retry_delay)
        self._sleep = sleep

    def get(self, company_id: int) -> dict[str, str]:
        return dict(self._settings.get_map(company_id))

    def office(self, company_id: int) -> OfficeSettings:
        return OfficeSettings.from_map(self._settings.get_map(company_id))

    def leave(self, company_id: int) -> LeaveSettings:
        return LeaveSettings.from_map(self._settings.get_map(company_id))

    def save(self, user: SessionUser, payload: Mapping[str, Any]) -> dict[str, str]:
        if not user.is_management:
            raise AuthorizationError("Forbidden")

        values = self._normalize(payload)
        if not values:
            raise ValidationError("No settings to save")

        run_with_retry(
            lambda: self._settings.upsert_many(user.company_id, values),
            retries=self._lock_retries,
            delay=self._retry_delay,
            sleep=self._sleep,
        )
        logger.info("Company %s updated settings: %s", user.company_id, ", ".join(sorted(values)))
        return self.get(user.company_id)

    @staticmethod
    def _normalize(payload: Mapping[str, Any]) -> dict[str, str]:
        values: dict[str, str] = {}
        for key in SYSTEM_SETTING_KEYS:
            if key not in payload or payload[key] is None:
                continue
            raw = payload[key]

            if key in ("office_start_time", "office_end_time"):
                values[key] = parse_hhmm(str(raw), key).strftime("%H:%M")
            elif key == "office_latitude":
                values[key] = _coordinate(raw, key, 90)
            elif key == "office_longitude":
                values[key] = _coordinate(raw, key, 180)
            elif key == "attendance_radius_meters":
                radius = require_number(raw, key)
                if radius < 0:
                    raise ValidationError("attendance_radius_meters cannot be negative")
                values[key] = _plain_number(radius)
            elif key == "enable_auto_checkout":
                values[key] = "true" if as_bool(raw) else "false"
            elif key in _NON_NEGATIVE_INT_KEYS:
                number = require_number(raw, key)
                if number < 0 or number != int(number):
                    raise ValidationError(f"{key} must be a non-negative whole number")
                values[key] = str(int(number))
            else:
                values[key] = str(raw)
        return values


def _coordinate(raw: Any, key: str, bound: float) -> str:
    if raw == "":
        return ""
    value = require_number(raw, key)
    if not -bound <= value <= bound:
        raise ValidationError(f"{key} must be between -{bound} and {bound}")
    return _plain_number(value)


def _plain_number(value: float) -> str:
    return str(int(value)) if value == int(value) else repr(value)


class PayrollSettingsService:
    """Payroll rates: company-1 rows are defaults, each company may override per key."""

    def __init__(self, settings: PayrollSettingRepository, *, defaults_company_id: int = DEFAULT_SETTINGS_COMPANY_ID):
        self._settings = settings
        self._defaults_company_id = int(defaults_company_id)

    def merged_rows(self, company_id: int) -> list[PayrollSetting]:
        merged: dict[str, PayrollSetting] = {}
        for row in self._settings.list_for_company(self._defaults_company_id):
            merged[row.key] = row
        if company_id != self._defaults_company_id:
            for row in self._settings.list_for_company(company_id):
                default = merged.get(row.key)
                merged[row.key] = PayrollSetting(
                    company_id=row.company_id,
                    key=row.key,
                    value=row.value,
                    label=row.label or (default.label if default else None),
                    description=row.description or (default.description if default else None),
                    is_active=row.is_active,
                )
        return list(merged.values())

    def settings_map(self, company_id: int) -> PayrollSettingsMap:
        return PayrollSettingsMap.from_rows(self.merged_rows(company_id))

    def get(self, company_id: int) -> dict:
        rows = self.merged_rows(company_id)
        return {
            "settings": [r.to_dict() for r in rows],
            "settingsObj": PayrollSettingsMap.from_rows(rows).to_dict(),
        }

    def save(self, user: SessionUser, items: Iterable[Mapping[str, Any]]) -> int:
        if not user.is_management:
            raise AuthorizationError("Forbidden")
        if items is None or isinstance(items, (str, bytes, Mapping)):
            raise ValidationError("settings must be a list")

        defaults = {r.key: r for r in self._settings.list_for_company(self._defaults_company_id)}
        to_save: list[PayrollSetting] = []
        for item in items:
            key = require_non_empty(item.get("key"), "key")
            if key not in defaults and key not in PAYROLL_DEFAULTS:
                raise ValidationError(f"Unknown payroll setting: {key}")
            value = require_number(item.get("value"), key)
            if value < 0:
                raise ValidationError(f"{key} cannot be negative")
            default = defaults.get(key)
            to_save.append(
                PayrollSetting(
                    company_id=user.company_id,
                    key=key,
                    value=_plain_number(value),
                    label=default.label if default else None,
                    description=default.description if default else None,
                    is_active=as_bool(item.get("isActive", True)),
                )
            )

        if not to_save:
            raise ValidationError("settings must not be empty")
        written = self._settings.save_many(user.company_id, to_save)
        logger.info("Company %s saved %s payroll settings", user.company_id, written)
        return written
