from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from .model import PayrollSetting


class SystemSettingRepository(Protocol):
    """Per-company key/value settings (office location, hours, leave quota...)."""

    def get_map(self, company_id: int) -> dict[str, str]:
        raise NotImplementedError

    def upsert_many(self, company_id: int, values: Mapping[str, str]) -> None:
        raise NotImplementedError


class PayrollSettingRepository(Protocol):
    def list_for_company(self, company_id: int) -> Sequence[PayrollSetting]:
        raise NotImplementedError

    def save_many(self, company_id: int, items: Sequence[PayrollSetting]) -> int:
        """Update or insert every item in one transaction; returns rows written."""
        raise NotImplementedError
