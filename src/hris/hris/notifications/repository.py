from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Notification


class NotificationRepository(Protocol):
    def list_for_company(self, company_id: int, *, active_only: bool = False) -> Sequence[Notification]:
        raise NotImplementedError

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def create(self, company_id: int, fields: Mapping[str, Any]) -> int:
        raise NotImplementedError

    def update(self, notification_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, notification_id: int) -> bool:
        raise NotImplementedError
