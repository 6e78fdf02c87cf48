from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import iso
from ..core.enums import NotificationCategory, Role

ALL_ROLES = "*"


def parse_target_roles(raw: Optional[str]) -> tuple[str, ...]:
    return tuple(part.strip().upper() for part in (raw or "").split(",") if part.strip())


@dataclass(frozen=True)
class Notification:
    id: int
    company_id: int
    title: str
    message: str
    category: NotificationCategory = NotificationCategory.GENERAL
    target_roles: tuple[str, ...] = ()
    is_active: bool = True
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    synthetic: bool = False

    def targets(self, role: Role) -> bool:
        return ALL_ROLES in self.target_roles or role.value in self.target_roles

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "companyId": self.company_id,
            "title": self.title,
            "message": self.message,
            "category": self.category.value,
            "targetRoles": ",".join(self.target_roles),
            "isActive": self.is_active,
            "createdBy": self.created_by,
            "createdAt": iso(self.created_at),
            "synthetic": self.synthetic,
        }
