from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import iso


@dataclass(frozen=True)
class ActivityLog:
    id: int
    company_id: int
    user_id: Optional[int]
    action: str
    description: str
    created_at: datetime
    user_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "companyId": self.company_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "action": self.action,
            "description": self.description,
            "createdAt": iso(self.created_at),
        }
