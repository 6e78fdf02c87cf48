from __future__ import annotations

import random
import re
from typing import Callable, Optional

from ..core.constants import USERNAME_MAX_ATTEMPTS
from ..core.exceptions import ValidationError


def base_username(
    *, username: Optional[str], phone: Optional[str], email: Optional[str], name: str
) -> str:
    """Explicit username, else phone digits, else the email local part, else the name."""
    if username and username.strip():
        candidate = username
    elif phone and re.sub(r"\D", "", phone):
        candidate = re.sub(r"\D", "", phone)
    elif email and email.split("@")[0].strip():
        candidate = email.split("@")[0]
    else:
        candidate = re.sub(r"\s+", ".", name.strip().lower())

    cleaned = re.sub(r"[^a-z0-9._]", "", candidate.lower())
    return cleaned or "user"


def unique_username(
    base: str,
    exists: Callable[[str], bool],
    *,
    rng: Optional[random.Random] = None,
    max_attempts: int = USERNAME_MAX_ATTEMPTS,
) -> str:
    """``base`` if free, otherwise ``base`` + random 4 digits."""
    rng = rng or random.Random()
    candidate = base
    for _ in range(max_attempts):
        if not exists(candidate):
            return candidate
        candidate = f"{base}{rng.randint(1000, 9999)}"
    raise ValidationError("Could not generate a unique username, please try again")
