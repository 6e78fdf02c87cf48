from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_int(value, field_name)


def require_number(value: Any, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def optional_number(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    return require_number(value, field_name)


def require_choice(value: Any, field_name: str, enum_cls):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def parse_csv_ints(value: Optional[str], field_name: str) -> list[int]:
    if not value:
        return []
    return [require_int(part, field_name) for part in str(value).split(",") if part.strip()]


def parse_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


_PASSWORD_SYMBOLS = set('!@#$%^&*(),.?":{}|<>')


def validate_password(password: Optional[str]) -> str:
    password = password or ""
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters")
    if not any(ch.isupper() for ch in password):
        raise ValidationError("Password must contain at least one uppercase letter")
    if not any(ch.islower() for ch in password):
        raise ValidationError("Password must contain at least one lowercase letter")
    if not any(ch.isdigit() for ch in password):
        raise ValidationError("Password must contain at least one digit")
    if not any(ch in _PASSWORD_SYMBOLS for ch in password):
        raise ValidationError("Password must contain at least one symbol")
    return password
