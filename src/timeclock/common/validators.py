from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    stripped = (value or "").strip()
    if len(stripped) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return stripped


def require_range(value, field_name: str, low, high):
    if value is None or value < low or value > high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return value


def require_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return number
