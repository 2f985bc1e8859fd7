from __future__ import annotations

import math
from typing import Optional

from ..core.exceptions import ValidationError


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if is_blank(value):
        raise ValidationError(f"{field_name} is required", [f"Please provide {field_name.lower()}"])
    return str(value).strip()


def require_float(value: object, field_name: str) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number", [f"Send a numeric {field_name.lower()}"])
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number", [f"Send a numeric {field_name.lower()}"])
    return number
