from __future__ import annotations

from typing import Optional, Type

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str, *, error: Type[ValidationError] = ValidationError) -> str:
    if not value or not value.strip():
        raise error(f"{field_name} must not be empty")
    return value.strip()
