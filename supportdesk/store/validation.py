from __future__ import annotations

from enum import Enum
from typing import TypeVar

from supportdesk.errors import ValidationError

E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: type[E], value: E | str, field_name: str) -> E:
    """Return ``value`` as a member of ``enum_cls`` or raise a validation error."""

    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(str(member.value) for member in enum_cls)
        raise ValidationError(
            f"{field_name} must be one of: {allowed}",
            details={"field": field_name, "value": str(value)},
        ) from exc


def require_text(value: str | None, field_name: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field_name} is required", details={"field": field_name})
    return value.strip()
