from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional


def as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


__all__ = ["as_int", "as_str"]
