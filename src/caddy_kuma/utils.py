from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def normalize_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def optional_mapping(value: object, *, field: str) -> Mapping[str, Any]:
    """Return `value` as a mapping; `None` means empty."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"{field} must be an object, got {type(value).__name__}")
    return value


def optional_list(value: object, *, field: str) -> Sequence[Any]:
    """Return `value` as a list; `None` means empty."""
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise TypeError(f"{field} must be an array, got {type(value).__name__}")
    return value
