"""Helpers that coerce loosely-typed GraphQL fields into relayer types.

Every helper returns ``None`` for missing or unusable input so callers can
keep "not reported" apart from zero.
"""
import math
from typing import Any, List, Optional, Union

Number = Union[int, float]


def to_number(value: Any) -> Optional[Number]:
    """Coerce an int, finite float or numeric string; anything else is None.

    Integral strings stay exact ints so wei-sized vote counts survive.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = float(text)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def to_int(value: Any, default: int = 0) -> int:
    """Coerce a unix timestamp or count into an int, falling back to ``default``."""
    number = to_number(value)
    if number is None:
        return default
    return int(number)


def to_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def number_list(value: Any) -> Optional[List[Number]]:
    """Return the list only if every element is numeric."""
    if not isinstance(value, list):
        return None
    numbers = [to_number(v) for v in value]
    if any(n is None for n in numbers):
        return None
    return numbers


def string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [to_str(v) for v in value]


def sum_present(values: List[Optional[Number]]) -> Optional[Number]:
    """Sum the present values; None when none is present."""
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present)
