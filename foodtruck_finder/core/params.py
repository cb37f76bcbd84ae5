"""Coercion of raw query-string values into typed search arguments."""

import math
from typing import Mapping, Optional

from foodtruck_finder.core.errors import InvalidArgument


def _raw(args: Mapping[str, str], name: str) -> Optional[str]:
    value = args.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_float(args: Mapping[str, str], name: str, required: bool = False) -> Optional[float]:
    raw = _raw(args, name)
    if raw is None:
        if required:
            raise InvalidArgument(f"{name} is required")
        return None
    try:
        value = float(raw)
    except ValueError:
        raise InvalidArgument(f"{name} must be numeric") from None
    if not math.isfinite(value):
        raise InvalidArgument(f"{name} must be a finite number")
    return value


def get_int(args: Mapping[str, str], name: str) -> Optional[int]:
    raw = _raw(args, name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    # whole-number floats such as "5.0" are accepted; "5.5" is not
    try:
        value = float(raw)
    except ValueError:
        raise InvalidArgument(f"{name} must be an integer") from None
    if not math.isfinite(value) or not value.is_integer():
        raise InvalidArgument(f"{name} must be an integer")
    return int(value)


def get_str(args: Mapping[str, str], name: str) -> Optional[str]:
    return _raw(args, name)
