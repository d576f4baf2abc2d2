"""Cell value coercion shared by the inventory loader and the geocoder."""

from __future__ import annotations

import math
import re
from typing import Any

# Invariant decimal: optional sign, '.' separator, optional exponent.
DECIMAL_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def parse_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not DECIMAL_PATTERN.fullmatch(text):
            return None
        number = float(text)
    return number if math.isfinite(number) else None


def cell_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None
