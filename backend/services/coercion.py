"""
Lenient numeric parsing for form input.

Same semantics as the browser's parseInt / parseFloat: leading numeric
prefix wins ("12abc" -> 12), garbage gives None, nothing ever raises.
"""

import math
import re
from typing import Any, List, Optional

_INT_PREFIX = re.compile(r'^\s*([+-]?\d+)')
_FLOAT_PREFIX = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')


def parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    if isinstance(value, int):
        return value
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else None


def parse_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        match = _FLOAT_PREFIX.match(str(value))
        if not match:
            return None
        result = float(match.group(1))
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def int_or_none(value: Any) -> Optional[int]:
    """parseInt(x) || null : zero and garbage both become None"""
    return parse_int(value) or None


def float_or_none(value: Any) -> Optional[float]:
    """parseFloat(x) || null"""
    return parse_float(value) or None


def clamp(value: Optional[int], low: int, high: int) -> Optional[int]:
    if value is None:
        return None
    return max(low, min(high, value))


def split_list(text: Any) -> Optional[List[str]]:
    """'a, b,,c ' -> ['a', 'b', 'c']; empty input -> None"""
    if not text:
        return None
    if isinstance(text, (list, tuple)):
        text = ",".join(str(part) for part in text)
    return [part.strip() for part in text.split(",") if part.strip()]


def join_list(values: Optional[List[str]]) -> str:
    return ", ".join(values) if values else ""
