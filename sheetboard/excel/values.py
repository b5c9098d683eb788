from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

import pandas as pd

"""Cell value normalization.

Both sides are compared as trimmed text: numbers, dates and booleans are not
distinguished from their displayed string form.
"""

__all__ = [
    "is_blank",
    "to_text",
    "same_text",
]


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def to_text(value: Any) -> str:
    """Stringify a cell/column value for comparison and transmission.

    >>> to_text(2020.0), to_text(" Acura "), to_text(None)
    ('2020', 'Acura', '')
    """
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def same_text(left: Any, right: Any) -> bool:
    return to_text(left) == to_text(right)
