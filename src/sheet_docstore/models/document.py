from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Any

"""Document model and cell text rendering.

A document is a plain insertion-ordered ``dict[str, str]`` built from one data
row: keys are header names, values are the display text of the cells.
Every value that is written to a cell or compared as a string goes through
``to_text`` so that the store and the query engine agree on one rendering.
"""

__all__ = [
    "Document",
    "to_text",
]

Document = dict[str, str]


def to_text(value: Any) -> str:
    """Render a Python value as spreadsheet display text.

    - None -> ""
    - bool -> "TRUE" / "FALSE" (spreadsheet display of booleans)
    - integral float -> integer text (10.0 -> "10")
    - datetime -> "YYYY-MM-DD HH:MM:SS" (midnight renders as the date only)
    - anything else -> str(value)
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0) and value.tzinfo is None:
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)
