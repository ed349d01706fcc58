from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from ..models.document import Document, to_text
from ..models.errors import QueryError
from ..models.query import Condition, Operator, Query

"""Query evaluation against documents.

Comparison semantics:
- A field absent from the document never satisfies a condition (also for ``!=``).
- ``==`` / ``!=`` compare the display text of both sides.
- ``>`` ``>=`` ``<`` ``<=`` compare numbers; a side that is not a number
  (empty text, non-numeric text, NaN, infinity, bool) makes the comparison False.
- ``in`` needs a list/tuple/set value and matches on display text.
- ``array-contains`` splits the cell on the separator and matches a trimmed piece.
- Unsupported operators make the condition False and are logged as warnings.
"""

__all__ = [
    "DEFAULT_ARRAY_SEPARATOR",
    "to_number",
    "matches",
    "evaluate",
    "filter_documents",
    "validate_query",
]

logger = logging.getLogger(__name__)

DEFAULT_ARRAY_SEPARATOR = ","

_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def to_number(value: Any) -> float | None:
    """Coerce a cell or query value to a finite number, None when it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMBER_RE.match(text):
            return None
        number = float(text)
    else:
        return None
    return number if math.isfinite(number) else None


def _compare_numbers(op: Operator, left: Any, right: Any) -> bool:
    a = to_number(left)
    b = to_number(right)
    if a is None or b is None:
        return False
    if op is Operator.GT:
        return a > b
    if op is Operator.GE:
        return a >= b
    if op is Operator.LT:
        return a < b
    return a <= b


def _apply(op: Operator, doc_value: str, value: Any, separator: str) -> bool:
    if op is Operator.EQ:
        return to_text(doc_value) == to_text(value)
    if op is Operator.NE:
        return to_text(doc_value) != to_text(value)
    if op is Operator.IN:
        if not isinstance(value, _SEQUENCE_TYPES):
            return False
        return to_text(doc_value) in {to_text(v) for v in value}
    if op is Operator.ARRAY_CONTAINS:
        pieces = [p.strip() for p in to_text(doc_value).split(separator)]
        return to_text(value) in pieces
    return _compare_numbers(op, doc_value, value)


def _check(doc: Mapping[str, Any], condition: Condition, separator: str) -> bool:
    """Evaluate one condition; raises QueryError for unsupported operators."""
    op = Operator.parse(condition.operator)
    if op is None:
        raise QueryError(condition.operator)
    if condition.field not in doc:
        return False
    return _apply(op, doc[condition.field], condition.value, separator)


def matches(
    doc: Mapping[str, Any], condition: Condition, separator: str = DEFAULT_ARRAY_SEPARATOR
) -> bool:
    try:
        return _check(doc, condition, separator)
    except QueryError as e:
        logger.warning("%s (field=%s) -> condition unsatisfied", e, condition.field)
        return False


def evaluate(
    doc: Mapping[str, Any], query: Query | None, separator: str = DEFAULT_ARRAY_SEPARATOR
) -> bool:
    """True iff every condition holds; an empty or missing query is always True."""
    if not query:
        return True
    for condition in query.where:
        try:
            if not _check(doc, condition, separator):
                return False
        except QueryError:
            return False
    return True


def validate_query(query: Query | None) -> list[str]:
    """Operator tokens in ``query`` that the engine does not support."""
    if not query:
        return []
    return [str(c.operator) for c in query.where if Operator.parse(c.operator) is None]


def filter_documents(
    docs: Iterable[Document], query: Query | None, separator: str = DEFAULT_ARRAY_SEPARATOR
) -> list[Document]:
    """Documents satisfying ``query``, in their original order.

    Unsupported operators are reported once per call rather than once per document.
    """
    for token in validate_query(query):
        logger.warning("unsupported operator: %r -> condition unsatisfied", token)
    return [d for d in docs if evaluate(d, query, separator)]
