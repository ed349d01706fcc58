from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Query DSL: conditions combined by logical AND.

Conditions keep the raw operator token so that an unsupported operator can be
reported by the query engine at evaluation time instead of failing when the
query is built.

    >>> q = make_query([make_condition("age", ">", 20), where("name", "!=", "Bao")])
    >>> len(q.where)
    2
"""

__all__ = [
    "Operator",
    "Condition",
    "Query",
    "make_condition",
    "make_query",
    "where",
    "query",
    "coerce_query",
]


class Operator(str, Enum):
    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    IN = "in"
    ARRAY_CONTAINS = "array-contains"

    @classmethod
    def parse(cls, token: object) -> Operator | None:
        """Return the operator for ``token`` or None when unsupported."""
        if isinstance(token, Operator):
            return token
        for op in cls:
            if op.value == token:
                return op
        return None


@dataclass(frozen=True)
class Condition:
    """Single field / operator / value predicate."""
    field: str
    operator: str
    value: Any

    @staticmethod
    def coerce(raw: Condition | Sequence[Any]) -> Condition:
        """Accept a Condition or a ``[field, operator, value]`` triple."""
        if isinstance(raw, Condition):
            return raw
        if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence) or len(raw) != 3:
            raise ValueError(f"condition must be a [field, operator, value] triple: {raw!r}")
        field, op, value = raw
        return make_condition(field, op, value)


@dataclass(frozen=True)
class Query:
    """Conjunction of conditions; an empty ``where`` matches every document."""
    where: tuple[Condition, ...] = ()

    def __bool__(self) -> bool:
        return len(self.where) > 0


def make_condition(field: str, operator: str | Operator, value: Any) -> Condition:
    op = operator.value if isinstance(operator, Operator) else operator
    return Condition(field=str(field), operator=op, value=value)


def make_query(conditions: Iterable[Condition | Sequence[Any]]) -> Query:
    return Query(where=tuple(Condition.coerce(c) for c in conditions))


# Short aliases matching the ``where(...)`` / ``query([...])`` helper style.
where = make_condition
query = make_query


def coerce_query(raw: Query | Mapping[str, Any] | Iterable[Any] | None) -> Query:
    """Normalize the accepted query shapes into a Query.

    Accepted: None, a Query, a mapping ``{"where": [...]}`` or an iterable of
    conditions.
    """
    if raw is None:
        return Query()
    if isinstance(raw, Query):
        return raw
    if isinstance(raw, Mapping):
        return make_query(raw.get("where") or [])
    return make_query(raw)
