from __future__ import annotations

"""Error taxonomy for the document store.

These exceptions are raised by the storage adapters, the query engine and the
config loader. The Repository converts them to typed results (empty list,
``None`` or an unsuccessful ``WriteResult``) so none of them reach callers of
the document operations.
"""

__all__ = [
    "DocStoreError",
    "AccessError",
    "ValidationError",
    "InvalidValueError",
    "QueryError",
    "NotFoundError",
]


class DocStoreError(Exception):
    """Base exception for document store errors."""


class AccessError(DocStoreError):
    """Backing store or named collection is unreachable or absent."""


class ValidationError(DocStoreError):
    """Designated key column does not exist in the header."""


class InvalidValueError(ValidationError):
    """A document value cannot be stored by the backing store."""


class QueryError(DocStoreError):
    """Unsupported query operator."""

    def __init__(self, operator: object) -> None:
        super().__init__(f"unsupported operator: {operator!r}")
        self.operator = operator


class NotFoundError(DocStoreError):
    """No row holds the requested id in the key column."""
