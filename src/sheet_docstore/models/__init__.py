"""Domain models for the document store.

Documents, the query DSL, write results, the error taxonomy, configuration
and diagnostic records.
"""

from .bulk_result import BulkResult
from .config_models import DocStoreConfig, StoreConfig
from .document import Document, to_text
from .error_record import ErrorRecord
from .errors import (
    AccessError,
    DocStoreError,
    InvalidValueError,
    NotFoundError,
    QueryError,
    ValidationError,
)
from .query import Condition, Operator, Query, make_condition, make_query
from .write_result import WriteResult, WriteStatus

__all__ = [
    # Configuration models
    "DocStoreConfig",
    "StoreConfig",
    # Document & query models
    "Document",
    "to_text",
    "Condition",
    "Operator",
    "Query",
    "make_condition",
    "make_query",
    # Results & errors
    "BulkResult",
    "WriteResult",
    "WriteStatus",
    "ErrorRecord",
    "DocStoreError",
    "AccessError",
    "ValidationError",
    "InvalidValueError",
    "QueryError",
    "NotFoundError",
]
