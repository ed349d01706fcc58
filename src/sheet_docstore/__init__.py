"""Spreadsheet-backed document store.

Treats a header-described table (row 1 = field names, rows 2.. = documents)
as a small schemaless document collection: filter with conjunctive
conditions, fetch by key, upsert and patch without moving rows.
"""

from .models.document import Document, to_text
from .models.errors import (
    AccessError,
    DocStoreError,
    InvalidValueError,
    NotFoundError,
    QueryError,
    ValidationError,
)
from .models.query import Condition, Operator, Query, make_condition, make_query
from .models.write_result import WriteResult, WriteStatus
from .services.repository import Repository
from .storage.adapter import CollectionRef, StorageAdapter
from .storage.excel import ExcelStorageAdapter
from .storage.memory import MemoryStorageAdapter

__version__ = "0.1.0"

__all__ = [
    "AccessError",
    "CollectionRef",
    "Condition",
    "DocStoreError",
    "Document",
    "ExcelStorageAdapter",
    "InvalidValueError",
    "MemoryStorageAdapter",
    "NotFoundError",
    "Operator",
    "Query",
    "QueryError",
    "Repository",
    "StorageAdapter",
    "ValidationError",
    "WriteResult",
    "WriteStatus",
    "make_condition",
    "make_query",
    "to_text",
]
