from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the document store.

Built by ``sheet_docstore.config.loader.load_config`` and passed explicitly to
the Repository / CLI; there is no process-wide mutable configuration.
"""

__all__ = [
    "StoreConfig",
    "DocStoreConfig",
]


@dataclass(frozen=True)
class StoreConfig:
    """Backing store selection.

    Environment variables (DOCSTORE_WORKBOOK / DOCSTORE_COLLECTION) take
    precedence over these values.
    """
    backend: str = "excel"
    workbook: str | None = None  # excel only: path to the .xlsx file
    default_collection: str | None = None  # None -> first sheet


@dataclass(frozen=True)
class DocStoreConfig:
    """Root configuration object."""
    store: StoreConfig = field(default_factory=StoreConfig)
    key_field: str = "id"  # default key column for get/set/update commands
    array_separator: str = ","  # array-contains cell separator
    error_log_dir: str = "./logs"
