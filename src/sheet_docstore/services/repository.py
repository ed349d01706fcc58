from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.document import Document, to_text
from ..models.errors import AccessError, InvalidValueError, NotFoundError, ValidationError
from ..models.query import Query, coerce_query, make_condition
from ..models.write_result import WriteResult, WriteStatus
from ..storage.adapter import CollectionHandle, CollectionRef, StorageAdapter, TableSnapshot
from ..storage.excel import ExcelStorageAdapter
from ..storage.memory import MemoryStorageAdapter
from .mapper import doc_to_row, header_index, row_to_doc
from .query_engine import DEFAULT_ARRAY_SEPARATOR, filter_documents, validate_query

if TYPE_CHECKING:
    from ..models.config_models import DocStoreConfig

"""Document repository over a tabular collection.

Every operation reads the whole collection once (no cache), and write
operations then issue one adapter write. Row indexes are computed inside a
single call and never kept. Errors never escape: reads degrade to an empty
result, writes return an unsuccessful WriteResult, and each failure is logged
and recorded in the error log buffer when one is attached.

There is no locking between the read and the write of set_doc / update_doc;
a concurrent external writer can interleave (last writer wins).
"""

__all__ = [
    "Repository",
]

logger = logging.getLogger(__name__)


class Repository:
    def __init__(
        self,
        adapter: StorageAdapter,
        ref: CollectionRef | None = None,
        *,
        error_log: ErrorLogBuffer | None = None,
        array_separator: str = DEFAULT_ARRAY_SEPARATOR,
    ) -> None:
        self.adapter = adapter
        self.ref = ref or CollectionRef()
        self.error_log = error_log
        self.array_separator = array_separator

    @classmethod
    def from_config(
        cls,
        cfg: DocStoreConfig,
        collection_name: str | None = None,
        *,
        adapter: StorageAdapter | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> Repository:
        """Build a repository for the store described by ``cfg``.

        ``adapter`` overrides the backend named in the config (the memory
        backend has no persistent data, so callers usually pass their own).
        """
        if adapter is None:
            if cfg.store.backend == "memory":
                adapter = MemoryStorageAdapter()
            else:
                adapter = ExcelStorageAdapter(cfg.store.workbook)
        ref = CollectionRef(collection_name=collection_name or cfg.store.default_collection)
        return cls(adapter, ref, error_log=error_log, array_separator=cfg.array_separator)

    # -- diagnostics -------------------------------------------------------

    def _record(self, row: int, error_type: str, message: str, handle: CollectionHandle | None = None) -> None:
        if self.error_log is None:
            return
        if handle is not None:
            store, collection = handle.store_id, handle.collection_name
        else:
            store, collection = self.ref.describe()
        self.error_log.append(ErrorRecord.create(store, collection, row, error_type, message))

    def _access_failed(self, op: str, e: AccessError, handle: CollectionHandle | None = None) -> None:
        logger.error("%s: %s", op, e)
        self._record(-1, "ACCESS_ERROR", str(e), handle)

    # -- reads -------------------------------------------------------------

    def _snapshot(self) -> tuple[CollectionHandle, TableSnapshot]:
        handle = self.adapter.open(self.ref)
        return handle, self.adapter.read_all(handle)

    def _documents(self, snapshot: TableSnapshot) -> list[Document]:
        return [row_to_doc(snapshot.headers, row) for row in snapshot.rows]

    def get_docs(self, query: Query | Mapping[str, Any] | Iterable[Any] | None = None) -> list[Document]:
        """All documents satisfying ``query`` (all documents when omitted), in row order.

        ``query`` may be a Query, ``{"where": [[field, op, value], ...]}`` or a
        list of conditions. An empty or unreachable collection, or a malformed
        query, yields [].
        """
        try:
            q = coerce_query(query)
        except (ValueError, TypeError) as e:
            logger.error("get_docs: malformed query: %s", e)
            self._record(-1, "QUERY_ERROR", f"malformed query: {e}")
            return []
        try:
            _, snapshot = self._snapshot()
        except AccessError as e:
            self._access_failed("get_docs", e)
            return []
        docs = self._documents(snapshot)
        if not q:
            return docs
        if self.error_log is not None:
            for op in validate_query(q):
                self._record(-1, "QUERY_ERROR", f"unsupported operator: {op!r}")
        return filter_documents(docs, q, self.array_separator)

    def get_doc(self, doc_id: Any, key_field: str) -> Document | None:
        """First document (lowest row) whose ``key_field`` equals ``doc_id``; None if absent."""
        docs = self.get_docs(Query(where=(make_condition(key_field, "==", doc_id),)))
        return docs[0] if docs else None

    # -- writes ------------------------------------------------------------

    def _locate(self, snapshot: TableSnapshot, key_field: str, doc_id: Any) -> tuple[int, int]:
        """Return (key column index, 1-based row index or -1).

        Raises ValidationError if ``key_field`` is not a header column.
        """
        key_col = header_index(snapshot.headers, key_field)
        if key_col == -1:
            raise ValidationError(f"key column not found: {key_field}")
        wanted = to_text(doc_id)
        for i, row in enumerate(snapshot.rows, start=1):
            cell = row[key_col] if key_col < len(row) else ""
            if cell == wanted:
                return key_col, i
        return key_col, -1

    def set_doc(self, doc_id: Any, data: Mapping[str, Any], key_field: str) -> WriteResult:
        """Create or fully replace the document keyed by ``doc_id``.

        Fields missing from ``data`` become empty cells. The key column is
        always written as ``doc_id``, whatever ``data`` holds for it.
        """
        handle: CollectionHandle | None = None
        try:
            handle, snapshot = self._snapshot()
            key_col, row_index = self._locate(snapshot, key_field, doc_id)
            values = doc_to_row(snapshot.headers, data)
            values[key_col] = to_text(doc_id)
            if row_index != -1:
                self.adapter.write_row(handle, row_index, values)
                logger.debug("set_doc: overwrote row %d (%s=%s)", row_index, key_field, doc_id)
                return WriteResult(WriteStatus.UPDATED, row_index=row_index)
            new_index = self.adapter.append_row(handle, values)
            logger.debug("set_doc: appended row %d (%s=%s)", new_index, key_field, doc_id)
            return WriteResult(WriteStatus.CREATED, row_index=new_index)
        except InvalidValueError as e:
            logger.error("set_doc: %s", e)
            self._record(row_index, "VALIDATION_ERROR", str(e), handle)
            return WriteResult(WriteStatus.INVALID_VALUE, message=str(e))
        except ValidationError as e:
            logger.error("set_doc: %s", e)
            self._record(-1, "VALIDATION_ERROR", str(e), handle)
            return WriteResult(WriteStatus.INVALID_KEY, message=str(e))
        except AccessError as e:
            self._access_failed("set_doc", e, handle)
            return WriteResult(WriteStatus.ACCESS_ERROR, message=str(e))

    def update_doc(self, doc_id: Any, data: Mapping[str, Any], key_field: str) -> WriteResult:
        """Patch the cells named in ``data`` of the first row keyed by ``doc_id``.

        Keys of ``data`` that are not header columns are ignored. Returns a
        NOT_FOUND result (nothing written) when no row holds ``doc_id``.
        """
        handle: CollectionHandle | None = None
        try:
            handle, snapshot = self._snapshot()
            _, row_index = self._locate(snapshot, key_field, doc_id)
            if row_index == -1:
                raise NotFoundError(f"no document with {key_field}={to_text(doc_id)}")
            if key_field in data and to_text(data[key_field]) != to_text(doc_id):
                # re-keying must not collide with another row's id
                _, other = self._locate(snapshot, key_field, data[key_field])
                if other != -1:
                    raise ValidationError(f"duplicate id {key_field}={to_text(data[key_field])}")
            cells: dict[int, str] = {}
            for name, value in data.items():
                col = header_index(snapshot.headers, name)
                if col != -1:
                    cells[col] = to_text(value)
            if cells:
                self.adapter.write_cells(handle, row_index, cells)
            logger.debug("update_doc: row %d cells=%s", row_index, sorted(cells))
            return WriteResult(WriteStatus.UPDATED, row_index=row_index)
        except NotFoundError as e:
            logger.info("update_doc: %s", e)
            self._record(-1, "NOT_FOUND", str(e), handle)
            return WriteResult(WriteStatus.NOT_FOUND, message=str(e))
        except InvalidValueError as e:
            logger.error("update_doc: %s", e)
            self._record(row_index, "VALIDATION_ERROR", str(e), handle)
            return WriteResult(WriteStatus.INVALID_VALUE, message=str(e))
        except ValidationError as e:
            logger.error("update_doc: %s", e)
            self._record(-1, "VALIDATION_ERROR", str(e), handle)
            return WriteResult(WriteStatus.INVALID_KEY, message=str(e))
        except AccessError as e:
            self._access_failed("update_doc", e, handle)
            return WriteResult(WriteStatus.ACCESS_ERROR, message=str(e))

