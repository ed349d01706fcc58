from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from ..models.bulk_result import BulkResult
from ..models.error_record import ErrorRecord
from ..models.write_result import WriteStatus
from .progress import ProgressTracker
from .repository import Repository

"""Bulk upsert: one set_doc per document.

Each document carries its own id in ``key_field``. Documents are written
one by one (each set_doc re-reads the collection), so a later document with the
same id overwrites the earlier one instead of duplicating the row.
"""

__all__ = [
    "bulk_set_docs",
]

logger = logging.getLogger(__name__)


def bulk_set_docs(
    repo: Repository,
    docs: Iterable[Mapping[str, Any]],
    key_field: str,
    *,
    progress: bool = True,
) -> BulkResult:
    items = list(docs)
    start = datetime.now(UTC)
    t0 = time.perf_counter()
    created = updated = failed = 0

    with ProgressTracker(len(items), enabled=progress) as tracker:
        for n, doc in enumerate(items, start=1):
            doc_id = doc.get(key_field)
            if doc_id is None or doc_id == "":
                failed += 1
                logger.warning("document %d has no %s -> skipped", n, key_field)
                if repo.error_log is not None:
                    store, collection = repo.ref.describe()
                    repo.error_log.append(
                        ErrorRecord.create(store, collection, -1, "MISSING_ID", f"document {n} has no {key_field}")
                    )
                tracker.advance(failed=failed)
                continue
            result = repo.set_doc(doc_id, doc, key_field)
            if result.status is WriteStatus.CREATED:
                created += 1
            elif result.status is WriteStatus.UPDATED:
                updated += 1
            else:
                failed += 1
            tracker.advance(failed=failed)

    elapsed = time.perf_counter() - t0
    return BulkResult(
        created=created,
        updated=updated,
        failed=failed,
        start_time=start,
        end_time=datetime.now(UTC),
        elapsed_seconds=elapsed,
    )
