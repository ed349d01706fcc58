from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..models.document import Document, to_text

"""Row <-> document mapping.

Round-trip law: for every non-blank header column,
``doc_to_row(headers, row_to_doc(headers, row))`` reproduces ``row``.
"""

__all__ = [
    "row_to_doc",
    "doc_to_row",
    "header_index",
]


def row_to_doc(headers: Sequence[str], row: Sequence[str]) -> Document:
    """Build a document from one data row.

    Blank header columns are skipped; missing trailing cells read as "".
    When a header name repeats, the rightmost column wins.
    """
    doc: Document = {}
    for i, header in enumerate(headers):
        if header:
            doc[header] = row[i] if i < len(row) else ""
    return doc


def doc_to_row(headers: Sequence[str], doc: Mapping[str, Any]) -> list[str]:
    """Lay a document out along the header; exactly ``len(headers)`` cells."""
    return [to_text(doc[h]) if h and h in doc else "" for h in headers]


def header_index(headers: Sequence[str], field: str) -> int:
    """0-based index of the first column named ``field``; -1 when absent."""
    if not field:
        return -1
    for i, header in enumerate(headers):
        if header == field:
            return i
    return -1
