from __future__ import annotations

from ..models.bulk_result import BulkResult

"""SUMMARY line rendering for bulk upserts."""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # avoid scientific notation for very small numbers
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: BulkResult) -> str:
    """Render the SUMMARY line for a bulk upsert.

    Format:
    SUMMARY docs={total} created={created} updated={updated} failed={failed} elapsed_sec={elapsed}

    >>> from datetime import datetime, timezone
    >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
    >>> render_summary_line(BulkResult(2, 1, 0, t, t, 2.0))
    'SUMMARY docs=3 created=2 updated=1 failed=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY docs={result.total} created={result.created} updated={result.updated} "
        f"failed={result.failed} elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
