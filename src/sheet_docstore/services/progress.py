from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display service with tqdm (TTY only).

Used by the bulk upsert: one tick per document. In non-TTY environments (CI,
pipes) no bar is created so no ANSI control sequences leak into output.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """True if stderr is a TTY (tqdm draws on stderr)."""
    return sys.stderr.isatty()


class ProgressTracker:
    """Progress bar over a known number of documents."""

    def __init__(self, total: int, *, description: str = "Writing documents", enabled: bool = True) -> None:
        self.total = total
        self.description = description
        self.current = 0

        self.enabled = enabled and is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit="doc",
                leave=True,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, **postfix: Any) -> None:
        """Count one processed document and optionally refresh the postfix stats."""
        self.current += 1
        if self.pbar is not None:
            if postfix:
                self.pbar.set_postfix(**postfix)
            self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
