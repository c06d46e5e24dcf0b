from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

"""Row progress display with tqdm (TTY only).

In non-TTY environments (CI, pipes) no progress bar is created so the
labeled log lines stay clean.
"""

__all__ = [
    "RowProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class RowProgress:
    """Progress bar over the rows of one table."""

    def __init__(self, total_rows: int, *, description: str = "Rows") -> None:
        self.total_rows = total_rows
        self.description = description
        self.current_row = 0
        self.enabled = is_tty_enabled()
        self.pbar: Any | None = None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                leave=True,
                ncols=80,
                ascii=True,
                mininterval=1.0,
            )

    def advance(self, n: int = 1) -> None:
        self.current_row += n
        if self.pbar is not None:
            self.pbar.update(n)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> RowProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
