from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

A single bar per run over the item operations. In non-TTY environments (CI,
a UI panel reading stdout) the bar is disabled so the log stream stays free of
ANSI control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress bar over item operations, silent when stdout is not a TTY."""

    def __init__(self, total: int, *, description: str = "Syncing items", unit: str = "item") -> None:
        self.total = total
        self.description = description
        self.current = 0

        self.enabled = is_tty_enabled() and total > 0
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit=unit,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, label: str | None = None) -> None:
        """Mark one operation done; label shows the key being processed."""
        self.current += 1
        if self.enabled and self.pbar is not None:
            if label:
                self.pbar.set_description(f"{self.description} ({label})")
            self.pbar.update(1)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(self.description)
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
