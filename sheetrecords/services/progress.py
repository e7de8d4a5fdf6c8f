from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display for the per-item loop (TTY only).

Lookup evaluates one criterion per input item; large batches get a
single tqdm bar. In non-TTY environments (CI, piped output) no bar is
created so the log stream stays line oriented.
"""

__all__ = [
    "ItemProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stderr.isatty()


class ItemProgress:
    """tqdm bar over input items, disabled outside a TTY."""

    def __init__(self, total_items: int, *, description: str = "Items") -> None:
        self.total_items = total_items
        self.description = description
        self.done = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_items,
                desc=description,
                unit="item",
                leave=False,
                file=sys.stderr,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, matches: int = 0) -> None:
        self.done += 1
        if self.pbar is not None:
            self.pbar.update(1)
            if matches:
                self.pbar.set_postfix(matches=matches)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ItemProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
