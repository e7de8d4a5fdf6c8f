from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.cell import Grid, coerce_cell
from .memory import MemorySheetStore

logger = logging.getLogger(__name__)

"""Local .xlsx workbook as a grid store.

Sheets are read without a header (every row is data) and kept as raw
grids; the header handling stays in the engine. Text such as "NA" or
"null" is kept as text (no pandas NA conversion).
"""

__all__ = [
    "WorkbookStore",
    "read_workbook_grids",
]


def _frame_to_grid(df: pd.DataFrame) -> Grid:
    grid: Grid = []
    for row in df.itertuples(index=False, name=None):
        grid.append([None if _is_missing(v) else coerce_cell(_to_python(v)) for v in row])
    return grid


def _is_missing(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _to_python(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    # numpy scalar -> python scalar
    item = getattr(value, "item", None)
    if callable(item) and not isinstance(value, (str, bytes)):
        try:
            return item()
        except (TypeError, ValueError):
            return value
    return value


def read_workbook_grids(path: Path) -> dict[str, Grid]:
    """Read every sheet of an .xlsx file into a raw grid keyed by sheet name."""
    frames = pd.read_excel(path, sheet_name=None, header=None, dtype=object, keep_default_na=False, na_values=[""])
    return {str(name): _frame_to_grid(df) for name, df in frames.items()}


class WorkbookStore(MemorySheetStore):
    """MemorySheetStore loaded from and saved to a local workbook."""

    def __init__(self, path: Path, *, default_sheet: str = "Sheet1") -> None:
        self.path = Path(path)
        sheets = read_workbook_grids(self.path) if self.path.exists() else {}
        if not self.path.exists():
            logger.info(f"workbook {self.path} not found; starting empty")
        super().__init__(sheets, default_sheet=default_sheet)

    def save(self, path: Path | None = None) -> Path:
        target = Path(path) if path is not None else self.path
        sheets = self.sheets or {self.default_sheet: []}
        with pd.ExcelWriter(target, engine="openpyxl") as writer:
            for name, grid in sheets.items():
                pd.DataFrame(grid).to_excel(writer, sheet_name=name, header=False, index=False)
        logger.debug(f"workbook saved: {target}")
        return target
