from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from ..engine.a1 import RangeSpec
from ..models.cell import Cell, Grid, is_empty_row
from ..models.config_models import ValueInputMode, ValueRenderMode

logger = logging.getLogger(__name__)

"""In-memory spreadsheet store.

Implements the GridClient calls over plain grids (one per sheet name),
reproducing the service behaviors the engine depends on:
- fetch trims trailing empty cells / rows and returns None for an empty range
- append writes after the last non-empty row inside the range
- USER_ENTERED parses numeric text, RAW stores values as given
- FORMATTED_VALUE renders numbers as text
"""

__all__ = [
    "MemorySheetStore",
]

_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def _user_entered(value: Cell) -> Cell:
    if isinstance(value, str) and _NUMBER.match(value.strip()):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            return float(text)
    return value


def _formatted(value: Cell) -> Cell:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _trim(grid: Grid) -> Grid:
    out: Grid = []
    for row in grid:
        end = len(row)
        while end > 0 and (row[end - 1] is None or row[end - 1] == ""):
            end -= 1
        out.append(list(row[:end]))
    while out and not out[-1]:
        out.pop()
    return out


class MemorySheetStore:
    """GridClient keeping sheets as absolute grids (row 0 = sheet row 1)."""

    def __init__(self, sheets: dict[str, Grid] | None = None, *, default_sheet: str = "Sheet1") -> None:
        self.sheets: dict[str, Grid] = {name: [list(r) for r in grid] for name, grid in (sheets or {}).items()}
        self.default_sheet = default_sheet if not self.sheets or default_sheet in self.sheets else next(iter(self.sheets))
        self.history: list[tuple[str, str]] = []  # (call, address) in call order

    def _sheet_name(self, range_spec: RangeSpec) -> str:
        return range_spec.sheet_name or self.default_sheet

    def _grid(self, range_spec: RangeSpec, create: bool = False) -> Grid | None:
        name = self._sheet_name(range_spec)
        if name not in self.sheets:
            if not create:
                return None
            self.sheets[name] = []
        return self.sheets[name]

    @staticmethod
    def _bounds(range_spec: RangeSpec, grid: Grid) -> tuple[int, int, int, int]:
        """0-based [row_start, row_end) x [col_start, col_end) clipped to the grid extent."""
        r0 = range_spec.start_row - 1
        c0 = range_spec.start_column
        width = max((len(r) for r in grid), default=0)
        r1 = range_spec.end_row if range_spec.end_row is not None else len(grid)
        c1 = range_spec.end_column + 1 if range_spec.end_column is not None else max(width, c0)
        return r0, max(r0, r1), c0, max(c0, c1)

    @staticmethod
    def _put(grid: Grid, row: int, col: int, value: Any) -> None:
        while len(grid) <= row:
            grid.append([])
        target = grid[row]
        if len(target) <= col:
            target.extend([None] * (col + 1 - len(target)))
        target[col] = value

    def _write_at(self, grid: Grid, row: int, col: int, values: Grid, mode: ValueInputMode) -> None:
        for r, src in enumerate(values):
            for c, value in enumerate(src):
                cell = _user_entered(value) if mode is ValueInputMode.USER_ENTERED else value
                self._put(grid, row + r, col + c, cell)

    # GridClient -----------------------------------------------------------------

    def fetch_grid(self, range_spec: RangeSpec, value_render_mode: ValueRenderMode) -> Grid | None:
        self.history.append(("fetch", range_spec.address()))
        grid = self._grid(range_spec)
        if grid is None:
            return None
        r0, r1, c0, c1 = self._bounds(range_spec, grid)
        out: Grid = []
        for row in grid[r0:r1]:
            cells = list(row[c0:c1])
            if value_render_mode is ValueRenderMode.FORMATTED_VALUE:
                cells = [_formatted(c) for c in cells]
            out.append(cells)
        out = _trim(out)
        return out or None

    def write_grid(self, range_spec: RangeSpec, grid: Grid, value_input_mode: ValueInputMode) -> None:
        self.history.append(("write", range_spec.address()))
        target = self._grid(range_spec, create=True)
        assert target is not None
        self._write_at(target, range_spec.start_row - 1, range_spec.start_column, grid, value_input_mode)

    def append_grid(self, range_spec: RangeSpec, grid: Grid, value_input_mode: ValueInputMode) -> None:
        self.history.append(("append", range_spec.address()))
        target = self._grid(range_spec, create=True)
        assert target is not None
        r0, r1, c0, c1 = self._bounds(range_spec, target)
        # 範囲内で最後に値がある行の次から追記
        next_row = r0
        for idx in range(r0, min(r1, len(target))):
            if not is_empty_row(target[idx][c0:c1]):
                next_row = idx + 1
        self._write_at(target, next_row, c0, grid, value_input_mode)

    def clear_range(self, range_spec: RangeSpec) -> None:
        self.history.append(("clear", range_spec.address()))
        grid = self._grid(range_spec)
        if grid is None:
            return
        r0, r1, c0, c1 = self._bounds(range_spec, grid)
        for row in grid[r0:r1]:
            for c in range(c0, min(c1, len(row))):
                row[c] = None
        self.sheets[self._sheet_name(range_spec)] = _trim(grid)

    def batch_write(
        self,
        spreadsheet_id: str,
        data: Sequence[tuple[str, Grid]],
        value_input_mode: ValueInputMode,
    ) -> None:
        self.history.append(("batch", f"{len(data)} ranges"))
        for address, values in data:
            spec = RangeSpec.parse(spreadsheet_id, address)
            target = self._grid(spec, create=True)
            assert target is not None
            self._write_at(target, spec.start_row - 1, spec.start_column, values, value_input_mode)
