from __future__ import annotations

from typing import Any

from ..models.cell import Grid

"""Raw passthrough for pre-shaped 2-D grids.

Raw append / update skip the header codec entirely. The only check is
that the supplied block is a list of rows, each a list of scalar cells;
rows may have different lengths.
"""

__all__ = [
    "ShapeMismatch",
    "validate_grid",
]


class ShapeMismatch(Exception):
    """Raised when raw data is not a 2-D cell grid."""


def validate_grid(data: Any, *, source: str = "data") -> Grid:
    """Return `data` as a Grid or raise ShapeMismatch.

    Accepted: list of lists (ragged allowed) whose cells are str, number,
    bool or None. Nested containers inside a cell are rejected.
    """
    if not isinstance(data, (list, tuple)):
        raise ShapeMismatch(f"{source}: expected a list of rows, got {type(data).__name__}")
    grid: Grid = []
    for row_no, row in enumerate(data):
        if not isinstance(row, (list, tuple)):
            raise ShapeMismatch(f"{source}: row {row_no} is {type(row).__name__}, expected a list of cells")
        out_row = []
        for col_no, cell in enumerate(row):
            if cell is not None and not isinstance(cell, (str, int, float, bool)):
                raise ShapeMismatch(
                    f"{source}: cell [{row_no}][{col_no}] is {type(cell).__name__}, expected a scalar"
                )
            out_row.append(cell)
        grid.append(out_row)
    return grid
