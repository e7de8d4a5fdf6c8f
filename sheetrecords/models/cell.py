from __future__ import annotations

import json
from typing import Any, Union

"""Cell variant for spreadsheet values.

A cell is one of Text (str), Number (int | float) or Empty (None).
Everything coming from the service or from workflow items is mapped onto
this closed set before it is compared or written.
"""

__all__ = [
    "Cell",
    "Row",
    "Grid",
    "coerce_cell",
    "cell_text",
    "cells_equal",
    "is_empty_row",
]

Cell = Union[str, int, float, None]
Row = list[Cell]
Grid = list[Row]


def coerce_cell(value: Any) -> Cell:
    """Map an arbitrary value onto the Text | Number | Empty variant.

    - None stays Empty ("" is Text, not Empty)
    - bool becomes "TRUE" / "FALSE", the way the spreadsheet renders it
    - dict / list become their JSON text
    - anything else that is not str / int / float goes through str()
    """
    if value is None:
        return None
    # bool は int のサブクラスなので先に判定
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (str, int, float)):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def cell_text(cell: Cell) -> str | None:
    """Canonical text of a cell; None for Empty.

    Numbers render the way the sheet shows them unformatted: integral
    floats without ".0" (7.0 -> "7"), other floats by their shortest repr.
    """
    if cell is None:
        return None
    if isinstance(cell, str):
        return cell
    if isinstance(cell, float):
        if cell.is_integer():
            return str(int(cell))
        return repr(cell)
    return str(cell)


def cells_equal(left: Cell, right: Cell) -> bool:
    """Exact equality of the canonical text (no case folding).

    Text "7" equals Number 7, since an unformatted read returns numbers
    where a workflow item usually carries text. Empty equals only Empty.
    """
    if left is None or right is None:
        return left is None and right is None
    return cell_text(left) == cell_text(right)


def is_empty_row(row: Row) -> bool:
    return all(cell is None or cell == "" for cell in row)
