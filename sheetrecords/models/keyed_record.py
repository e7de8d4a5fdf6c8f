from __future__ import annotations

from dataclasses import dataclass, field

from .cell import Cell

"""KeyedRecord model.

A KeyedRecord is one data row projected onto field names through the
header row. It keeps the grid index of the row it came from so keyed
updates can target that row again.
"""

__all__ = [
    "KeyedRecord",
]


@dataclass(frozen=True)
class KeyedRecord:
    """One decoded data row.

    Fields absent from the originating row (row shorter than the header)
    are not present in `values` at all, which is different from a blank
    cell (present, with value None or "").
    """
    row_index: int  # 0-based index into the fetched grid
    values: dict[str, Cell] = field(default_factory=dict)

    def get(self, name: str, default: Cell = None) -> Cell:
        return self.values.get(name, default)

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def to_dict(self) -> dict[str, Cell]:
        """Plain copy of the field values (what the workflow sees)."""
        return dict(self.values)
