from __future__ import annotations

from dataclasses import dataclass, field

from .cell import Cell, Grid

"""UpdateInstruction model.

Two shapes exist:
- keyed: `row_index` + `values` (partial write of the named fields only)
- raw: `grid` replaces the whole target range as supplied

Instructions are built per batch, submitted once and discarded.
"""

__all__ = [
    "UpdateInstruction",
]


@dataclass(frozen=True)
class UpdateInstruction:
    row_index: int | None = None  # absolute 0-based grid index (keyed)
    values: dict[str, Cell] = field(default_factory=dict)  # field -> new value (keyed)
    grid: Grid | None = None  # full replacement values (raw)

    @property
    def is_raw(self) -> bool:
        return self.grid is not None

    @staticmethod
    def keyed(row_index: int, values: dict[str, Cell]) -> UpdateInstruction:
        return UpdateInstruction(row_index=row_index, values=dict(values))

    @staticmethod
    def raw(grid: Grid) -> UpdateInstruction:
        return UpdateInstruction(grid=grid)
