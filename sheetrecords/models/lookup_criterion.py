from __future__ import annotations

from dataclasses import dataclass

from .cell import Cell


@dataclass(frozen=True)
class LookupCriterion:
    """column == value predicate carried by one input item."""
    column: str
    value: Cell
