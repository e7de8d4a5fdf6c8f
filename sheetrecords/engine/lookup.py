from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.cell import cells_equal, coerce_cell
from ..models.keyed_record import KeyedRecord
from ..models.lookup_criterion import LookupCriterion

"""Lookup over a decoded table.

A record matches when record[column] equals the criterion value by
canonical text (see models.cell.cells_equal). Records that do not carry
the column at all never match, and neither does a criterion without a
value (an item missing its lookup field).
"""

__all__ = [
    "lookup",
    "lookup_many",
]


def lookup(
    table: Sequence[KeyedRecord],
    criterion: LookupCriterion,
    return_all_matches: bool = False,
) -> list[KeyedRecord]:
    """Matches in row order; at most one unless return_all_matches."""
    wanted = coerce_cell(criterion.value)
    if wanted is None:
        return []
    matches: list[KeyedRecord] = []
    for record in table:
        if criterion.column not in record:
            continue
        if cells_equal(record.get(criterion.column), wanted):
            matches.append(record)
            if not return_all_matches:
                break
    return matches


def lookup_many(
    table: Sequence[KeyedRecord],
    criteria: Iterable[LookupCriterion],
    return_all_matches: bool = False,
) -> list[list[KeyedRecord]]:
    """One result list per criterion, each evaluated against the full table."""
    return [lookup(table, c, return_all_matches) for c in criteria]
