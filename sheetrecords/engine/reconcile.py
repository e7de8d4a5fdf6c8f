from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.cell import Cell, Grid, cell_text, coerce_cell
from ..models.config_models import UnmatchedPolicy
from ..models.keyed_record import KeyedRecord
from ..models.update_instruction import UpdateInstruction
from .a1 import RangeSpec
from .codec import column_positions, header_names

"""Keyed update reconciliation.

Incoming records are matched to existing rows through the key field:
- first row in sheet order with an equal key wins; later duplicates are never touched
- matched -> one UpdateInstruction for that row carrying only the incoming
  fields (key excluded); columns not mentioned stay as they are
- unmatched (including records without the key) -> handled per UnmatchedPolicy

plan_update_writes() turns the instructions into (address, grid) pairs for
a single batch write. apply_instructions() applies them to an in-memory grid.
"""

__all__ = [
    "UnmatchedKeyError",
    "ReconcileResult",
    "WritePlan",
    "reconcile_update",
    "plan_update_writes",
    "apply_instructions",
]


class UnmatchedKeyError(Exception):
    """Raised by the `error` unmatched policy."""

    def __init__(self, key_field: str, keys: list[Any]) -> None:
        self.key_field = key_field
        self.keys = keys
        super().__init__(f"no row found for {key_field}={keys!r}")


@dataclass(frozen=True)
class ReconcileResult:
    instructions: list[UpdateInstruction]
    unmatched: list[dict[str, Any]] = field(default_factory=list)  # incoming records, input order
    unmatched_indexes: list[int] = field(default_factory=list)  # their positions in the input


@dataclass(frozen=True)
class WritePlan:
    ranges: list[tuple[str, Grid]]  # (A1 address, values) for one batch write
    header: list[str]  # header after growth
    added_columns: list[str]


def _key_of(value: Any) -> str | None:
    # same rendering as cells_equal; None (Empty) never matches, "" does
    return cell_text(coerce_cell(value))


def _index_first_rows(existing: Sequence[KeyedRecord], key_field: str) -> dict[str, KeyedRecord]:
    index: dict[str, KeyedRecord] = {}
    for record in existing:
        if key_field not in record:
            continue
        key = _key_of(record.get(key_field))
        if key is None:
            continue
        index.setdefault(key, record)
    return index


def reconcile_update(
    existing_table: Sequence[KeyedRecord],
    incoming_records: Sequence[Mapping[str, Any]],
    key_field: str,
    unmatched: UnmatchedPolicy = UnmatchedPolicy.SKIP,
) -> ReconcileResult:
    """Match incoming records to existing rows by `key_field`.

    Record row_index values are absolute grid indexes (decode keeps them),
    so instructions target data_start_row + offset without recomputation.
    Raises UnmatchedKeyError under the `error` policy, before anything is
    written.
    """
    index = _index_first_rows(existing_table, key_field)
    instructions: list[UpdateInstruction] = []
    missing: list[dict[str, Any]] = []
    missing_idx: list[int] = []

    for pos, incoming in enumerate(incoming_records):
        key = _key_of(incoming.get(key_field)) if key_field in incoming else None
        target = index.get(key) if key is not None else None
        if target is None:
            missing.append(dict(incoming))
            missing_idx.append(pos)
            continue
        values: dict[str, Cell] = {
            str(name): coerce_cell(value) for name, value in incoming.items() if name != key_field
        }
        instructions.append(UpdateInstruction.keyed(target.row_index, values))

    if missing and unmatched is UnmatchedPolicy.ERROR:
        raise UnmatchedKeyError(key_field, [r.get(key_field) for r in missing])
    return ReconcileResult(instructions=instructions, unmatched=missing, unmatched_indexes=missing_idx)


def _grow(header: list[str], positions: dict[str, int], names: Sequence[str], added: list[str]) -> None:
    for name in names:
        if name not in positions:
            positions[name] = len(header)
            header.append(name)
            added.append(name)


def _runs(cells: list[tuple[int, Cell]]) -> list[tuple[int, list[Cell]]]:
    """Group (column, value) pairs into contiguous column runs."""
    runs: list[tuple[int, list[Cell]]] = []
    for col, value in sorted(cells, key=lambda c: c[0]):
        if runs and runs[-1][0] + len(runs[-1][1]) == col:
            runs[-1][1].append(value)
        else:
            runs.append((col, [value]))
    return runs


def plan_update_writes(
    instructions: Sequence[UpdateInstruction],
    header: Sequence[Any],
    range_spec: RangeSpec,
    key_row: int = 0,
) -> WritePlan:
    """Convert keyed / raw instructions into addressed single-row writes.

    Fields the header does not know grow it with trailing columns, and the
    new header cells are written at key_row in the same batch.
    """
    columns = header_names(header)
    positions = column_positions(columns)
    added: list[str] = []
    ranges: list[tuple[str, Grid]] = []

    for ins in instructions:
        if ins.is_raw:
            continue
        _grow(columns, positions, list(ins.values), added)

    if added:
        first_new = len(columns) - len(added)
        ranges.append((range_spec.cell_address(key_row, first_new, len(added)), [list(added)]))

    for ins in instructions:
        if ins.is_raw:
            ranges.append((range_spec.address(), [list(r) for r in ins.grid or []]))
            continue
        if not ins.values or ins.row_index is None:
            continue
        cells = [(positions[name], value) for name, value in ins.values.items()]
        for start, values in _runs(cells):
            ranges.append((range_spec.cell_address(ins.row_index, start, len(values)), [values]))

    return WritePlan(ranges=ranges, header=columns, added_columns=added)


def apply_instructions(
    grid: Sequence[Sequence[Any]],
    instructions: Sequence[UpdateInstruction],
    key_row: int = 0,
) -> Grid:
    """Apply instructions to a copy of `grid` (header read from key_row)."""
    out: Grid = [list(r) for r in grid]
    while len(out) <= key_row:
        out.append([])
    columns = header_names(out[key_row])
    positions = column_positions(columns)
    added: list[str] = []

    for ins in instructions:
        if ins.is_raw:
            for r, row in enumerate(ins.grid or []):
                while len(out) <= r:
                    out.append([])
                target = out[r]
                if len(target) < len(row):
                    target.extend([None] * (len(row) - len(target)))
                target[: len(row)] = list(row)
            columns = header_names(out[key_row])
            positions = column_positions(columns)
            continue
        if ins.row_index is None:
            continue
        _grow(columns, positions, list(ins.values), added)
        if added:
            out[key_row].extend(added)
            added.clear()
        while len(out) <= ins.row_index:
            out.append([])
        target = out[ins.row_index]
        for name, value in ins.values.items():
            col = positions[name]
            if len(target) <= col:
                target.extend([None] * (col + 1 - len(target)))
            target[col] = value
    return out
