from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..models.cell import Cell, Grid, Row, coerce_cell
from ..models.keyed_record import KeyedRecord

"""Table codec: Grid <-> keyed records through a header row.

decode():
- header = grid[key_row]; every row at index >= data_start_row becomes one record
- record[header[i]] = row[i] for each column present in that row
- columns beyond the header are ignored, header columns beyond the row are omitted
- duplicate header names: the last column with that name wins
- empty rows are decoded too (filtering is up to the caller)

encode():
- records are projected onto the header's column order
- unknown fields grow the header (new trailing columns, first-seen order)
- every row is as wide as the (grown) header, so Empty values survive a
  decode of the encoded grid; trimming for the wire is trim_trailing_empty()
"""

__all__ = [
    "EncodedTable",
    "header_names",
    "column_positions",
    "decode",
    "encode",
    "trim_trailing_empty",
]


@dataclass(frozen=True)
class EncodedTable:
    header: list[str]  # header after growth
    rows: Grid  # data rows only
    added_columns: list[str]  # fields that were not in the original header

    @property
    def grid(self) -> Grid:
        """Header row followed by the data rows."""
        return [list(self.header), *[list(r) for r in self.rows]]

    @property
    def header_grew(self) -> bool:
        return bool(self.added_columns)


def header_names(row: Sequence[Any]) -> list[str]:
    """Header cells as field names (Empty header cell -> "")."""
    return ["" if c is None else str(c) for c in row]


def column_positions(header: Sequence[str]) -> dict[str, int]:
    """Field name -> column index. Duplicate names: last column wins."""
    positions: dict[str, int] = {}
    for idx, name in enumerate(header):
        positions[name] = idx
    return positions


def decode(grid: Sequence[Sequence[Any]], key_row: int = 0, data_start_row: int = 1) -> list[KeyedRecord]:
    """Decode a (possibly ragged) grid into keyed records.

    key_row < data_start_row is expected; it is validated by the config
    layer, not here. A grid without a header row decodes to no records.
    """
    if key_row < 0 or key_row >= len(grid):
        return []
    header = header_names(grid[key_row])
    records: list[KeyedRecord] = []
    for row_index in range(max(data_start_row, 0), len(grid)):
        row = grid[row_index]
        values: dict[str, Cell] = {}
        # zip stops at the shorter side: ragged rows never index out of range
        for name, value in zip(header, row):
            values[name] = coerce_cell(value)
        records.append(KeyedRecord(row_index=row_index, values=values))
    return records


def trim_trailing_empty(row: Row) -> Row:
    """Row without its trailing Empty cells (the shape an append sends)."""
    end = len(row)
    while end > 0 and row[end - 1] is None:
        end -= 1
    return row[:end]


def encode(records: Iterable[Mapping[str, Any]], header: Sequence[str] | None = None) -> EncodedTable:
    """Project records onto `header`, growing it for unknown fields.

    Fields a record does not carry become Empty cells, including the
    columns added for other records.
    """
    columns = list(header or [])
    positions = column_positions(columns)
    added: list[str] = []
    materialized = [dict(r) for r in records]

    # 先にヘッダを確定させてから行を作る (列追加前の行も同じ幅で扱える)
    for record in materialized:
        for name in record:
            name = str(name)
            if name not in positions:
                positions[name] = len(columns)
                columns.append(name)
                added.append(name)

    rows: Grid = []
    for record in materialized:
        row: Row = [None] * len(columns)
        for name, value in record.items():
            row[positions[str(name)]] = coerce_cell(value)
        rows.append(row)
    return EncodedTable(header=columns, rows=rows, added_columns=added)
