from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from ..client.protocol import GridClient
from ..client.sheets_api import SheetsApiError, SourceUnavailable
from ..engine.a1 import RangeSpec
from ..engine.codec import decode, encode, header_names, trim_trailing_empty
from ..engine.lookup import lookup
from ..engine.passthrough import ShapeMismatch, validate_grid
from ..engine.reconcile import UnmatchedKeyError, plan_update_writes, reconcile_update
from ..models.cell import Grid
from ..models.config_models import Operation, StepConfig, UnmatchedPolicy
from ..models.lookup_criterion import LookupCriterion
from ..models.step_result import StepResult
from .progress import ItemProgress

logger = logging.getLogger(__name__)

"""Operation dispatch for one workflow step.

execute_step() runs exactly one of append / clear / lookup / read / update:
1. Parse the range
2. At most one grid fetch (read, lookup, keyed append / update)
3. Pure engine work (decode, lookup, reconcile, encode)
4. At most one batched write (plus the header write / unmatched append
   when the header has to grow)

Side-effecting operations hand the input items back unchanged; read and
lookup return newly produced records.
"""

__all__ = [
    "StepError",
    "execute_step",
    "resolve_criteria",
]


class StepError(Exception):
    """Fatal failure of a step; aborts the remaining batch."""

    def __init__(self, message: str, *, error_type: str = "STEP_ERROR", item: int = -1) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.item = item


def resolve_criteria(config: StepConfig, items: Sequence[dict[str, Any]]) -> list[LookupCriterion]:
    """One criterion per input item.

    The value comes from the item field named by lookup_value_field when it
    is set, otherwise from lookup_value. A missing value never matches.
    """
    if not config.lookup_column:
        raise StepError("lookup requires lookup_column", error_type="CONFIGURATION_ERROR")
    criteria: list[LookupCriterion] = []
    for idx, item in enumerate(items):
        if config.lookup_value_field:
            value = item.get(config.lookup_value_field)
            if value is None:
                logger.debug(f"item {idx} has no '{config.lookup_value_field}'; it matches nothing")
        else:
            value = config.lookup_value
        criteria.append(LookupCriterion(column=config.lookup_column, value=value))
    return criteria


def _fetch(client: GridClient, spec: RangeSpec, config: StepConfig, *, tolerate_unavailable: bool) -> Grid:
    try:
        grid = client.fetch_grid(spec, config.value_render_mode)
    except SourceUnavailable as e:
        if not tolerate_unavailable:
            raise StepError(f"fetch {spec.address()}: {e}", error_type="SOURCE_UNAVAILABLE") from e
        logger.warning(f"fetch {spec.address()} failed, treating as empty table: {e}")
        return []
    if grid is None:
        logger.info(f"range {spec.address()} holds no values")
        return []
    return grid


def _write_header_cells(client: GridClient, spec: RangeSpec, config: StepConfig, offset: int, names: list[str]) -> None:
    address = spec.cell_address(config.key_row, offset, len(names))
    logger.info(f"header {address} <- {names}")
    client.write_grid(RangeSpec.parse(spec.spreadsheet_id, address), [list(names)], config.value_input_mode)


def _append_records(
    client: GridClient,
    spec: RangeSpec,
    config: StepConfig,
    records: Sequence[dict[str, Any]],
    header: list[str],
) -> int:
    """Encode records onto header (growing it) and append them; returns rows appended."""
    encoded = encode(records, header)
    if encoded.header_grew:
        _write_header_cells(client, spec, config, len(header), encoded.added_columns)
    # 末尾の空セルは送らない (サービス側の読み取り結果と同じ形)
    rows = [r for r in (trim_trailing_empty(row) for row in encoded.rows) if r]
    if len(rows) < len(encoded.rows):
        logger.debug(f"dropped {len(encoded.rows) - len(rows)} empty record(s)")
    if rows:
        client.append_grid(spec, rows, config.value_input_mode)
    return len(rows)


def _header_of(grid: Grid, key_row: int) -> list[str]:
    if len(grid) <= key_row:
        return []
    return header_names(grid[key_row])


def _raw_grids(config: StepConfig, items: Sequence[dict[str, Any]]) -> list[Grid]:
    grids: list[Grid] = []
    for idx, item in enumerate(items):
        try:
            grids.append(validate_grid(item.get(config.data_property), source=f"item {idx} '{config.data_property}'"))
        except ShapeMismatch as e:
            raise StepError(str(e), error_type="SHAPE_MISMATCH", item=idx) from e
    return grids


def _run_append(config: StepConfig, spec: RangeSpec, items: list[dict[str, Any]], client: GridClient) -> dict[str, int]:
    if config.raw_data:
        rows = [row for grid in _raw_grids(config, items) for row in grid]
        if rows:
            client.append_grid(spec, rows, config.value_input_mode)
        return {"rows_appended": len(rows)}

    grid = _fetch(client, spec, config, tolerate_unavailable=False)
    header = _header_of(grid, config.key_row)
    appended = _append_records(client, spec, config, items, header)
    return {"rows_appended": appended}


def _run_clear(config: StepConfig, spec: RangeSpec, client: GridClient) -> dict[str, int]:
    client.clear_range(spec)
    return {}


def _run_read(config: StepConfig, spec: RangeSpec, client: GridClient) -> tuple[list[dict[str, Any]], dict[str, int]]:
    grid = _fetch(client, spec, config, tolerate_unavailable=True)
    if not grid:
        return [], {}
    if config.raw_data:
        return [{config.data_property: grid}], {"rows_read": len(grid), "records_out": 1}
    records = decode(grid, config.key_row, config.data_start_row)
    out = [r.to_dict() for r in records]
    return out, {"rows_read": len(records), "records_out": len(out)}


def _run_lookup(
    config: StepConfig,
    spec: RangeSpec,
    items: list[dict[str, Any]],
    client: GridClient,
    criteria: Sequence[LookupCriterion] | None,
) -> tuple[list[dict[str, Any]], dict[str, int]]:
    grid = _fetch(client, spec, config, tolerate_unavailable=True)
    if not grid:
        return [], {}
    table = decode(grid, config.key_row, config.data_start_row)
    if criteria is None:
        criteria = resolve_criteria(config, items)

    out: list[dict[str, Any]] = []
    with ItemProgress(len(criteria), description="Lookup") as progress:
        for criterion in criteria:
            # 各アイテムは独立に全テーブルを評価 (前の結果に影響されない)
            matches = lookup(table, criterion, config.return_all_matches)
            out.extend(m.to_dict() for m in matches)
            progress.advance(len(matches))
    return out, {"rows_read": len(table), "records_out": len(out)}


def _run_update(config: StepConfig, spec: RangeSpec, items: list[dict[str, Any]], client: GridClient) -> dict[str, int]:
    if config.raw_data:
        grids = _raw_grids(config, items)
        data = [(spec.address(), grid) for grid in grids]
        client.batch_write(spec.spreadsheet_id, data, config.value_input_mode)
        return {"ranges_written": len(data)}

    grid = _fetch(client, spec, config, tolerate_unavailable=False)
    header = _header_of(grid, config.key_row)
    table = decode(grid, config.key_row, config.data_start_row)
    try:
        result = reconcile_update(table, items, config.key, config.unmatched)
    except UnmatchedKeyError as e:
        raise StepError(str(e), error_type="UNMATCHED_KEY") from e

    plan = plan_update_writes(result.instructions, header, spec, config.key_row)
    if plan.ranges:
        client.batch_write(spec.spreadsheet_id, plan.ranges, config.value_input_mode)
    counters = {"rows_read": len(table), "ranges_written": len(plan.ranges)}

    if result.unmatched:
        if config.unmatched is UnmatchedPolicy.APPEND:
            logger.info(f"appending {len(result.unmatched)} record(s) without a matching {config.key}")
            counters["rows_appended"] = _append_records(client, spec, config, result.unmatched, plan.header)
        else:
            logger.info(f"skipped {len(result.unmatched)} record(s) without a matching {config.key}")
            counters["skipped_unmatched"] = len(result.unmatched)
    return counters


def execute_step(
    config: StepConfig,
    items: Sequence[dict[str, Any]],
    client: GridClient,
    criteria: Sequence[LookupCriterion] | None = None,
) -> StepResult:
    """Run the configured operation over the input batch.

    Args:
        config: Step configuration (validated by the loader)
        items: Input batch; each item is a plain record
        client: Grid source / sink
        criteria: Per-item lookup criteria resolved by the host; built from
            the config when omitted

    Raises:
        StepError: fatal failure (write error, shape mismatch, unmatched key
            under the `error` policy). Nothing after the failing call runs.
    """
    start = datetime.now(UTC)
    batch = [dict(i) for i in items]
    spec = RangeSpec.parse(config.spreadsheet_id, config.range)
    logger.info(f"{config.operation.value} {spec.address()} items={len(batch)}")

    output: list[dict[str, Any]] = batch
    try:
        if config.operation is Operation.APPEND:
            counters = _run_append(config, spec, batch, client)
        elif config.operation is Operation.CLEAR:
            counters = _run_clear(config, spec, client)
        elif config.operation is Operation.LOOKUP:
            output, counters = _run_lookup(config, spec, batch, client, criteria)
        elif config.operation is Operation.READ:
            output, counters = _run_read(config, spec, client)
        elif config.operation is Operation.UPDATE:
            counters = _run_update(config, spec, batch, client)
        else:  # pragma: no cover
            raise StepError(f"unsupported operation: {config.operation}", error_type="CONFIGURATION_ERROR")
    except SheetsApiError as e:
        raise StepError(f"{config.operation.value} {spec.address()}: {e}", error_type="SHEETS_API_ERROR") from e

    elapsed = (datetime.now(UTC) - start).total_seconds()
    return StepResult(
        operation=config.operation,
        items=output,
        input_items=len(batch),
        rows_read=counters.get("rows_read", 0),
        records_out=counters.get("records_out", 0),
        ranges_written=counters.get("ranges_written", 0),
        rows_appended=counters.get("rows_appended", 0),
        skipped_unmatched=counters.get("skipped_unmatched", 0),
        elapsed_seconds=elapsed,
    )
