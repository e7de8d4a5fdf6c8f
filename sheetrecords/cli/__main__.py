from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import pandas as pd
from dotenv import load_dotenv

from sheetrecords.client.protocol import GridClient
from sheetrecords.client.sheets_api import SheetsApiClient, SheetsApiError
from sheetrecords.client.workbook import WorkbookStore
from sheetrecords.config.loader import DEFAULT_CONFIG_PATH, ConfigurationError, load_config
from sheetrecords.engine.a1 import RangeSpec
from sheetrecords.engine.codec import decode
from sheetrecords.logging.error_log import ErrorLogBuffer
from sheetrecords.logging.init import log_summary, set_debug, setup_logging
from sheetrecords.models.config_models import Operation, StepConfig
from sheetrecords.models.error_record import ErrorRecord
from sheetrecords.services.operations import StepError, execute_step
from sheetrecords.services.summary import render_summary_line

"""CLI entrypoint: run one workflow step.

Flow:
- .env -> environment (credentials)
- load + validate the step config
- read input items (JSON), run the operation, write output items (JSON)
- SUMMARY line on the log stream; fatal errors go to logs/errors-*.log
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

MUTATING_OPERATIONS = {Operation.APPEND, Operation.CLEAR, Operation.UPDATE}


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values take precedence over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sheetrecords",
        description="Read, append, look up, update or clear a spreadsheet range as records",
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Step config YAML")
    p.add_argument("--input", type=Path, default=None, help="Input items (JSON list of objects)")
    p.add_argument("--output", type=Path, default=None, help="Write output items here instead of stdout")
    p.add_argument("--workbook", type=Path, default=None, help="Use a local .xlsx instead of the remote service")
    p.add_argument("--inspect", action="store_true", help="Print the decoded table then exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _read_items(path: Path | None) -> list[dict[str, Any]]:
    """Input batch: list of objects; a single object is wrapped; none -> one empty item."""
    if path is None:
        return [{}]
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"cannot read input items {path}: {e}") from e
    if isinstance(data, dict):
        return [data]
    if not isinstance(data, list) or not all(isinstance(i, dict) for i in data):
        raise ConfigurationError(f"input items {path} must be a JSON object or a list of objects")
    return data


def _make_client(cfg: StepConfig, workbook: Path | None) -> GridClient:
    if workbook is not None:
        return WorkbookStore(workbook)
    return SheetsApiClient.from_env(timeout=cfg.timeout_seconds)


def _inspect(cfg: StepConfig, client: GridClient) -> int:
    spec = RangeSpec.parse(cfg.spreadsheet_id, cfg.range)
    try:
        grid = client.fetch_grid(spec, cfg.value_render_mode) or []
    except SheetsApiError as e:
        print(f"inspect: fetch failed: {e}")
        return EXIT_FATAL
    records = decode(grid, cfg.key_row, cfg.data_start_row)
    print(f"RANGE: {spec.address()} rows={len(records)}")
    if records:
        frame = pd.DataFrame([r.to_dict() for r in records], index=[spec.row_number(r.row_index) for r in records])
        print(frame.to_string())
    return EXIT_SUCCESS


def _write_output(items: list[dict[str, Any]], path: Path | None) -> None:
    text = json.dumps(items, ensure_ascii=False, indent=2)
    if path is None:
        sys.stdout.write(text + "\n")
    else:
        path.write_text(text + "\n", encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
        items = _read_items(args.input)
        client = _make_client(cfg, args.workbook)
    except ConfigurationError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect:
        return _inspect(cfg, client)

    error_log = ErrorLogBuffer()
    try:
        result = execute_step(cfg, items, client)
    except StepError as e:
        logger.error(f"step: {e}")
        error_log.append(ErrorRecord.create(cfg.spreadsheet_id, cfg.range, e.item, e.error_type, str(e)))
        path = error_log.flush()
        logger.info(f"error log written: {path}")
        return EXIT_FATAL

    if isinstance(client, WorkbookStore) and cfg.operation in MUTATING_OPERATIONS:
        client.save()

    _write_output(result.items, args.output)
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
