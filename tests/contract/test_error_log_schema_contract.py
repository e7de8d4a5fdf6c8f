from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import jsonschema

from sheetrecords.cli import main as cli_main
from sheetrecords.models.error_record import ErrorRecord

"""Error log JSON Lines schema contract."""

ERROR_LOG_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "required": ["timestamp", "spreadsheet", "range", "item", "error_type", "message"],
    "properties": {
        "timestamp": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$"},
        "spreadsheet": {"type": "string"},
        "range": {"type": "string"},
        "item": {"type": "integer", "minimum": -1},
        "error_type": {"type": "string", "pattern": "^[A-Z][A-Z0-9_]*$"},
        "message": {"type": "string"},
    },
}


def test_error_record_matches_schema():
    rec = ErrorRecord.create("sheet-1", "People!A:C", -1, "SOURCE_UNAVAILABLE", "404 Not Found")
    jsonschema.validate(json.loads(rec.to_json_line()), ERROR_LOG_SCHEMA)


def test_error_log_written_by_cli_matches_schema(temp_workdir: Path, store):
    (temp_workdir / "config" / "step.yml").write_text(
        "operation: update\nspreadsheet_id: s\nrange: People!A:C\nunmatched: error\n", encoding="utf-8"
    )
    items = temp_workdir / "items.json"
    items.write_text(json.dumps([{"id": "404"}]), encoding="utf-8")
    with patch("sheetrecords.cli.__main__._make_client", return_value=store):
        assert cli_main(["--input", str(items)]) == 1

    [log] = list((temp_workdir / "logs").glob("errors-*.log"))
    lines = log.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    obj = json.loads(lines[0])
    jsonschema.validate(obj, ERROR_LOG_SCHEMA)
    assert obj["error_type"] == "UNMATCHED_KEY"
