from __future__ import annotations

import json
import re
from pathlib import Path

from sheetrecords.logging.error_log import ErrorLogBuffer
from sheetrecords.models.error_record import ErrorRecord

KEYS = {"timestamp", "spreadsheet", "range", "item", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create("sheet-1", "People!A:C", 2, "SHAPE_MISMATCH", "row 0 is str")
    data = json.loads(rec.to_json_line())
    assert set(data.keys()) == KEYS
    assert data["item"] == 2
    assert data["error_type"] == "SHAPE_MISMATCH"
    assert data["timestamp"].endswith("Z")


def test_error_record_keeps_non_ascii():
    rec = ErrorRecord.create("s", "顧客!A:B", -1, "SHEETS_API_ERROR", "失敗")
    assert "顧客" in rec.to_json_line()


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("s", "A:F", -1, "SOURCE_UNAVAILABLE", "404"))
    buf.append(ErrorRecord.create("s", "A:F", 0, "UNMATCHED_KEY", "no row"))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == Path("./logs")
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    # flush 後バッファクリア
    assert len(buf) == 0


def test_error_log_buffer_empty_flush_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_error_log_buffer_appends_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("s", "A:F", 0, "E", "one"))
    first = buf.flush()
    buf.append(ErrorRecord.create("s", "A:F", 1, "E", "two"))
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2
