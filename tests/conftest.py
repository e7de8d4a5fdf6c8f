# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pytest

from sheetrecords.client.memory import MemorySheetStore
from sheetrecords.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("SHEETS_ACCESS_TOKEN", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """operation: read
spreadsheet_id: sheet-123
range: "People!A:C"
key_row: 0
data_start_row: 1
value_render_mode: UNFORMATTED_VALUE
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "step.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def people_grid() -> list[list[object]]:
    return [
        ["id", "name", "city"],
        ["1", "Alice", "Oslo"],
        ["2", "Bob", "Lima"],
        ["3", "Carol", "Oslo"],
    ]


@pytest.fixture()
def store(people_grid) -> MemorySheetStore:
    return MemorySheetStore({"People": people_grid})
