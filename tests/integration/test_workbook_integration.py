from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from sheetrecords.cli import main as cli_main
from sheetrecords.client.workbook import WorkbookStore, read_workbook_grids

"""End-to-end runs against a local .xlsx workbook (pandas + openpyxl)."""


@pytest.fixture()
def workbook(temp_workdir: Path) -> Path:
    path = temp_workdir / "data" / "people.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(
            [["id", "name", "city"], ["1", "Alice", "Oslo"], ["2", "Bob", "NA"], ["3", "Carol", "Oslo"]]
        ).to_excel(writer, sheet_name="People", header=False, index=False)
        pd.DataFrame([["x"]]).to_excel(writer, sheet_name="Other", header=False, index=False)
    return path


def _config(temp_workdir: Path, text: str) -> None:
    (temp_workdir / "config" / "step.yml").write_text(text, encoding="utf-8")


def test_read_workbook_grids_keeps_na_text(workbook: Path):
    grids = read_workbook_grids(workbook)
    assert set(grids) == {"People", "Other"}
    assert grids["People"][2] == ["2", "Bob", "NA"]


def test_cli_read_from_workbook(workbook: Path, temp_workdir: Path, capsys):
    _config(temp_workdir, "operation: read\nspreadsheet_id: local\nrange: People!A:C\n")
    assert cli_main(["--workbook", str(workbook)]) == 0
    items = json.loads(capsys.readouterr().out)
    assert items[1] == {"id": "2", "name": "Bob", "city": "NA"}


def test_cli_update_saves_workbook(workbook: Path, temp_workdir: Path):
    _config(temp_workdir, "operation: update\nspreadsheet_id: local\nrange: People!A:F\nunmatched: append\n")
    items = temp_workdir / "items.json"
    items.write_text(
        json.dumps([{"id": "2", "city": "Lima", "email": "bob@x.io"}, {"id": "4", "name": "Dan"}]),
        encoding="utf-8",
    )
    assert cli_main(["--workbook", str(workbook), "--input", str(items)]) == 0

    grid = read_workbook_grids(workbook)["People"]
    assert grid[0] == ["id", "name", "city", "email"]
    assert grid[2] == ["2", "Bob", "Lima", "bob@x.io"]
    assert grid[4][:2] == ["4", "Dan"]
    # 他のシートはそのまま
    assert read_workbook_grids(workbook)["Other"] == [["x"]]


def test_cli_read_does_not_rewrite_workbook(workbook: Path, temp_workdir: Path):
    before = workbook.stat().st_mtime_ns
    _config(temp_workdir, "operation: read\nspreadsheet_id: local\nrange: People!A:C\n")
    assert cli_main(["--workbook", str(workbook)]) == 0
    assert workbook.stat().st_mtime_ns == before


def test_workbook_store_missing_file_starts_empty(temp_workdir: Path):
    path = temp_workdir / "data" / "new.xlsx"
    store = WorkbookStore(path)
    assert store.sheets == {}
    saved = store.save()
    assert saved.exists()
