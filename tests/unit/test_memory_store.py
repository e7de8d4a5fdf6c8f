from __future__ import annotations

from sheetrecords.client.memory import MemorySheetStore
from sheetrecords.client.protocol import GridClient
from sheetrecords.engine.a1 import RangeSpec
from sheetrecords.models.config_models import ValueInputMode, ValueRenderMode

"""MemorySheetStore behaves like the remote service for the calls the engine uses."""

RAW = ValueInputMode.RAW
UNFORMATTED = ValueRenderMode.UNFORMATTED_VALUE


def _spec(text: str) -> RangeSpec:
    return RangeSpec.parse("sid", text)


def test_memory_store_is_a_grid_client(store):
    assert isinstance(store, GridClient)


def test_fetch_clips_to_range_columns(store):
    assert store.fetch_grid(_spec("People!A:B"), UNFORMATTED) == [
        ["id", "name"],
        ["1", "Alice"],
        ["2", "Bob"],
        ["3", "Carol"],
    ]


def test_fetch_offset_range(store):
    assert store.fetch_grid(_spec("People!B3:C4"), UNFORMATTED) == [["Bob", "Lima"], ["Carol", "Oslo"]]


def test_fetch_missing_sheet_or_empty_range_is_none(store):
    assert store.fetch_grid(_spec("Nope!A:C"), UNFORMATTED) is None
    assert store.fetch_grid(_spec("People!E:F"), UNFORMATTED) is None


def test_fetch_trims_trailing_empty_cells_and_rows():
    s = MemorySheetStore({"S": [["a", None, ""], ["b"], [None], []]})
    assert s.fetch_grid(_spec("S!A:C"), UNFORMATTED) == [["a"], ["b"]]


def test_formatted_value_renders_numbers_as_text():
    s = MemorySheetStore({"S": [["n"], [3], [2.5], [4.0]]})
    assert s.fetch_grid(_spec("S!A:A"), ValueRenderMode.FORMATTED_VALUE) == [["n"], ["3"], ["2.5"], ["4"]]


def test_append_after_last_non_empty_row(store):
    store.append_grid(_spec("People!A:C"), [["4", "Dan", "Rome"]], RAW)
    assert store.sheets["People"][-1] == ["4", "Dan", "Rome"]
    assert len(store.sheets["People"]) == 5


def test_append_to_missing_sheet_creates_it():
    s = MemorySheetStore()
    s.append_grid(_spec("New!A:B"), [["x", "y"]], RAW)
    assert s.sheets == {"New": [["x", "y"]]}


def test_user_entered_parses_numbers():
    s = MemorySheetStore({"S": []})
    s.write_grid(_spec("S!A1:C1"), [["12", "1.5", "abc"]], ValueInputMode.USER_ENTERED)
    s.write_grid(_spec("S!A2:B2"), [["12", "x"]], RAW)
    assert s.sheets["S"] == [[12, 1.5, "abc"], ["12", "x"]]


def test_clear_range_only_touches_range(store):
    store.clear_range(_spec("People!C:C"))
    assert store.sheets["People"] == [["id", "name"], ["1", "Alice"], ["2", "Bob"], ["3", "Carol"]]
    store.clear_range(_spec("People!A:C"))
    assert store.sheets["People"] == []


def test_batch_write_addresses_each_range(store):
    store.batch_write("sid", [("People!B3", [["Robert"]]), ("People!D1", [["email"]])], RAW)
    assert store.sheets["People"][2] == ["2", "Robert", "Lima"]
    assert store.sheets["People"][0] == ["id", "name", "city", "email"]
    assert store.history[-1] == ("batch", "2 ranges")


def test_default_sheet_used_without_sheet_prefix():
    s = MemorySheetStore({"Only": [["k"], ["v"]]})
    assert s.fetch_grid(_spec("A:A"), UNFORMATTED) == [["k"], ["v"]]
