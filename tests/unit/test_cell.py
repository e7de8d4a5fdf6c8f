from __future__ import annotations

from sheetrecords.models.cell import cell_text, cells_equal, coerce_cell, is_empty_row


def test_coerce_cell_keeps_variant_values():
    assert coerce_cell("x") == "x"
    assert coerce_cell("") == ""
    assert coerce_cell(3) == 3
    assert coerce_cell(2.5) == 2.5
    assert coerce_cell(None) is None


def test_coerce_cell_bool_renders_like_sheet():
    assert coerce_cell(True) == "TRUE"
    assert coerce_cell(False) == "FALSE"


def test_coerce_cell_containers_become_json_text():
    assert coerce_cell({"a": 1}) == '{"a": 1}'
    assert coerce_cell([1, "b"]) == '[1, "b"]'


def test_cells_equal_compares_canonical_text():
    assert cells_equal("1", "1")
    assert cells_equal("7", 7)
    assert cells_equal(7.0, "7")
    assert cells_equal(1, 1.0)
    assert cells_equal("2.5", 2.5)
    assert not cells_equal("7.0", 7)
    assert not cells_equal(" 7", 7)
    assert not cells_equal("Alice", "alice")


def test_cells_equal_empty_matches_only_empty():
    assert cells_equal(None, None)
    assert not cells_equal(None, "")
    assert not cells_equal("", None)
    assert cells_equal("", "")


def test_cell_text():
    assert cell_text(None) is None
    assert cell_text("") == ""
    assert cell_text(12) == "12"
    assert cell_text(12.0) == "12"
    assert cell_text(0.1) == "0.1"
    assert cell_text(-3.0) == "-3"


def test_is_empty_row():
    assert is_empty_row([])
    assert is_empty_row([None, ""])
    assert not is_empty_row([None, "x"])
