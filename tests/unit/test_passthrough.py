from __future__ import annotations

import pytest

from sheetrecords.engine.passthrough import ShapeMismatch, validate_grid


def test_validate_grid_accepts_ragged_rows():
    data = [["a", 1, None], [True], []]
    assert validate_grid(data) == data


def test_validate_grid_rejects_non_list():
    with pytest.raises(ShapeMismatch, match="expected a list of rows"):
        validate_grid({"a": 1})
    with pytest.raises(ShapeMismatch):
        validate_grid(None)


def test_validate_grid_rejects_flat_row():
    with pytest.raises(ShapeMismatch, match="row 1"):
        validate_grid([["ok"], "not a row"])


def test_validate_grid_rejects_nested_cells():
    with pytest.raises(ShapeMismatch, match=r"cell \[0\]\[1\]"):
        validate_grid([["ok", ["nested"]]], source="item 0")
