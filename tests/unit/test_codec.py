from __future__ import annotations

from sheetrecords.engine.codec import column_positions, decode, encode, trim_trailing_empty


def test_decode_basic_table():
    grid = [["id", "name"], ["1", "Alice"], ["2", "Bob"]]
    records = decode(grid, 0, 1)
    assert [r.to_dict() for r in records] == [{"id": "1", "name": "Alice"}, {"id": "2", "name": "Bob"}]
    assert [r.row_index for r in records] == [1, 2]


def test_decode_ragged_rows():
    grid = [["id", "name", "city"], ["1"], ["2", "Bob", "Lima", "extra"]]
    records = decode(grid, 0, 1)
    # short row: missing columns are omitted, not set to empty
    assert records[0].to_dict() == {"id": "1"}
    assert "name" not in records[0]
    # long row: columns beyond the header are ignored
    assert records[1].to_dict() == {"id": "2", "name": "Bob", "city": "Lima"}


def test_decode_keeps_blank_cells_distinct_from_missing():
    records = decode([["a", "b"], ["", None]], 0, 1)
    assert records[0].to_dict() == {"a": "", "b": None}


def test_decode_empty_rows_are_not_filtered():
    records = decode([["a"], [], ["x"]], 0, 1)
    assert [r.to_dict() for r in records] == [{}, {"a": "x"}]


def test_decode_header_not_on_first_row():
    grid = [["Report title"], ["id", "name"], ["1", "Alice"]]
    records = decode(grid, key_row=1, data_start_row=2)
    assert [r.to_dict() for r in records] == [{"id": "1", "name": "Alice"}]
    assert records[0].row_index == 2


def test_decode_duplicate_header_last_column_wins():
    records = decode([["x", "x"], ["first", "second"]], 0, 1)
    assert records[0].to_dict() == {"x": "second"}
    assert column_positions(["x", "y", "x"]) == {"x": 2, "y": 1}


def test_decode_without_header_row():
    assert decode([], 0, 1) == []
    assert decode([["id"]], 3, 4) == []


def test_encode_projects_onto_existing_header():
    enc = encode([{"name": "Dan", "id": "4"}], ["id", "name", "city"])
    assert enc.header == ["id", "name", "city"]
    assert enc.rows == [["4", "Dan", None]]
    assert not enc.header_grew


def test_encode_grows_header_for_unknown_fields():
    enc = encode([{"id": "1"}, {"id": "2", "email": "b@x.io"}], ["id", "name"])
    assert enc.header == ["id", "name", "email"]
    assert enc.added_columns == ["email"]
    assert enc.rows == [["1", None, None], ["2", None, "b@x.io"]]


def test_encode_empty_header_uses_first_seen_order():
    enc = encode([{"b": 1, "a": 2}, {"c": 3}])
    assert enc.header == ["b", "a", "c"]
    assert enc.grid == [["b", "a", "c"], [1, 2, None], [None, None, 3]]


def test_round_trip_with_homogeneous_records():
    records = [{"id": "1", "name": "Alice"}, {"id": "2", "name": "Bob"}]
    enc = encode(records, ["id", "name"])
    assert [r.to_dict() for r in decode(enc.grid, 0, 1)] == records


def test_round_trip_keeps_empty_last_column():
    records = [{"id": "1", "name": None}, {"id": "2", "name": "Bob"}]
    enc = encode(records, ["id", "name"])
    assert enc.rows == [["1", None], ["2", "Bob"]]
    assert [r.to_dict() for r in decode(enc.grid, 0, 1)] == records


def test_round_trip_with_numbers_and_blank_text():
    records = [{"id": 1, "score": 2.5, "note": ""}, {"id": 2, "score": None, "note": None}]
    enc = encode(records, ["id", "score", "note"])
    assert [r.to_dict() for r in decode(enc.grid, 0, 1)] == records


def test_trim_trailing_empty():
    assert trim_trailing_empty(["1", None, "x", None, None]) == ["1", None, "x"]
    assert trim_trailing_empty(["", None]) == [""]
    assert trim_trailing_empty([None]) == []
