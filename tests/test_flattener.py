"""Tests for the tabular flattener and CSV rendering."""
import csv
import io
import json

from apps.export.services.flattener import (
    collect_columns,
    flatten_collection,
    flatten_record,
    rows_to_csv,
)


def _leaves(record, prefix=""):
    for key, value in record.items():
        if isinstance(value, dict):
            yield from _leaves(value, f"{prefix}{key}.")
        else:
            yield f"{prefix}{key}", value


class TestFlattenRecord:

    def test_nested_points_become_dot_paths(self):
        row = flatten_record({"type": "LINE", "startPoint": {"x": 1, "y": 2, "z": 0}})
        assert row == {"type": "LINE", "startPoint.x": 1, "startPoint.y": 2, "startPoint.z": 0}

    def test_lists_are_json_text(self):
        vertices = [{"x": 0, "y": 0}, {"x": 1, "y": 1}]
        row = flatten_record({"vertices": vertices})
        assert row == {"vertices": json.dumps(vertices)}

    def test_prefix(self):
        assert flatten_record({"a": {"b": 1}}, "entity[3].") == {"entity[3].a.b": 1}

    def test_none_and_bool_kept(self):
        assert flatten_record({"a": None, "b": False}) == {"a": None, "b": False}

    def test_non_mapping_gives_empty_row(self):
        assert flatten_record(None) == {}
        assert flatten_record(["x"]) == {}

    def test_leaf_values_reproduced(self):
        record = {
            "type": "INSERT",
            "position": {"x": 1.5, "y": -2, "z": 0},
            "deep": {"a": {"b": {"c": "GEB"}}},
            "attributes": [{"tag": "ART", "text": "GEB 1"}],
            "visible": True,
        }
        row = flatten_record(record)
        for column, value in _leaves(record):
            if isinstance(value, list):
                assert json.loads(row[column]) == value
            else:
                assert row[column] == value


class TestFlattenCollection:

    def test_rows_use_indexed_prefix(self):
        rows = flatten_collection([{"type": "LINE"}, {"type": "ARC", "radius": 2}])
        assert rows == [
            {"entity[0].type": "LINE"},
            {"entity[1].type": "ARC", "entity[1].radius": 2},
        ]

    def test_custom_label(self):
        assert flatten_collection([{"a": 1}], "block") == [{"block[0].a": 1}]

    def test_empty(self):
        assert flatten_collection(None) == []


class TestCsv:

    def test_column_union_first_seen_order(self):
        rows = [{"b": 1, "a": 2}, {"c": 3, "a": 4}]
        assert collect_columns(rows) == ["b", "a", "c"]

    def test_missing_cells_are_empty(self):
        text = rows_to_csv([{"a": 1}, {"b": "x"}])
        parsed = list(csv.reader(io.StringIO(text)))
        assert parsed == [["a", "b"], ["1", ""], ["", "x"]]

    def test_every_cell_quoted(self):
        text = rows_to_csv([{"a": 1, "b": None}])
        assert text.splitlines() == ['"a","b"', '"1",""']

    def test_round_trip_of_awkward_values(self):
        rows = [{"text": 'say "GEB", then\nnewline', "flag": True, "v": "[1, 2]"}]
        parsed = list(csv.reader(io.StringIO(rows_to_csv(rows))))
        assert parsed[1] == ['say "GEB", then\nnewline', "true", "[1, 2]"]

    def test_no_rows(self):
        assert rows_to_csv([]) == ""
