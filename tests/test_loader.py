"""
Tests for the row loader module.
"""

import json

import pytest

from gets_readiness.config import MAX_ROWS
from gets_readiness.loader import (
    RowLoadError,
    coerce_cell,
    load_rows,
    looks_like_csv,
    looks_like_json,
    parse_rows,
)


class TestFormatDetection:
    """Tests for JSON / CSV sniffing."""

    def test_json(self):
        assert looks_like_json('  [{"a": 1}]')
        assert looks_like_json('{"a": 1}')
        assert not looks_like_json("a,b\n1,2")

    def test_csv(self):
        assert looks_like_csv("inv_no,total\nA,1")
        assert looks_like_csv("inv_no\nA", filename="export.CSV")
        assert not looks_like_csv("just text")


class TestCoerceCell:
    """Tests for CSV cell coercion."""

    def test_integers(self):
        assert coerce_cell("42") == 42
        assert isinstance(coerce_cell("42"), int)

    def test_floats(self):
        assert coerce_cell(" 10.50 ") == 10.5

    def test_text_kept(self):
        assert coerce_cell("INV-001") == "INV-001"
        assert coerce_cell("nan") == "nan"
        assert coerce_cell("") == ""
        assert coerce_cell(None) == ""

    def test_non_ascii_numbers_kept_as_text(self):
        assert coerce_cell("1_00") == "1_00"
        assert coerce_cell("\u0661\u0660\u0660") == "\u0661\u0660\u0660"
        assert coerce_cell("1e3") == 1000.0
        assert coerce_cell("-.5") == -0.5


class TestParseRows:
    """Tests for parse_rows."""

    def test_json_array(self):
        assert parse_rows('[{"inv_no": "1", "total": 5}]') == [{"inv_no": "1", "total": 5}]

    def test_json_object_is_single_row(self):
        assert parse_rows('{"inv_no": "1"}') == [{"inv_no": "1"}]

    def test_nested_json_kept(self):
        rows = parse_rows(json.dumps([{"lines": [{"qty": 1}]}]))
        assert rows[0]["lines"] == [{"qty": 1}]

    def test_csv_with_coercion(self):
        rows = parse_rows("inv_no,total,currency\nA1,10.5,AED\nA2,7,\n")
        assert rows == [
            {"inv_no": "A1", "total": 10.5, "currency": "AED"},
            {"inv_no": "A2", "total": 7, "currency": ""},
        ]

    def test_blank_csv_lines_skipped(self):
        assert parse_rows("a,b\n1,2\n\n,\n") == [{"a": 1, "b": 2}]

    def test_rows_truncated(self):
        text = "a,b\n" + "\n".join("1,2" for _ in range(MAX_ROWS + 50))
        assert len(parse_rows(text)) == MAX_ROWS

    def test_non_object_entries_rejected(self):
        with pytest.raises(RowLoadError):
            parse_rows("[1, 2, 3]")

    def test_scalar_json_rejected(self):
        with pytest.raises(RowLoadError):
            parse_rows('"hello"')

    def test_empty_rejected(self):
        with pytest.raises(RowLoadError):
            parse_rows("   ")

    def test_garbage_rejected(self):
        with pytest.raises(RowLoadError):
            parse_rows("not an export")


class TestLoadRows:
    """Tests for reading exports from disk."""

    def test_csv_file(self, tmp_path):
        path = tmp_path / "invoices.csv"
        path.write_text("inv_no,qty\nA,3\n", encoding="utf-8")
        assert load_rows(path) == [{"inv_no": "A", "qty": 3}]

    def test_json_file(self, tmp_path):
        path = tmp_path / "invoices.json"
        path.write_text(json.dumps([{"inv_no": "A"}]), encoding="utf-8")
        assert load_rows(path) == [{"inv_no": "A"}]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rows(tmp_path / "nope.csv")
