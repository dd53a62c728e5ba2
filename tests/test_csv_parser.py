"""Tests for core.csv_parser."""

import sys
import types
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from core.csv_parser import (
    clean_cell,
    iter_row_outcomes,
    parse_csv_text,
    rows_to_frame,
)
from core.errors import MalformedRowError


# ── Well-formed input ──

class TestWellFormed:
    def test_one_row_per_data_line(self, world_csv_text):
        result = parse_csv_text(world_csv_text)
        assert len(result.rows) == 6
        assert result.rejected == []

    def test_every_header_on_every_row(self, world_csv_text):
        result = parse_csv_text(world_csv_text)
        assert result.headers == ["排名", "公司名称", "国家"]
        for row in result.rows:
            assert set(row.keys()) == set(result.headers)

    def test_row_order_preserved(self, world_csv_text):
        result = parse_csv_text(world_csv_text)
        assert [r["排名"] for r in result.rows] == ["1", "2", "3", "4", "5", "6"]

    def test_values_are_strings(self):
        result = parse_csv_text("n,rate\n1,0.5\n")
        assert result.rows == [{"n": "1", "rate": "0.5"}]

    def test_crlf_line_endings(self):
        result = parse_csv_text("a,b\r\n1,2\r\n3,4\r\n")
        assert result.rows == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]

    def test_blank_lines_ignored(self):
        result = parse_csv_text("a,b\n\n1,2\n\n3,4\n")
        assert len(result.rows) == 2
        assert result.rejected == []

    def test_byte_order_mark_stripped_from_header(self):
        result = parse_csv_text("\ufeffa,b\n1,2\n")
        assert result.headers == ["a", "b"]


# ── Cell cleaning ──

class TestCellCleaning:
    def test_trims_and_strips_quotes(self):
        assert clean_cell('  "Tech" ') == "Tech"
        assert clean_cell(" plain ") == "plain"

    def test_fields_trimmed_in_rows(self):
        result = parse_csv_text(' a , "b" \n 1 , "2" \n')
        assert result.headers == ["a", "b"]
        assert result.rows == [{"a": "1", "b": "2"}]


# ── Real CSV grammar ──

class TestQuotedFields:
    def test_quoted_comma_stays_in_one_cell(self):
        result = parse_csv_text('名称,国家\n"Alphabet, Inc.",美国\n')
        assert result.rows == [{"名称": "Alphabet, Inc.", "国家": "美国"}]
        assert result.rejected == []

    def test_quoted_newline_stays_in_one_cell(self):
        result = parse_csv_text('a,b\n"x\ny",1\n2,3\n')
        assert result.rows[0]["a"] == "x\ny"
        assert len(result.rows) == 2

    def test_line_numbers_account_for_embedded_newlines(self):
        outcomes = list(iter_row_outcomes('a,b\n"x\ny",1\n2\n'))
        assert [o.line_number for o in outcomes] == [2, 4]
        assert outcomes[1].ok is False


# ── Malformed rows ──

class TestMalformedRows:
    TEXT = "a,b\n1,2\n3\n4,5,6\n7,8\n"

    def test_mismatched_lines_dropped(self):
        result = parse_csv_text(self.TEXT)
        assert result.rows == [{"a": "1", "b": "2"}, {"a": "7", "b": "8"}]

    def test_mismatched_lines_reported(self):
        result = parse_csv_text(self.TEXT)
        assert [o.line_number for o in result.rejected] == [3, 4]
        assert [o.field_count for o in result.rejected] == [1, 3]
        assert all(o.row is None and o.error for o in result.rejected)

    def test_strict_mode_raises(self):
        with pytest.raises(MalformedRowError) as exc:
            parse_csv_text(self.TEXT, strict=True)
        assert exc.value.line_number == 3
        assert exc.value.expected == 2
        assert exc.value.found == 1

    def test_strict_mode_passes_clean_input(self, world_csv_text):
        result = parse_csv_text(world_csv_text, strict=True)
        assert len(result.rows) == 6


# ── Header offset ──

class TestHeaderOffset:
    def test_offset_skips_leading_lines(self, summary_csv_text):
        result = parse_csv_text(summary_csv_text, header_row=2)
        assert result.headers == ["行业(个人观点)", "平均利润率", "公司数量"]

    def test_skipped_lines_never_become_data(self, summary_csv_text):
        result = parse_csv_text(summary_csv_text, header_row=2)
        labels = [r["行业(个人观点)"] for r in result.rows]
        assert labels == ["Tech", "能源", "零售"]
        assert not any(label.startswith("#") for label in labels)

    def test_line_numbers_count_skipped_lines(self, summary_csv_text):
        result = parse_csv_text(summary_csv_text, header_row=2)
        assert [o.line_number for o in result.rejected] == [6]

    def test_unbalanced_quote_in_preamble_is_skipped(self):
        text = '"broken metadata\nmore\nname,rate\nTech,0.12\n'
        result = parse_csv_text(text, header_row=2)
        assert result.rows == [{"name": "Tech", "rate": "0.12"}]

    def test_fewer_lines_than_offset(self):
        result = parse_csv_text("only\ntwo", header_row=2)
        assert result.headers == []
        assert result.rows == []

    def test_negative_offset_rejected(self):
        with pytest.raises(ValueError):
            parse_csv_text("a,b\n1,2", header_row=-1)


# ── Empty input ──

class TestEmptyInput:
    @pytest.mark.parametrize("text", ["", "   \n\n", None])
    def test_empty(self, text):
        result = parse_csv_text(text)
        assert result.headers == []
        assert result.rows == []
        assert len(result) == 0

    def test_header_only(self):
        result = parse_csv_text("a,b\n")
        assert result.headers == ["a", "b"]
        assert result.rows == []


# ── Lazy outcomes and DataFrame conversion ──

class TestOutcomesAndFrame:
    def test_iter_row_outcomes_is_lazy(self):
        outcomes = iter_row_outcomes("a,b\n1,2\n")
        assert isinstance(outcomes, types.GeneratorType)

    def test_outcomes_in_source_order(self):
        outcomes = list(iter_row_outcomes("a,b\n1,2\n3\n4,5\n"))
        assert [o.ok for o in outcomes] == [True, False, True]
        assert outcomes[2].row == {"a": "4", "b": "5"}

    def test_rows_to_frame(self, world_csv_text):
        result = parse_csv_text(world_csv_text)
        df = rows_to_frame(result.rows, result.headers)
        assert list(df.columns) == result.headers
        assert len(df) == 6
        assert df["国家"].iloc[1] == "中国"

    def test_rows_to_frame_empty(self):
        df = rows_to_frame([], ["a", "b"])
        assert list(df.columns) == ["a", "b"]
        assert df.empty

    def test_rows_to_frame_column_subset(self):
        df = rows_to_frame([{"a": "1", "b": "2"}, {"b": "3"}], headers=["a"])
        assert list(df.columns) == ["a"]
        assert df["a"].iloc[0] == "1"
        assert df["a"].isna().iloc[1]
