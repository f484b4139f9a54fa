from __future__ import annotations

import unittest

from app.domain.errors import EmptyInputError
from app.parsing.csv_tokenizer import build_raw_records, tokenize_csv, tokenize_line


class TestTokenizeLine(unittest.TestCase):
    def test_splits_on_commas_and_trims_fields(self) -> None:
        self.assertEqual(tokenize_line(" a , b,c "), ["a", "b", "c"])

    def test_comma_inside_quotes_does_not_split(self) -> None:
        self.assertEqual(tokenize_line('node-1,"Quezon City, PH",12.5'), ["node-1", "Quezon City, PH", "12.5"])

    def test_backslash_escaped_quote_is_kept_literally(self) -> None:
        fields = tokenize_line('a,"say \\"hi\\", ok",b')

        self.assertEqual(fields, ["a", 'say \\"hi\\", ok', "b"])

    def test_trailing_comma_yields_empty_last_field(self) -> None:
        self.assertEqual(tokenize_line("a,b,"), ["a", "b", ""])


class TestTokenizeCsv(unittest.TestCase):
    def test_header_row_comes_first_and_blank_lines_are_skipped(self) -> None:
        rows = list(tokenize_csv("datetime,pm25\n\n2024-01-01,1\n   \n2024-01-02,2\n"))

        self.assertEqual(rows, [["datetime", "pm25"], ["2024-01-01", "1"], ["2024-01-02", "2"]])

    def test_crlf_line_endings_are_trimmed(self) -> None:
        rows = list(tokenize_csv("datetime,pm25\r\n2024-01-01,1\r\n"))

        self.assertEqual(rows[1], ["2024-01-01", "1"])

    def test_empty_or_blank_text_raises(self) -> None:
        for text in (None, "", "  \n\n \n"):
            with self.subTest(text=text):
                with self.assertRaises(EmptyInputError):
                    tokenize_csv(text)


class TestBuildRawRecords(unittest.TestCase):
    def test_short_rows_leave_trailing_columns_unset(self) -> None:
        records = list(build_raw_records(["a", "b", "c"], [["1", "2"]]))

        self.assertEqual(records, [(2, {"a": "1", "b": "2"})])

    def test_values_past_the_last_header_are_dropped(self) -> None:
        records = list(build_raw_records(["a", "b"], [["1", "2", "3"], ["4", "5"]]))

        self.assertEqual(records[0], (2, {"a": "1", "b": "2"}))
        self.assertEqual(records[1], (3, {"a": "4", "b": "5"}))
