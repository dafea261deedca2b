"""Tests for parsebench.parsers.validate — row-sum output check."""

from __future__ import annotations

import unittest

from parsebench.bench.timing import ValidationFailure
from parsebench.parsers.validate import expected_id_sum, make_row_sum_validator


class TestRowSumValidator(unittest.TestCase):
    """Tests for make_row_sum_validator()."""

    def test_expected_sum(self) -> None:
        self.assertEqual(expected_id_sum(1), 0)
        self.assertEqual(expected_id_sum(4), 6)
        self.assertEqual(expected_id_sum(1000), 499_500)

    def test_accepts_correct_rows(self) -> None:
        check = make_row_sum_validator(4)
        check([["0", "a"], ["1", "b"], ["2", "c"], ["3", "d"]])

    def test_accepts_int_ids(self) -> None:
        make_row_sum_validator(3)([[0], [1], [2]])

    def test_missing_row(self) -> None:
        check = make_row_sum_validator(4)
        with self.assertRaises(ValidationFailure) as cm:
            check([["0"], ["1"], ["2"]])
        self.assertIn("Sum: 3 (expected 6)", str(cm.exception))

    def test_header_kept(self) -> None:
        check = make_row_sum_validator(2)
        with self.assertRaises(ValidationFailure) as cm:
            check([["id", "name"], ["0", "a"], ["1", "b"]])
        self.assertIn("row 1", str(cm.exception))

    def test_split_quoted_field(self) -> None:
        check = make_row_sum_validator(2)
        with self.assertRaises(ValidationFailure):
            check([["0", '"Name'], [' 0"'], ["1", "x"]])

    def test_empty_row(self) -> None:
        with self.assertRaises(ValidationFailure):
            make_row_sum_validator(1)([[]])

    def test_not_rows(self) -> None:
        with self.assertRaises(ValidationFailure):
            make_row_sum_validator(1)([None])


if __name__ == "__main__":
    unittest.main()
