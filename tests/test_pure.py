import os
import sys
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from utils.pure import (  # noqa: E402
    format_currency,
    format_date,
    generate_markdown_table,
    truncate,
)


class MarkdownTableTestCase(unittest.TestCase):
    def test_table_with_headers_and_aligns(self):
        md = generate_markdown_table(["Name", "Qty"], [["Topi", 2]], ["l", "r"])
        self.assertEqual(md, "| Name | Qty |\n| :--- | ---: |\n| Topi | 2 |")

    def test_first_row_used_as_header(self):
        md = generate_markdown_table(None, [["Name", "Value"], ["Role", "Admin"]])
        self.assertTrue(md.startswith("| Name | Value |\n| :--- | :--- |"))

    def test_pipes_in_cells_are_escaped(self):
        md = generate_markdown_table(["A"], [["x|y"]])
        self.assertIn("x\\|y", md)

    def test_empty_rows(self):
        self.assertEqual(generate_markdown_table(["A"], []), "")

    def test_align_length_mismatch(self):
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [["1", "2"]], ["l"])


class FormattingTestCase(unittest.TestCase):
    def test_format_currency(self):
        self.assertEqual(format_currency(25000), "Rp 25.000")
        self.assertEqual(format_currency(1500000), "Rp 1.500.000")
        self.assertEqual(format_currency(0), "Rp 0")
        self.assertEqual(format_currency(-5000), "-Rp 5.000")

    def test_format_date(self):
        self.assertEqual(format_date("2026-10-16T08:30:00.000Z"), "16 October 2026")
        self.assertEqual(format_date(None), "-")
        self.assertEqual(format_date("yesterday"), "yesterday")

    def test_truncate(self):
        self.assertEqual(truncate("short", 10), "short")
        self.assertEqual(truncate("a long description", 7), "a long…")


if __name__ == "__main__":
    unittest.main()
