"""
Unit tests for shared/utils.py

Tests date parsing utilities, timestamp conversion and summary printing.
"""

import unittest
from datetime import datetime
from unittest.mock import patch

from shared.utils import parse_date_string, print_summary, unix_to_iso, utc_now_iso


class TestParseDateString(unittest.TestCase):
    """Tests for parse_date_string() function."""

    def test_parse_iso_format(self):
        """Parse ISO format (2026-01-24T12:00:00)."""
        result = parse_date_string("2026-01-24T12:00:00")

        self.assertIsNotNone(result)
        self.assertIn("2026-01-24", result)

    def test_parse_verbose_format(self):
        """Parse verbose format (January 24, 2026)."""
        result = parse_date_string("January 24, 2026")

        self.assertIsNotNone(result)
        self.assertIn("2026-01-24", result)

    def test_parse_with_timezone(self):
        """Timezone offset is preserved."""
        result = parse_date_string("2026-01-24T12:00:00+00:00")

        self.assertEqual(result, "2026-01-24T12:00:00+00:00")

    def test_empty_string_returns_none(self):
        self.assertIsNone(parse_date_string(""))

    def test_garbage_returns_none(self):
        """Unparseable input returns None instead of raising."""
        self.assertIsNone(parse_date_string("xyz"))


class TestUnixToIso(unittest.TestCase):
    """Tests for unix_to_iso() function."""

    def test_converts_seconds_to_utc_iso(self):
        self.assertEqual(unix_to_iso(1767225600), "2026-01-01T00:00:00+00:00")

    def test_none_stays_none(self):
        self.assertIsNone(unix_to_iso(None))


class TestUtcNowIso(unittest.TestCase):
    def test_is_timezone_aware(self):
        parsed = datetime.fromisoformat(utc_now_iso())

        self.assertIsNotNone(parsed.tzinfo)
        self.assertEqual(parsed.utcoffset().total_seconds(), 0)


class TestPrintSummary(unittest.TestCase):
    """Tests for print_summary() function."""

    @patch("builtins.print")
    def test_prints_title_and_every_stat(self, mock_print):
        print_summary("Scheduler Complete", {"deliveries_sent": 3, "deliveries_failed": 1})

        output = " ".join(str(c.args[0]) for c in mock_print.call_args_list if c.args)
        self.assertIn("Scheduler Complete", output)
        self.assertIn("Deliveries sent:", output)
        self.assertIn("3", output)
        self.assertIn("Deliveries failed:", output)


if __name__ == "__main__":
    unittest.main()
