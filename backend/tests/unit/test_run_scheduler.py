"""Unit tests for the notifications/run_scheduler.py CLI."""

import unittest
from unittest.mock import patch

from notifications.run_scheduler import main


@patch("builtins.print")
class TestRunSchedulerCli(unittest.TestCase):
    @patch("notifications.run_scheduler.run_notification_scheduler")
    def test_defaults(self, mock_run, mock_print):
        mock_run.return_value = {
            "success": True,
            "notifications_created": 2,
            "deliveries_sent": 2,
            "deliveries_failed": 0,
        }

        exit_code = main([])

        self.assertEqual(exit_code, 0)
        mock_run.assert_called_once_with(
            hours_ahead=24,
            categories=["calendar"],
            lookback_minutes=5,
            since=None,
            dry_run=False,
        )

    @patch("notifications.run_scheduler.run_notification_scheduler")
    def test_passes_options(self, mock_run, mock_print):
        mock_run.return_value = {
            "success": True,
            "notifications_created": 0,
            "deliveries_sent": 0,
            "deliveries_failed": 0,
        }

        main(
            [
                "--hours-ahead", "48",
                "--category", "calendar",
                "--category", "expense",
                "--since", "2026-10-17 08:00",
                "--dry-run",
            ]
        )

        kwargs = mock_run.call_args.kwargs
        self.assertEqual(kwargs["hours_ahead"], 48)
        self.assertEqual(kwargs["categories"], ["calendar", "expense"])
        self.assertEqual(kwargs["since"], "2026-10-17 08:00")
        self.assertTrue(kwargs["dry_run"])

    @patch("notifications.run_scheduler.run_notification_scheduler")
    def test_failure_exit_code(self, mock_run, mock_print):
        mock_run.return_value = {"success": False, "error": "rpc failed"}

        self.assertEqual(main([]), 1)

    @patch("notifications.run_scheduler.run_notification_scheduler")
    def test_rejects_non_positive_hours(self, mock_run, mock_print):
        with patch("sys.stderr"):
            with self.assertRaises(SystemExit):
                main(["--hours-ahead", "0"])

        mock_run.assert_not_called()


if __name__ == "__main__":
    unittest.main()
