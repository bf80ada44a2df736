"""
Unit tests for notifications/delivery.py

Tests delivery-record lifecycle (pending -> sent/failed), preference gating
and error handling in send_notification().
"""

import os
import tempfile
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from models import NotificationPayload, NotificationPreferences
from notifications.channels import DeliveryError
from notifications.delivery import deliver, is_channel_enabled, send_notification
from tests.fixtures.mock_helpers import RecordingProvider, calls_to, create_mock_supabase
from tests.fixtures.profile_factory import create_test_payload, create_test_profile


class TestIsChannelEnabled(unittest.TestCase):
    def test_email_and_sms_flags(self):
        prefs = NotificationPreferences(notification_email=True, notification_sms=False)

        self.assertTrue(is_channel_enabled(prefs, "email"))
        self.assertFalse(is_channel_enabled(prefs, "sms"))

    def test_unknown_channel_disabled(self):
        prefs = NotificationPreferences(notification_email=True, notification_sms=True)

        self.assertFalse(is_channel_enabled(prefs, "push"))


@patch("builtins.print")
class TestDeliver(unittest.TestCase):
    """Tests for deliver() delivery-record lifecycle."""

    def test_successful_send_marks_sent(self, mock_print):
        mock_supabase = create_mock_supabase(responses=[[{"id": "del-1"}], []])
        provider = RecordingProvider("email")

        result = deliver(
            mock_supabase, "notif-1", "email", "a@b.co", "Title", "Body", provider=provider
        )

        self.assertEqual(result["delivery_id"], "del-1")
        self.assertEqual(result["status"], "sent")
        self.assertIsNone(result["error"])
        self.assertEqual(result["provider_message_id"], "msg_1")

        inserted, updated = calls_to(mock_supabase, "insert")[0], calls_to(mock_supabase, "update")[0]
        self.assertEqual(
            inserted,
            {"notification_id": "notif-1", "channel": "email", "recipient": "a@b.co", "status": "pending"},
        )
        self.assertEqual(updated["status"], "sent")
        self.assertIsNotNone(updated["sent_at"])
        self.assertIsNone(updated["error_message"])
        mock_supabase.eq.assert_called_with("id", "del-1")

    def test_provider_failure_marks_failed(self, mock_print):
        mock_supabase = create_mock_supabase(responses=[[{"id": "del-2"}], []])
        provider = RecordingProvider("sms", error=DeliveryError("carrier down"))

        result = deliver(
            mock_supabase, "notif-2", "sms", "+1555", "Title", "Body", provider=provider
        )

        self.assertEqual(result["status"], "failed")
        self.assertEqual(result["error"], "carrier down")
        updated = calls_to(mock_supabase, "update")[0]
        self.assertEqual(
            updated, {"status": "failed", "sent_at": None, "error_message": "carrier down"}
        )

    def test_missing_delivery_row_raises(self, mock_print):
        mock_supabase = create_mock_supabase(responses=[[]])
        provider = RecordingProvider("email")

        with self.assertRaises(RuntimeError):
            deliver(mock_supabase, "notif-3", "email", "a@b.co", "T", "B", provider=provider)

        self.assertEqual(provider.sent, [])

    def test_delivery_id_taken_from_inserted_row(self, mock_print):
        mock_supabase = create_mock_supabase(
            responses=[
                [{"id": "del-9", "status": "pending", "created_at": "2026-10-17T08:00:00+00:00"}],
                [],
            ]
        )

        result = deliver(
            mock_supabase, "notif-9", "sms", "+15551234567", "T", "B",
            provider=RecordingProvider("sms"),
        )

        self.assertEqual(result["delivery_id"], "del-9")
        mock_supabase.eq.assert_called_with("id", "del-9")

    def test_invalid_inserted_row_raises_before_sending(self, mock_print):
        mock_supabase = create_mock_supabase(responses=[[{"id": "del-5", "status": "queued"}]])
        provider = RecordingProvider("email")

        with self.assertRaises(ValidationError):
            deliver(mock_supabase, "notif-5", "email", "a@b.co", "T", "B", provider=provider)

        self.assertEqual(provider.sent, [])
        mock_supabase.update.assert_not_called()

    def test_unexpected_provider_error_propagates(self, mock_print):
        """Only DeliveryError is treated as a send failure."""
        mock_supabase = create_mock_supabase(responses=[[{"id": "del-4"}], []])
        provider = RecordingProvider("email", error=KeyError("bug"))

        with self.assertRaises(KeyError):
            deliver(mock_supabase, "notif-4", "email", "a@b.co", "T", "B", provider=provider)

    @patch.dict(
        os.environ,
        {"UNSUBSCRIBE_SECRET_KEY": "test-secret-key-for-testing-must-be-at-least-32-chars-long"},
    )
    def test_email_gets_unsubscribe_link(self, mock_print):
        mock_supabase = create_mock_supabase(responses=[[{"id": "del-5"}], []])
        provider = RecordingProvider("email")

        deliver(
            mock_supabase, "n", "email", "a@b.co", "T", "B", user_id="user-9", provider=provider
        )

        self.assertIn("/unsubscribe?token=", provider.sent[0]["unsubscribe_url"])

    @patch.dict(
        os.environ,
        {"UNSUBSCRIBE_SECRET_KEY": "test-secret-key-for-testing-must-be-at-least-32-chars-long"},
    )
    def test_sms_gets_no_unsubscribe_link(self, mock_print):
        mock_supabase = create_mock_supabase(responses=[[{"id": "del-6"}], []])
        provider = RecordingProvider("sms")

        deliver(mock_supabase, "n", "sms", "+1555", "T", "B", user_id="user-9", provider=provider)

        self.assertIsNone(provider.sent[0]["unsubscribe_url"])


@patch("builtins.print")
class TestSendNotification(unittest.TestCase):
    """Tests for send_notification()."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.env = patch.dict(os.environ, {"ERROR_LOG_DIR": self.tmpdir.name})
        self.env.start()

    def tearDown(self):
        self.env.stop()
        self.tmpdir.cleanup()

    @patch("notifications.delivery.get_supabase_client")
    def test_sends_when_channel_enabled(self, mock_get_client, mock_print):
        mock_supabase = create_mock_supabase(
            responses=[[create_test_profile(notification_email=True)], [{"id": "del-1"}], []]
        )
        mock_get_client.return_value = mock_supabase
        payload = NotificationPayload.model_validate(create_test_payload())

        result = send_notification(payload, provider=RecordingProvider("email"))

        self.assertEqual(
            result,
            {"success": True, "delivery_id": "del-1", "channel": "email", "status": "sent", "error": None},
        )
        mock_supabase.eq.assert_any_call("user_id", payload.user_id)

    @patch("notifications.delivery.get_supabase_client")
    def test_skips_disabled_channel_without_delivery_row(self, mock_get_client, mock_print):
        mock_supabase = create_mock_supabase(
            responses=[[create_test_profile(notification_sms=False)]]
        )
        mock_get_client.return_value = mock_supabase
        payload = NotificationPayload.model_validate(
            create_test_payload(channel="sms", recipient="+15551234567")
        )
        provider = RecordingProvider("sms")

        result = send_notification(payload, provider=provider)

        self.assertEqual(
            result, {"success": True, "skipped": True, "reason": "sms notifications disabled"}
        )
        mock_supabase.insert.assert_not_called()
        self.assertEqual(provider.sent, [])

    @patch("notifications.delivery.get_supabase_client")
    def test_null_preference_counts_as_disabled(self, mock_get_client, mock_print):
        mock_get_client.return_value = create_mock_supabase(
            responses=[[create_test_profile(notification_email=None)]]
        )
        payload = NotificationPayload.model_validate(create_test_payload())

        result = send_notification(payload, provider=RecordingProvider("email"))

        self.assertTrue(result["skipped"])

    @patch("notifications.delivery.get_supabase_client")
    def test_provider_failure_reports_unsuccessful(self, mock_get_client, mock_print):
        mock_get_client.return_value = create_mock_supabase(
            responses=[[create_test_profile()], [{"id": "del-7"}], []]
        )
        payload = NotificationPayload.model_validate(create_test_payload())
        provider = RecordingProvider("email", error=DeliveryError("bounced"))

        result = send_notification(payload, provider=provider)

        self.assertFalse(result["success"])
        self.assertEqual(result["status"], "failed")
        self.assertEqual(result["delivery_id"], "del-7")
        self.assertEqual(result["error"], "bounced")

    @patch("notifications.delivery.get_supabase_client")
    def test_missing_profile_is_error(self, mock_get_client, mock_print):
        mock_get_client.return_value = create_mock_supabase(responses=[[]])
        payload = NotificationPayload.model_validate(create_test_payload())

        result = send_notification(payload, provider=RecordingProvider("email"))

        self.assertFalse(result["success"])
        self.assertIn("Profile not found", result["error"])
        self.assertEqual(len(os.listdir(self.tmpdir.name)), 1)

    @patch("notifications.delivery.get_supabase_client")
    def test_database_error_is_reported(self, mock_get_client, mock_print):
        mock_supabase = create_mock_supabase()
        mock_supabase.execute.side_effect = Exception("connection reset")
        mock_get_client.return_value = mock_supabase
        payload = NotificationPayload.model_validate(create_test_payload())

        result = send_notification(payload, provider=RecordingProvider("email"))

        self.assertEqual(result, {"success": False, "error": "connection reset"})


if __name__ == "__main__":
    unittest.main()
