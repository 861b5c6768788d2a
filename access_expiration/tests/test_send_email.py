from smtplib import SMTPConnectError, SMTPServerDisconnected
from unittest.mock import patch

from django.core import mail
from django.test import TestCase, override_settings

from access_expiration.models import EmailLog
from access_expiration.tests.test_utilities import AccessExpirationTestCaseMixin
from access_expiration.utilities import EmailCategory, send_mail


class TestSendMailRetries(AccessExpirationTestCaseMixin, TestCase):
    def setUp(self):
        self.subject = "Retry Test"
        self.content = "<p>Testing retry logic</p>"
        self.from_email = "test@example.com"
        self.to = ["recipient@example.com"]

    @patch("access_expiration.utilities.EmailMessage.send", side_effect=[SMTPServerDisconnected(), 1])
    def test_send_mail_retries_on_disconnection(self, mock_send):
        result = send_mail(self.subject, self.content, self.from_email, self.to, fail_silently=True)
        self.assertEqual(result, 1)
        self.assertEqual(mock_send.call_count, 2)
        self.assertTrue(EmailLog.objects.get().ok)

    @patch("access_expiration.utilities.EmailMessage.send", side_effect=[SMTPConnectError(451, "Temporary error"), 1])
    def test_send_mail_retries_on_connect_error(self, mock_send):
        result = send_mail(self.subject, self.content, self.from_email, self.to, fail_silently=True)
        self.assertEqual(result, 1)
        self.assertEqual(mock_send.call_count, 2)

    @patch(
        "access_expiration.utilities.EmailMessage.send",
        side_effect=[SMTPServerDisconnected(), SMTPConnectError(451, "Temporary error")],
    )
    def test_send_mail_fails_after_max_retries(self, mock_send):
        result = send_mail(self.subject, self.content, self.from_email, self.to, fail_silently=True)
        self.assertEqual(result, 0)
        self.assertEqual(mock_send.call_count, 2)
        self.assertFalse(EmailLog.objects.get().ok)

    @patch(
        "access_expiration.utilities.EmailMessage.send",
        side_effect=[SMTPServerDisconnected(), SMTPServerDisconnected()],
    )
    def test_send_mail_raises_when_not_silent(self, mock_send):
        self.assertRaises(
            SMTPServerDisconnected, send_mail, self.subject, self.content, self.from_email, self.to, fail_silently=False
        )
        self.assertFalse(EmailLog.objects.get().ok)


class TestSendMail(AccessExpirationTestCaseMixin, TestCase):
    def test_email_log(self):
        send_mail(
            "Subject",
            "<p>Content</p>",
            "sender@example.com",
            ["to@example.com", "to@example.com", ""],
            cc=["cc@example.com"],
            email_category=EmailCategory.WELCOME,
        )
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["to@example.com"])
        self.assertEqual(mail.outbox[0].content_subtype, "html")
        email_log = EmailLog.objects.get()
        self.assertEqual(email_log.category, EmailCategory.WELCOME)
        self.assertEqual(email_log.to, "to@example.com, cc@example.com")
        self.assertTrue(email_log.ok)

    def test_no_recipients(self):
        self.assertEqual(send_mail("Subject", "Content", "sender@example.com", []), 0)
        self.assertEqual(len(mail.outbox), 0)
        self.assertFalse(EmailLog.objects.exists())

    @override_settings(ACCESS_EXPIRATION_EMAIL_SUBJECT_PREFIX="[Site] ")
    def test_subject_prefix(self):
        send_mail("Subject", "Content", "sender@example.com", ["to@example.com"])
        self.assertEqual(mail.outbox[0].subject, "[Site] Subject")

    def test_recipients_must_be_a_list(self):
        self.assertRaises(TypeError, send_mail, "Subject", "Content", "sender@example.com", "to@example.com")
