import logging

from django.core import mail
from django.core.cache import cache
from django.test import TestCase, override_settings

from access_expiration.log import ThrottledAdminEmailHandler


@override_settings(LOGGING_ERROR_EMAIL_MAX_EMAILS=2, LOGGING_ERROR_EMAIL_CACHE_KEY_PREFIX="test_error_email")
class ThrottledAdminEmailHandlerTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.handler = ThrottledAdminEmailHandler()
        self.notifications_logger = logging.getLogger("access_expiration.tests.notifications")
        self.gate_logger = logging.getLogger("access_expiration.tests.gate")
        for logger in [self.notifications_logger, self.gate_logger]:
            logger.addHandler(self.handler)

    def tearDown(self):
        for logger in [self.notifications_logger, self.gate_logger]:
            logger.removeHandler(self.handler)
        cache.clear()

    def test_emails_are_throttled(self):
        for i in range(4):
            self.notifications_logger.error(f"Access expiration notifications failed {i}")
        self.assertEqual(len(mail.outbox), 2)
        self.assertEqual(mail.outbox[0].to, ["sysadmin@example.org"])
        self.assertEqual(cache.get("test_error_email:access_expiration.tests.notifications"), 4)

    def test_loggers_are_throttled_separately(self):
        for i in range(3):
            self.notifications_logger.error(f"Access expiration notifications failed {i}")
        self.gate_logger.error("User has no access expiration data")
        self.assertEqual(len(mail.outbox), 3)
        self.assertIn("User has no access expiration data", mail.outbox[2].subject)
