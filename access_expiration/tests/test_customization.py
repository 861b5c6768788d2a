from django.test import TestCase, override_settings
from django.urls import reverse

from access_expiration.exceptions import InvalidCustomizationException
from access_expiration.models import Customization, UserMeta
from access_expiration.policy import ExpirationSettings
from access_expiration.tests.test_utilities import AccessExpirationTestCaseMixin, create_user, local_datetime
from access_expiration.views.customization import (
    AccessExpirationCustomization,
    CustomizationBase,
    WelcomeEmailCustomization,
)

welcome_email_values = {
    "welcome_email_enabled": "enabled",
    "welcome_email_after_days": "7",
    "welcome_email_grace_days": "4",
    "welcome_email_subject": "Welcome {{ user.first_name }}",
    "welcome_email_message": "Thank you for registering",
}


class CustomizationTestCase(AccessExpirationTestCaseMixin, TestCase):
    def test_defaults(self):
        expiration_settings = ExpirationSettings.load()
        self.assertEqual(expiration_settings.duration_days, 30)
        self.assertEqual(expiration_settings.expiry_notice_days, 15)
        self.assertEqual(expiration_settings.denied_message, "To gain access please contact us.")
        self.assertEqual(expiration_settings.expiry_subject, "Your subscription is going to expire!")
        self.assertFalse(expiration_settings.welcome_enabled)
        self.assertEqual(expiration_settings.welcome_after_days, 7)
        self.assertEqual(expiration_settings.welcome_grace_days, 4)
        self.assertEqual(expiration_settings.email_cc, [])
        self.assertEqual(expiration_settings.errors, [])

    def test_saved_values(self):
        WelcomeEmailCustomization.set("welcome_email_enabled", "enabled")
        Customization.objects.create(name="access_expiration_email_cc", value="office@example.com, boss@example.com")
        expiration_settings = ExpirationSettings.load()
        self.assertTrue(expiration_settings.welcome_enabled)
        self.assertEqual(expiration_settings.email_cc, ["office@example.com", "boss@example.com"])
        # empty value goes back to the default
        WelcomeEmailCustomization.set("welcome_email_enabled", "")
        self.assertFalse(Customization.objects.filter(name="welcome_email_enabled").exists())

    def test_invalid_values_are_reported(self):
        Customization.objects.create(name="access_expiration_days", value="thirty")
        with self.assertLogs("access_expiration.policy", level="ERROR"):
            expiration_settings = ExpirationSettings.load()
        self.assertIsNone(expiration_settings.duration_days)
        self.assertIsNotNone(expiration_settings.error_for("access_expiration_days"))
        self.assertIsNone(expiration_settings.error_for("welcome_email_after_days"))

    def test_unknown_customization(self):
        self.assertRaises(InvalidCustomizationException, AccessExpirationCustomization.get, "welcome_email_subject")
        self.assertRaises(InvalidCustomizationException, AccessExpirationCustomization.set, "unknown", "value")

    def test_registered_sections(self):
        keys = [instance.key for instance in sorted(CustomizationBase.instances(), key=lambda x: x.order)]
        self.assertEqual(keys, ["access_expiration", "expiration_reminder", "welcome_email", "emails"])
        self.assertIn("welcome_email_grace_days", CustomizationBase.all_variables())


class CustomizationViewTestCase(AccessExpirationTestCaseMixin, TestCase):
    def test_only_administrators(self):
        response = self.client.get(reverse("customization"))
        self.assert_response_is_login_page(response)
        self.login_as_user()
        response = self.client.get(reverse("customization"))
        self.assert_response_is_login_page(response)
        response = self.client.post(reverse("customize", args=["access_expiration"]), {"access_expiration_days": "1"})
        self.assert_response_is_login_page(response)
        self.assertFalse(Customization.objects.filter(name="access_expiration_days").exists())

    def test_customization_page(self):
        self.login_as_admin()
        response = self.client.get(reverse("customization"))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "access_expiration_days")
        response = self.client.get(reverse("customization", args=["welcome_email"]))
        self.assertContains(response, "welcome_email_grace_days")
        response = self.client.get(reverse("customization", args=["unknown"]))
        self.assertEqual(response.status_code, 404)

    def test_save_duration(self):
        user = create_user(date_joined=local_datetime(2024, 1, 1))
        self.login_as_admin()
        response = self.client.post(
            reverse("customize", args=["access_expiration"]),
            {"access_expiration_days": "60", "access_expiration_denied_message": "Contact us"},
        )
        self.assertRedirects(response, reverse("customization", args=["access_expiration"]))
        self.assertEqual(AccessExpirationCustomization.get("access_expiration_days"), "60")
        self.assert_meta(user, UserMeta.Key.EXPIRATION_DATE, "2024-03-01 00:00:00")

    def test_save_invalid_duration(self):
        self.login_as_admin()
        for invalid_value in ["abc", "0", "-1"]:
            response = self.client.post(
                reverse("customize", args=["access_expiration"]),
                {"access_expiration_days": invalid_value, "access_expiration_denied_message": "Contact us"},
            )
            self.assertEqual(response.status_code, 200)
            self.assertIn("access_expiration_days", response.context["errors"])
            self.assertEqual(AccessExpirationCustomization.get("access_expiration_days"), "30")

    def test_welcome_grace_has_to_cover_scans(self):
        self.login_as_admin()
        response = self.client.post(
            reverse("customize", args=["welcome_email"]), {**welcome_email_values, "welcome_email_grace_days": "3"}
        )
        self.assertIn("welcome_email_grace_days", response.context["errors"])
        response = self.client.post(reverse("customize", args=["welcome_email"]), welcome_email_values)
        self.assertEqual(response.status_code, 302)
        self.assertTrue(WelcomeEmailCustomization.get_bool("welcome_email_enabled"))
        with override_settings(ACCESS_EXPIRATION_SCAN_DAYS=["Mon"]):
            response = self.client.post(reverse("customize", args=["welcome_email"]), welcome_email_values)
            self.assertIn("welcome_email_grace_days", response.context["errors"])

    def test_invalid_templates_and_emails(self):
        self.login_as_admin()
        response = self.client.post(
            reverse("customize", args=["expiration_reminder"]),
            {
                "access_expiration_reminder_days": "15",
                "access_expiration_reminder_subject": "Expiring",
                "access_expiration_reminder_message": "{% if %}",
            },
        )
        self.assertIn("access_expiration_reminder_message", response.context["errors"])
        response = self.client.post(
            reverse("customize", args=["emails"]),
            {"access_expiration_email_from": "not an email", "access_expiration_email_cc": "office@example.com"},
        )
        errors = response.context["errors"]
        self.assertIn("access_expiration_email_from", errors)
        self.assertNotIn("access_expiration_email_cc", errors)
