from logging import getLogger

from django.apps import AppConfig
from django.db.models.signals import post_migrate

apps_logger = getLogger(__name__)


def backfill_after_migrate(sender, using=None, **kwargs):
    """Initializes access expiration data for users that existed before the app was installed"""
    from access_expiration.policy import ExpirationSettings
    from access_expiration.store import backfill_users

    updated = backfill_users(ExpirationSettings.load())
    if updated:
        apps_logger.info(f"Access expiration data added for {updated} existing user(s)")


class AccessExpirationConfig(AppConfig):
    default_auto_field = "django.db.models.AutoField"
    name = "access_expiration"
    verbose_name = "Access expiration"

    def ready(self):
        """
        This code will be run when Django starts.
        """
        # Registers system checks
        from access_expiration import checks  # noqa: F401

        post_migrate.connect(backfill_after_migrate, sender=self)
