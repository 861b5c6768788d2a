from django.conf import settings
from django.db import models
from django.db.models import TextChoices
from django.dispatch import receiver
from django.utils.translation import gettext_lazy as _

from access_expiration.utilities import EmailCategory

CHAR_FIELD_SMALL_LENGTH = 100
CHAR_FIELD_MEDIUM_LENGTH = 255


class AccessFlag(TextChoices):
    ALLOWED = "allowed", _("Allowed")
    DENIED = "denied", _("Denied")


class BaseModel(models.Model):
    class Meta:
        abstract = True


class Customization(BaseModel):
    name = models.CharField(primary_key=True, max_length=CHAR_FIELD_SMALL_LENGTH)
    value = models.TextField()

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return str(self.name)


class UserMeta(BaseModel):
    """
    Flat key/value metadata attached to a host user.
    Values are stored as text, timestamps use the "YYYY-MM-DD HH:MM:SS" format in the local timezone.
    """

    class Key(TextChoices):
        ACCESS_FLAG = "access_flag", _("Access flag")
        REGISTERED_DATE = "registered_date", _("Registration date")
        EXPIRATION_DATE = "expiration_date", _("Access expiration date")
        EXPIRATION_NOTIFICATION_COUNT = "expiration_notification_count", _("Expiration reminder sent")
        WELCOME_NOTIFICATION_COUNT = "welcome_notification_count", _("Welcome email sent")

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="access_meta", on_delete=models.CASCADE)
    key = models.CharField(max_length=CHAR_FIELD_SMALL_LENGTH, choices=Key.choices)
    value = models.CharField(max_length=CHAR_FIELD_MEDIUM_LENGTH, blank=True)

    class Meta:
        ordering = ["user", "key"]
        verbose_name = "User metadata"
        verbose_name_plural = "User metadata"
        constraints = [models.UniqueConstraint(fields=["user", "key"], name="access_expiration_unique_user_key")]
        permissions = (("trigger_timed_services", "Can trigger timed services"),)

    def __str__(self):
        return f"{self.user} {self.key}={self.value}"


class EmailLog(BaseModel):
    category = models.IntegerField(choices=EmailCategory.choices, default=EmailCategory.GENERAL)
    when = models.DateTimeField(null=False, auto_now_add=True)
    sender = models.EmailField(null=False, blank=False)
    to = models.TextField(null=False, blank=False)
    subject = models.CharField(null=False, max_length=CHAR_FIELD_MEDIUM_LENGTH)
    content = models.TextField(null=False)
    ok = models.BooleanField(null=False, default=True)

    class Meta:
        ordering = ["-when"]

    def __str__(self):
        return f"{self.subject} ({self.to})"


@receiver(models.signals.post_save, sender=settings.AUTH_USER_MODEL)
def initialize_new_user(sender, instance, created: bool, raw=False, **kwargs):
    # Fixtures are loaded as is
    if created and not raw:
        from access_expiration.policy import ExpirationSettings
        from access_expiration.store import initialize_user

        initialize_user(instance, ExpirationSettings.load())
