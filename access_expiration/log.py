from django.conf import settings
from django.core.cache import cache
from django.utils.log import AdminEmailHandler


class ThrottledAdminEmailHandler(AdminEmailHandler):
    """
    Emails administrators about errors, at most LOGGING_ERROR_EMAIL_MAX_EMAILS per logger
    every LOGGING_ERROR_EMAIL_PERIOD_SECONDS.
    A failing notification run logs one error per run, so its emails can't hide the errors of other loggers.
    The default cache implementation is not shared across processes.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.period_in_seconds = getattr(settings, "LOGGING_ERROR_EMAIL_PERIOD_SECONDS", 60)
        self.max_emails = getattr(settings, "LOGGING_ERROR_EMAIL_MAX_EMAILS", 1)
        self.cache_key_prefix = getattr(settings, "LOGGING_ERROR_EMAIL_CACHE_KEY_PREFIX", "access_expiration_error_email")

    def get_cache_key(self, record) -> str:
        return f"{self.cache_key_prefix}:{record.name}"

    def emails_sent(self, record) -> int:
        key = self.get_cache_key(record)
        # add is a no-op when the period already started
        cache.add(key, 0, self.period_in_seconds)
        return cache.incr(key)

    def emit(self, record):
        if self.emails_sent(record) > self.max_emails:
            return
        super().emit(record)
