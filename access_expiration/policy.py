from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from logging import getLogger
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from access_expiration.exceptions import ConfigError
from access_expiration.utilities import as_timezone, localize

policy_logger = getLogger(__name__)


def parse_days(value, minimum=0) -> Optional[int]:
    """Returns the number of days as an integer, None if the value is not an integer >= minimum"""
    if isinstance(value, bool):
        return None
    try:
        days = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return days if days >= minimum else None


def parse_duration(value) -> Optional[int]:
    return parse_days(value, minimum=1)


def shift_days(moment: datetime, days: int) -> datetime:
    """
    Adds (or subtracts) calendar days. The addition is done on the local wall clock
    so a daylight saving change doesn't move the time of day.
    """
    local_moment = as_timezone(moment)
    if local_moment.tzinfo is None:
        return local_moment + relativedelta(days=days)
    return localize(local_moment.replace(tzinfo=None) + relativedelta(days=days))


def compute_expiry(registered_at: datetime, duration_days) -> Optional[datetime]:
    """
    Returns the date and time at which access expires: registration + duration in calendar days.
    Returns None when the duration is not a valid positive integer, which is_expired treats as expired.
    """
    duration = parse_duration(duration_days)
    if duration is None or registered_at is None:
        return None
    return shift_days(registered_at, duration)


def is_expired(expire_at: Optional[datetime], now: datetime) -> bool:
    if expire_at is None:
        # Unknown expiration, fail closed
        return True
    return now >= expire_at


@dataclass(frozen=True)
class ExpirationSettings:
    """The configuration used by the access gate, the notification scans and the dispatcher"""

    duration_days: Optional[int] = 30
    denied_message: str = ""
    expiry_notice_days: Optional[int] = 15
    expiry_subject: str = ""
    expiry_message: str = ""
    welcome_enabled: bool = False
    welcome_after_days: Optional[int] = 7
    welcome_grace_days: Optional[int] = 4
    welcome_subject: str = ""
    welcome_message: str = ""
    email_from: str = ""
    email_cc: List[str] = field(default_factory=list)
    report_emails: List[str] = field(default_factory=list)
    errors: List[ConfigError] = field(default_factory=list)

    @classmethod
    def load(cls) -> ExpirationSettings:
        from access_expiration.views.customization import (
            AccessExpirationCustomization,
            EmailsCustomization,
            ExpirationReminderCustomization,
            WelcomeEmailCustomization,
        )

        errors = []

        def days(customization_class, name, minimum=0):
            value = customization_class.get(name)
            parsed = parse_days(value, minimum)
            if parsed is None:
                error = ConfigError(name, value)
                policy_logger.error(error.msg)
                errors.append(error)
            return parsed

        return cls(
            duration_days=days(AccessExpirationCustomization, "access_expiration_days", minimum=1),
            denied_message=AccessExpirationCustomization.get("access_expiration_denied_message"),
            expiry_notice_days=days(ExpirationReminderCustomization, "access_expiration_reminder_days"),
            expiry_subject=ExpirationReminderCustomization.get("access_expiration_reminder_subject"),
            expiry_message=ExpirationReminderCustomization.get("access_expiration_reminder_message"),
            welcome_enabled=WelcomeEmailCustomization.get_bool("welcome_email_enabled"),
            welcome_after_days=days(WelcomeEmailCustomization, "welcome_email_after_days"),
            welcome_grace_days=days(WelcomeEmailCustomization, "welcome_email_grace_days"),
            welcome_subject=WelcomeEmailCustomization.get("welcome_email_subject"),
            welcome_message=WelcomeEmailCustomization.get("welcome_email_message"),
            email_from=EmailsCustomization.get("access_expiration_email_from"),
            email_cc=EmailsCustomization.get_list("access_expiration_email_cc"),
            report_emails=EmailsCustomization.get_list("access_expiration_report_emails"),
            errors=errors,
        )

    def error_for(self, *names: str) -> Optional[ConfigError]:
        return next((error for error in self.errors if error.name in names), None)
