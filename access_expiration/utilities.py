from __future__ import annotations

from datetime import date, datetime, time
from logging import getLogger
from smtplib import SMTPAuthenticationError, SMTPConnectError, SMTPServerDisconnected
from typing import List, Optional, Set, Tuple, Union

from django.conf import global_settings, settings
from django.core.mail import EmailMessage
from django.db.models import IntegerChoices
from django.http import HttpRequest
from django.template import Template
from django.template.context import make_context
from django.utils import timezone as django_timezone
from django.utils.formats import date_format, time_format
from django.utils.translation import gettext_lazy as _

utilities_logger = getLogger(__name__)

# Format used to persist timestamps in user metadata, always in the local timezone
meta_datetime_format = "%Y-%m-%d %H:%M:%S"

# Connection level errors, the mail transport itself is not usable when those are raised
transport_errors = (SMTPServerDisconnected, SMTPConnectError, SMTPAuthenticationError)


class EmptyHttpRequest(HttpRequest):
    def __init__(self):
        super().__init__()
        self.session = {}
        self.user = None


class EmailCategory(IntegerChoices):
    GENERAL = 0, _("General")
    SYSTEM = 1, _("System")
    ACCESS_EXPIRATION_REMINDERS = 2, _("Access Expiration Reminders")
    WELCOME = 3, _("Welcome")
    TIMED_SERVICES = 4, _("Timed Services")


def quiet_int(value_to_convert, default_upon_failure=0):
    """
    Attempt to convert the given value to an integer. If there is any problem
    during the conversion, simply return 'default_upon_failure'.
    """
    result = default_upon_failure
    try:
        result = int(value_to_convert)
    except (TypeError, ValueError):
        pass
    return result


def format_datetime(universal_time=None, df=None, as_current_timezone=True, use_l10n=None) -> str:
    this_time = universal_time if universal_time else django_timezone.now() if as_current_timezone else datetime.now()
    local_time = as_timezone(this_time) if as_current_timezone else this_time
    if isinstance(local_time, time):
        return time_format(local_time, df or "TIME_FORMAT", use_l10n)
    elif isinstance(local_time, datetime):
        return date_format(local_time, df or "DATETIME_FORMAT", use_l10n)
    return date_format(local_time, df or "DATE_FORMAT", use_l10n)


def as_timezone(dt):
    naive = type(dt) == date or django_timezone.is_naive(dt)
    return django_timezone.localtime(dt) if not naive else dt


def localize(dt, tz=None):
    tz = tz or django_timezone.get_current_timezone()
    return django_timezone.make_aware(dt, tz)


def format_meta_datetime(dt: Optional[datetime]) -> str:
    if dt is None:
        return ""
    return as_timezone(dt).strftime(meta_datetime_format)


def parse_meta_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Returns the datetime of a stored metadata value, None if the value is blank or malformed.
    The result is aware in the local timezone, or naive local time when USE_TZ is off.
    """
    if not value:
        return None
    try:
        parsed = datetime.strptime(value.strip(), meta_datetime_format)
    except ValueError:
        utilities_logger.warning(f"Could not parse stored date/time value: [{value}]")
        return None
    return localize(parsed) if settings.USE_TZ else parsed


def remove_duplicates(iterable: Union[List, Set, Tuple]) -> List:
    if not iterable:
        return []
    if isinstance(iterable, str):
        raise TypeError("argument must be a list, set or tuple")
    return list(dict.fromkeys(iterable))


def send_mail(
    subject,
    content,
    from_email,
    to=None,
    bcc=None,
    cc=None,
    email_category: EmailCategory = EmailCategory.GENERAL,
    fail_silently=True,
    connection=None,
) -> int:
    try:
        clean_to = list(filter(None, remove_duplicates(to)))
        clean_bcc = list(filter(None, remove_duplicates(bcc)))
        clean_cc = list(filter(None, remove_duplicates(cc)))
    except TypeError:
        raise TypeError("to, cc and bcc arguments must be a list, set or tuple")
    user_reply_to = getattr(settings, "EMAIL_USE_DEFAULT_AND_REPLY_TO", False)
    reply_to = None
    if user_reply_to:
        reply_to = [from_email]
        from_email = None
    email_prefix = getattr(settings, "ACCESS_EXPIRATION_EMAIL_SUBJECT_PREFIX", None)
    if email_prefix and not subject.startswith(email_prefix):
        subject = email_prefix + subject
    mail = EmailMessage(
        subject=subject,
        body=content,
        from_email=from_email,
        to=clean_to,
        bcc=clean_bcc,
        cc=clean_cc,
        reply_to=reply_to,
        connection=connection,
    )
    mail.content_subtype = "html"
    msg_sent = 0
    if mail.recipients():
        email_record = create_email_log(mail, email_category)
        try:
            # retry once if we get one of the connection errors
            for i in range(2):
                try:
                    msg_sent = mail.send()
                    break
                except transport_errors as e:
                    if i == 0:
                        utilities_logger.exception(str(e))
                        utilities_logger.warning(f"Email sending got an error, retrying once")
                        # a broken connection stays open until closed, the retry has to open a new one
                        if mail.connection:
                            mail.connection.close()
                    else:
                        utilities_logger.warning(f"Retrying didn't work")
                        raise
            if not msg_sent:
                email_record.ok = False
        except Exception as e:
            email_record.ok = False
            if not fail_silently:
                raise
            else:
                utilities_logger.error(e)
        finally:
            email_record.save()
    return msg_sent


def create_email_log(email: EmailMessage, email_category: EmailCategory):
    from access_expiration.models import EmailLog

    return EmailLog(
        category=email_category,
        sender=email.from_email or get_email_from_settings(),
        to=", ".join(email.recipients()),
        subject=email.subject,
        content=email.body,
    )


def render_email_template(template, dictionary: dict, request=None):
    """Use Django's templating engine to render the email template
    If we don't have a request, create a empty one so context_processors (messages, customizations etc.) can be used
    """
    return Template(template).render(make_context(dictionary, request or EmptyHttpRequest()))


def get_email_from_settings() -> str:
    """
    Return the default from email if it has been overriden, otherwise the server email
    This allows admins to specify a different default from email (used for communication)
    from the server email which is more meant for errors and such.
    """
    return (
        settings.DEFAULT_FROM_EMAIL
        if settings.DEFAULT_FROM_EMAIL != global_settings.DEFAULT_FROM_EMAIL
        else settings.SERVER_EMAIL
    )


def split_email_list(value: str) -> List[str]:
    return [e.strip() for e in (value or "").split(",") if e.strip()]


# Days of the week the notification scans run on by default, as used by systemd OnCalendar
default_scan_days = ["Mon", "Thu"]
weekdays = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def max_days_between_scans(scan_days: Optional[List[str]] = None) -> int:
    """Returns the longest gap, in days, between two consecutive scans running on the given days of the week"""
    days = sorted({weekdays.index(day[:3].capitalize()) for day in (scan_days or default_scan_days)})
    if not days:
        return 7
    gaps = [later - earlier for earlier, later in zip(days, days[1:])]
    gaps.append(days[0] + 7 - days[-1])
    return max(gaps)
