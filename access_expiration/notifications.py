from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from logging import getLogger
from typing import Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.core.mail import get_connection
from django.db.models import IntegerField, QuerySet
from django.db.models.functions import Cast
from django.utils import timezone

from access_expiration.exceptions import ConfigError, DeliveryFailure, TransportUnavailable
from access_expiration.models import UserMeta
from access_expiration.policy import ExpirationSettings, shift_days
from access_expiration.store import (
    get_record,
    get_registered_at,
    get_registration_field,
    mark_notified,
    meta_subquery,
)
from access_expiration.utilities import (
    EmailCategory,
    format_datetime,
    format_meta_datetime,
    get_email_from_settings,
    render_email_template,
    send_mail,
    transport_errors,
)

notifications_logger = getLogger(__name__)

# Timestamps the scan can select users on
EXPIRE_AT = "expire_at"
REGISTERED_AT = "registered_at"

EXPIRATION_REMINDER = "expiration_reminder"
WELCOME = "welcome"

# Errors after which no more email can be sent during this run
fatal_transport_errors = transport_errors + (ConnectionError,)


@dataclass
class DeliveryReport:
    kind: str
    sent: List[str] = field(default_factory=list)
    failures: List[DeliveryFailure] = field(default_factory=list)
    fatal: Optional[TransportUnavailable] = None
    config_error: Optional[ConfigError] = None
    skipped: str = ""

    @property
    def failed(self) -> List[str]:
        return [failure.address for failure in self.failures]

    @property
    def sent_count(self) -> int:
        return len(self.sent)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def has_errors(self) -> bool:
        return bool(self.failures or self.fatal or self.config_error)

    def summary(self) -> str:
        if self.skipped:
            return f"{self.kind}: skipped ({self.skipped})"
        if self.config_error:
            return f"{self.kind}: not sent, {self.config_error.msg}"
        lines = [f"{self.kind}: {self.sent_count} sent, {self.failed_count} failed"]
        lines.extend(f"  sent to {address}" for address in self.sent)
        lines.extend(f"  failed: {failure.msg}" for failure in self.failures)
        if self.fatal:
            lines.append(f"  aborted: {self.fatal.msg}")
        return "\n".join(lines)


@dataclass
class BatchRunReport:
    started: datetime
    reports: List[DeliveryReport] = field(default_factory=list)

    @property
    def fatal(self) -> Optional[TransportUnavailable]:
        return next((report.fatal for report in self.reports if report.fatal), None)

    @property
    def has_errors(self) -> bool:
        return any(report.has_errors for report in self.reports)

    @property
    def sent_count(self) -> int:
        return sum(report.sent_count for report in self.reports)

    @property
    def failed_count(self) -> int:
        return sum(report.failed_count for report in self.reports)

    def get_report(self, kind: str) -> Optional[DeliveryReport]:
        return next((report for report in self.reports if report.kind == kind), None)

    def summary(self) -> str:
        header = f"Access expiration notifications run of {format_meta_datetime(self.started)}"
        return "\n".join([header, *[report.summary() for report in self.reports]])


def scan_users(timestamp_field: str, window_start: datetime, window_end: datetime, marker_field: str) -> QuerySet:
    """
    Selects users whose timestamp is within [window_start, window_end] and who were not notified yet
    (marker < 1), ordered by registration date.
    Users without the marker, i.e. never initialized, are not selected.
    """
    registration_field = get_registration_field()
    users = get_user_model().objects.annotate(notification_marker=Cast(meta_subquery(marker_field), IntegerField()))
    if timestamp_field == EXPIRE_AT:
        # Stored dates have a fixed width format, text comparison is chronological
        users = users.annotate(stored_expiration_date=meta_subquery(UserMeta.Key.EXPIRATION_DATE)).filter(
            stored_expiration_date__gte=format_meta_datetime(window_start),
            stored_expiration_date__lte=format_meta_datetime(window_end),
        )
    elif timestamp_field == REGISTERED_AT:
        users = users.filter(
            **{f"{registration_field}__gte": window_start, f"{registration_field}__lte": window_end}
        )
    else:
        raise ValueError(f"Cannot scan users on unknown timestamp field: [{timestamp_field}]")
    return users.filter(notification_marker__lt=1).order_by(registration_field, "pk")


def expiration_reminder_candidates(expiration_settings: ExpirationSettings, now: datetime) -> QuerySet:
    window_end = shift_days(now, expiration_settings.expiry_notice_days)
    return scan_users(EXPIRE_AT, now, window_end, UserMeta.Key.EXPIRATION_NOTIFICATION_COUNT)


def welcome_candidates(expiration_settings: ExpirationSettings, now: datetime) -> QuerySet:
    after_days = expiration_settings.welcome_after_days
    window_start = shift_days(now, -(after_days + expiration_settings.welcome_grace_days))
    window_end = shift_days(now, -after_days)
    return scan_users(REGISTERED_AT, window_start, window_end, UserMeta.Key.WELCOME_NOTIFICATION_COUNT)


def dispatch_notifications(
    users: Iterable,
    subject: str,
    body: str,
    marker_field: str,
    expiration_settings: ExpirationSettings,
    kind: str = "",
    email_category: EmailCategory = EmailCategory.GENERAL,
    now: datetime = None,
    connection=None,
) -> DeliveryReport:
    """
    Sends one email per user and sets the marker right after each successful send.
    Individual failures are recorded in the report, a transport failure aborts the remaining sends.
    """
    now = now or timezone.now()
    report = DeliveryReport(kind=kind or marker_field)
    users = list(users)
    if not users:
        return report
    connection = connection or get_connection()
    try:
        connection.open()
    except OSError as e:
        report.fatal = TransportUnavailable(cause=e)
        notifications_logger.error(report.fatal.msg)
        return report
    from_email = expiration_settings.email_from or get_email_from_settings()
    try:
        for user in users:
            address = user.email
            if not address:
                report.failures.append(DeliveryFailure(user, address, "the user doesn't have an email address"))
                continue
            try:
                dictionary = notification_context(user, now)
                sent = send_mail(
                    subject=render_email_template(subject, dictionary).strip(),
                    content=render_email_template(body, dictionary),
                    from_email=from_email,
                    to=[address],
                    cc=expiration_settings.email_cc,
                    email_category=email_category,
                    fail_silently=False,
                    connection=connection,
                )
            except fatal_transport_errors as e:
                report.fatal = TransportUnavailable(cause=e)
                notifications_logger.error(f"{report.fatal.msg}, remaining emails were not sent")
                break
            except Exception as e:
                notifications_logger.exception(f"Error sending {report.kind} email to {address}")
                report.failures.append(DeliveryFailure(user, address, str(e)))
                continue
            if sent:
                mark_notified(user, marker_field)
                report.sent.append(address)
            else:
                report.failures.append(DeliveryFailure(user, address, "the message was not sent"))
    finally:
        connection.close()
    return report


def notification_context(user, now: datetime) -> dict:
    expire_at = get_record(user).expiration_date
    return {
        "user": user,
        "registered_at": get_registered_at(user),
        "expire_at": expire_at,
        "expiration_date": format_datetime(expire_at, "DATE_FORMAT") if expire_at else "",
        "remaining_days": (expire_at - now).days if expire_at else None,
    }


def send_expiration_reminders(expiration_settings: ExpirationSettings, now: datetime) -> DeliveryReport:
    config_error = expiration_settings.error_for("access_expiration_reminder_days")
    if config_error:
        return DeliveryReport(kind=EXPIRATION_REMINDER, config_error=config_error)
    return dispatch_notifications(
        expiration_reminder_candidates(expiration_settings, now),
        expiration_settings.expiry_subject,
        expiration_settings.expiry_message,
        UserMeta.Key.EXPIRATION_NOTIFICATION_COUNT,
        expiration_settings,
        kind=EXPIRATION_REMINDER,
        email_category=EmailCategory.ACCESS_EXPIRATION_REMINDERS,
        now=now,
    )


def send_welcome_emails(expiration_settings: ExpirationSettings, now: datetime) -> DeliveryReport:
    if not expiration_settings.welcome_enabled:
        return DeliveryReport(kind=WELCOME, skipped="welcome email is disabled")
    config_error = expiration_settings.error_for("welcome_email_after_days", "welcome_email_grace_days")
    if config_error:
        return DeliveryReport(kind=WELCOME, config_error=config_error)
    return dispatch_notifications(
        welcome_candidates(expiration_settings, now),
        expiration_settings.welcome_subject,
        expiration_settings.welcome_message,
        UserMeta.Key.WELCOME_NOTIFICATION_COUNT,
        expiration_settings,
        kind=WELCOME,
        email_category=EmailCategory.WELCOME,
        now=now,
    )


def run_notifications(expiration_settings: ExpirationSettings = None, now: datetime = None) -> BatchRunReport:
    """One batch run: expiration reminders then welcome emails, summarized in a single report"""
    expiration_settings = expiration_settings or ExpirationSettings.load()
    now = now or timezone.now()
    run_report = BatchRunReport(started=now)
    for send_notifications in [send_expiration_reminders, send_welcome_emails]:
        report = send_notifications(expiration_settings, now)
        run_report.reports.append(report)
        if report.fatal:
            break
    if run_report.has_errors:
        notifications_logger.error(run_report.summary())
    else:
        notifications_logger.info(run_report.summary())
    send_run_report(run_report, expiration_settings)
    return run_report


def send_run_report(run_report: BatchRunReport, expiration_settings: ExpirationSettings):
    if not expiration_settings.report_emails or run_report.fatal:
        return
    status = "with errors" if run_report.has_errors else "successfully"
    send_mail(
        subject=f"Access expiration notifications completed {status}",
        content=f"<pre>{run_report.summary()}</pre>",
        from_email=expiration_settings.email_from or get_email_from_settings(),
        to=expiration_settings.report_emails,
        email_category=EmailCategory.TIMED_SERVICES,
    )
