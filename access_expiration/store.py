from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from logging import getLogger
from typing import Dict, Iterable, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.db import transaction
from django.db.models import OuterRef, Subquery

from access_expiration.decorators import is_administrator
from access_expiration.models import AccessFlag, UserMeta
from access_expiration.policy import ExpirationSettings, compute_expiry
from access_expiration.utilities import format_meta_datetime, parse_meta_datetime, quiet_int

store_logger = getLogger(__name__)

# Keys every initialized user has to have
required_keys = [UserMeta.Key.ACCESS_FLAG, UserMeta.Key.REGISTERED_DATE]


def get_registration_field() -> str:
    return getattr(settings, "ACCESS_EXPIRATION_REGISTRATION_FIELD", "date_joined")


def get_registered_at(user) -> Optional[datetime]:
    """The canonical registration date, owned by the host user model"""
    return getattr(user, get_registration_field(), None)


@dataclass
class UserAccessRecord:
    user_id: int
    values: Dict[str, str] = field(default_factory=dict)

    @property
    def is_initialized(self) -> bool:
        return all(self.values.get(key) for key in required_keys)

    @property
    def access_flag(self) -> Optional[str]:
        return self.values.get(UserMeta.Key.ACCESS_FLAG) or None

    @property
    def is_denied(self) -> bool:
        return self.access_flag == AccessFlag.DENIED

    @property
    def expiration_date(self) -> Optional[datetime]:
        return parse_meta_datetime(self.values.get(UserMeta.Key.EXPIRATION_DATE))

    @property
    def expiration_notification_count(self) -> int:
        return quiet_int(self.values.get(UserMeta.Key.EXPIRATION_NOTIFICATION_COUNT), 0)

    @property
    def welcome_notification_count(self) -> int:
        return quiet_int(self.values.get(UserMeta.Key.WELCOME_NOTIFICATION_COUNT), 0)


@dataclass
class IntegrityIssue:
    user: object
    key: str
    stored: str
    expected: str

    def __str__(self):
        return f"{self.user}: stored {self.key} [{self.stored}] doesn't match [{self.expected}]"


def get_meta(user) -> Dict[str, str]:
    return dict(UserMeta.objects.filter(user=user).values_list("key", "value"))


def get_record(user) -> UserAccessRecord:
    return UserAccessRecord(user_id=user.pk, values=get_meta(user))


def set_meta(user, key: str, value: str):
    UserMeta.objects.update_or_create(user=user, key=key, defaults={"value": value})


def add_meta(user, key: str, value: str) -> bool:
    """Adds the key only if the user doesn't have it yet. Returns True if it was added"""
    meta, created = UserMeta.objects.get_or_create(user=user, key=key, defaults={"value": value})
    return created


def initial_values(user, expiration_settings: ExpirationSettings) -> Dict[str, str]:
    registered_at = get_registered_at(user)
    return {
        UserMeta.Key.ACCESS_FLAG: AccessFlag.ALLOWED,
        UserMeta.Key.REGISTERED_DATE: format_meta_datetime(registered_at),
        UserMeta.Key.EXPIRATION_DATE: format_meta_datetime(
            compute_expiry(registered_at, expiration_settings.duration_days)
        ),
        UserMeta.Key.EXPIRATION_NOTIFICATION_COUNT: "0",
        UserMeta.Key.WELCOME_NOTIFICATION_COUNT: "0",
    }


@transaction.atomic
def initialize_user(user, expiration_settings: ExpirationSettings):
    """First time initialization of a newly registered user, access is allowed and no notification was sent"""
    for key, value in initial_values(user, expiration_settings).items():
        set_meta(user, key, value)
    store_logger.debug(f"Access expiration initialized for user {user}")


def backfill_user(user, expiration_settings: ExpirationSettings) -> List[str]:
    """Adds the missing keys for the user without touching existing ones. Returns the list of keys added"""
    added = []
    for key, value in initial_values(user, expiration_settings).items():
        if add_meta(user, key, value):
            added.append(key)
    return added


def backfill_users(expiration_settings: ExpirationSettings, users: Iterable = None) -> int:
    """Initializes all users missing some of the access expiration keys. Returns the number of users updated"""
    updated = 0
    users = users if users is not None else get_user_model().objects.all()
    for user in users:
        with transaction.atomic():
            added = backfill_user(user, expiration_settings)
        if added:
            updated += 1
            store_logger.info(f"Access expiration keys {[str(key) for key in added]} added for user {user}")
    return updated


def refresh_expiration_dates(expiration_settings: ExpirationSettings, users: Iterable = None) -> int:
    """Recomputes stored expiration dates from the registration date. Returns the number of dates updated"""
    if expiration_settings.duration_days is None:
        store_logger.error("Expiration dates were not refreshed because the access duration is invalid")
        return 0
    updated = 0
    users = users if users is not None else initialized_users()
    for user in users:
        expected = format_meta_datetime(compute_expiry(get_registered_at(user), expiration_settings.duration_days))
        meta, created = UserMeta.objects.get_or_create(
            user=user, key=UserMeta.Key.EXPIRATION_DATE, defaults={"value": expected}
        )
        if created or meta.value != expected:
            meta.value = expected
            meta.save(update_fields=["value"])
            updated += 1
    return updated


def initialized_users():
    return get_user_model().objects.filter(access_meta__key=UserMeta.Key.REGISTERED_DATE).distinct()


def find_integrity_issues(users: Iterable = None) -> List[IntegrityIssue]:
    """Lists users whose stored registration date doesn't match the canonical one"""
    issues = []
    users = users if users is not None else initialized_users()
    for user in users:
        stored = get_meta(user).get(UserMeta.Key.REGISTERED_DATE, "")
        expected = format_meta_datetime(get_registered_at(user))
        if stored != expected:
            issues.append(IntegrityIssue(user, UserMeta.Key.REGISTERED_DATE, stored, expected))
    return issues


def repair_integrity_issues(issues: Iterable[IntegrityIssue]) -> int:
    repaired = 0
    for issue in issues:
        set_meta(issue.user, issue.key, issue.expected)
        store_logger.warning(f"Repaired {issue}")
        repaired += 1
    return repaired


def deny_access(user):
    set_meta(user, UserMeta.Key.ACCESS_FLAG, AccessFlag.DENIED)


def set_access_flag(user, access_flag: str, changed_by):
    """Administrator change of a user's access flag, this is the only way to restore a denied access"""
    if not is_administrator(changed_by):
        store_logger.warning(f"User {changed_by} attempted to change the access of {user} without permission")
        raise PermissionDenied("Only administrators can change a user's access")
    if access_flag not in AccessFlag.values:
        raise ValueError(f"Invalid access flag: [{access_flag}]")
    previous = get_meta(user).get(UserMeta.Key.ACCESS_FLAG)
    set_meta(user, UserMeta.Key.ACCESS_FLAG, access_flag)
    if previous != access_flag:
        store_logger.info(f"Access of user {user} changed from [{previous}] to [{access_flag}] by {changed_by}")


def mark_notified(user, marker_key: str):
    set_meta(user, marker_key, "1")


def meta_subquery(key: str) -> Subquery:
    """The value of a user metadata key, to annotate user querysets with"""
    return Subquery(UserMeta.objects.filter(user=OuterRef("pk"), key=key).values("value")[:1])


def annotate_meta(users):
    return users.annotate(**{str(key): meta_subquery(key) for key in UserMeta.Key.values})
