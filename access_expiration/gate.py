from datetime import datetime
from logging import getLogger
from typing import Union

from django.utils import timezone

from access_expiration.exceptions import AccessExpiredError, ActivationError, UserAccessError
from access_expiration.models import UserMeta
from access_expiration.policy import ExpirationSettings, compute_expiry, is_expired
from access_expiration.store import UserAccessRecord, deny_access, get_record, get_registered_at
from access_expiration.utilities import format_meta_datetime

gate_logger = getLogger(__name__)


def check_user_access(
    user, expiration_settings: ExpirationSettings, now: datetime = None
) -> Union[object, UserAccessError]:
    """
    Decides whether a user who passed the credential check is allowed in.
    Returns the user when access is granted, otherwise the error explaining the denial.
    Errors are returned, not raised, the caller decides how to report them to the authentication pipeline.
    """
    now = now or timezone.now()
    # Administrators are never subject to access expiration
    if user.is_superuser:
        return user
    record = get_record(user)
    if not record.is_initialized:
        gate_logger.error(f"User {user} has no access expiration data, the user was denied access")
        return ActivationError(user)
    registered_at = get_registered_at(user)
    expire_at = compute_expiry(registered_at, expiration_settings.duration_days)
    check_stored_dates(user, record, registered_at, expire_at)
    if record.is_denied or is_expired(expire_at, now):
        deny_access(user)
        gate_logger.info(f"User {user} access has expired (expiration: {expire_at}), the user was denied access")
        return AccessExpiredError(user, expiration_settings.denied_message)
    return user


def check_stored_dates(user, record: UserAccessRecord, registered_at, expire_at):
    """The stored dates are copies derived from the registration date, report when they don't match"""
    stored_registration = record.values.get(UserMeta.Key.REGISTERED_DATE, "")
    if stored_registration != format_meta_datetime(registered_at):
        gate_logger.warning(
            f"Data integrity: user {user} stored registration date [{stored_registration}] doesn't match [{format_meta_datetime(registered_at)}]"
        )
    stored_expiration = record.values.get(UserMeta.Key.EXPIRATION_DATE, "")
    if expire_at and stored_expiration != format_meta_datetime(expire_at):
        gate_logger.warning(
            f"Data integrity: user {user} stored expiration date [{stored_expiration}] doesn't match [{format_meta_datetime(expire_at)}]"
        )
