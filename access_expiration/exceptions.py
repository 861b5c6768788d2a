from typing import Any


class AccessExpirationException(Exception):
    """Basic access expiration exception"""

    default_msg = "An access expiration error occurred"

    def __init__(self, msg=None):
        if msg is None:
            msg = self.default_msg
        self.msg = msg
        super().__init__(msg)


class InvalidCustomizationException(AccessExpirationException):
    def __init__(self, name: str, value: str = None):
        msg = f"Invalid customization ({name})"
        if value is not None:
            msg += f" for value: [{value}]"
        super().__init__(msg)


class ConfigError(AccessExpirationException):
    """Configuration value missing or invalid"""

    def __init__(self, name: str, value: Any = None, msg=None):
        self.name = name
        self.value = value
        message = f"Invalid configuration value for {name}: [{value}]"
        if msg:
            message += f": {msg}"
        super().__init__(message)


class UserAccessError(AccessExpirationException):
    """User access related errors"""

    detailed_msg = ""

    def __init__(self, user: Any, msg=None):
        message = f"An Error occurred with user access [{user}]"
        if msg is not None:
            message += f": {msg}"
        elif self.detailed_msg:
            message += f": {self.detailed_msg}"
        self.user = user
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return self.detailed_msg


class ActivationError(UserAccessError):
    detailed_msg = "This account has not been activated for access expiration, please contact an administrator"


class AccessExpiredError(UserAccessError):
    detailed_msg = "This user's access has expired"

    def __init__(self, user: Any, denied_message: str = ""):
        self.denied_message = denied_message
        super().__init__(user)

    @property
    def user_message(self) -> str:
        return self.denied_message or self.detailed_msg


class DeliveryFailure(AccessExpirationException):
    """Email delivery to one recipient failed"""

    def __init__(self, user: Any, address: str, reason: str = ""):
        self.user = user
        self.address = address
        self.reason = reason
        message = f"Email to [{address or user}] could not be delivered"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class TransportUnavailable(AccessExpirationException):
    """The mail transport could not be used at all"""

    default_msg = "The mail transport is unavailable"

    def __init__(self, msg=None, cause: Exception = None):
        self.cause = cause
        if msg is None and cause is not None:
            msg = f"{self.default_msg}: {cause}"
        super().__init__(msg)
