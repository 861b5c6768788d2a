from abc import ABC
from logging import getLogger
from typing import Dict, Iterable, List

from django.conf import settings
from django.contrib import messages
from django.core.exceptions import ValidationError
from django.core.validators import validate_email, validate_integer
from django.http import HttpResponseNotFound
from django.shortcuts import redirect, render
from django.template import Context, Template
from django.views.decorators.http import require_GET, require_POST

from access_expiration.decorators import administrator_required, customization
from access_expiration.exceptions import InvalidCustomizationException
from access_expiration.models import Customization
from access_expiration.utilities import max_days_between_scans, split_email_list

customization_logger = getLogger(__name__)


class CustomizationBase(ABC):
    _instances = {}
    variables = {}
    # Variables rendered as a text area or a checkbox instead of a single line input
    long_text_variables = []
    boolean_variables = []

    def __init__(self, key, title, order=999):
        self.key = key
        self.title = title
        self.order = order

    def template(self) -> str:
        return "access_expiration/customizations.html"

    def context(self) -> Dict:
        variables_dict = {name: type(self).get(name) for name in type(self).variables}
        fields = [
            {
                "name": name,
                "value": value,
                "long_text": name in type(self).long_text_variables,
                "boolean": name in type(self).boolean_variables,
            }
            for name, value in variables_dict.items()
        ]
        return {
            "customization": self,
            "customizations": sorted(type(self).instances(), key=lambda x: x.order),
            "fields": fields,
            **variables_dict,
        }

    def save(self, request) -> Dict[str, Dict[str, str]]:
        errors = {}
        for key in type(self).variables.keys():
            new_value = request.POST.get(key, "")
            try:
                self.validate(key, new_value)
                type(self).set(key, new_value)
            except (ValidationError, InvalidCustomizationException) as e:
                errors[key] = {"error": str(getattr(e, "message", None) or getattr(e, "msg", e)), "value": new_value}
        return errors

    def validate(self, name, value):
        # This method is expected to throw a ValidationError when validation fails
        pass

    def validate_template(self, value, context: Dict):
        try:
            Template(value).render(Context(context))
        except Exception as e:
            raise ValidationError(str(e))

    @classmethod
    def add_instance(cls, inst):
        cls._instances[inst.key] = inst

    @classmethod
    def instances(cls) -> Iterable:
        return cls._instances.values()

    @classmethod
    def get_instance(cls, key):
        return cls._instances.get(key)

    @classmethod
    def all_variables(cls) -> Dict:
        all_variables = {}
        for instance in cls.instances():
            all_variables.update(type(instance).variables)
        return all_variables

    @classmethod
    def get(cls, name: str, raise_exception=True) -> str:
        if name not in cls.variables:
            raise InvalidCustomizationException(name)
        default_value = cls.variables[name]
        try:
            return Customization.objects.get(name=name).value
        except Customization.DoesNotExist:
            # return default value
            return default_value
        except Exception:
            if raise_exception:
                raise
            else:
                return default_value

    @classmethod
    def get_bool(cls, name: str, raise_exception=True) -> bool:
        return cls.get(name, raise_exception) == "enabled"

    @classmethod
    def get_list(cls, name: str, raise_exception=True) -> List[str]:
        return split_email_list(cls.get(name, raise_exception))

    @classmethod
    def set(cls, name: str, value):
        if name not in cls.variables:
            raise InvalidCustomizationException(name, value)
        if value:
            Customization.objects.update_or_create(name=name, defaults={"value": value})
        else:
            try:
                Customization.objects.get(name=name).delete()
            except Customization.DoesNotExist:
                pass


@customization(key="access_expiration", title="Access expiration", order=1)
class AccessExpirationCustomization(CustomizationBase):
    variables = {
        "access_expiration_days": "30",
        "access_expiration_denied_message": "To gain access please contact us.",
    }
    long_text_variables = ["access_expiration_denied_message"]

    def validate(self, name, value):
        if name == "access_expiration_days":
            validate_integer(value)
            if int(value) <= 0:
                raise ValidationError("The number of days must be a positive number")

    @classmethod
    def set(cls, name: str, value):
        value_changed = name == "access_expiration_days" and value != cls.get(name)
        super().set(name, value)
        if value_changed:
            # Stored expiration dates are derived from the duration, recompute them all
            from access_expiration.policy import ExpirationSettings
            from access_expiration.store import refresh_expiration_dates

            refreshed = refresh_expiration_dates(ExpirationSettings.load())
            customization_logger.info(f"Access duration changed to [{value}], {refreshed} expiration date(s) updated")


@customization(key="expiration_reminder", title="Expiration reminder email", order=2)
class ExpirationReminderCustomization(CustomizationBase):
    variables = {
        "access_expiration_reminder_days": "15",
        "access_expiration_reminder_subject": "Your subscription is going to expire!",
        "access_expiration_reminder_message": (
            "Your subscription will expire on {{ expire_at|date:'DATE_FORMAT' }}. Please contact us."
        ),
    }
    long_text_variables = ["access_expiration_reminder_message"]

    def validate(self, name, value):
        if name == "access_expiration_reminder_days":
            validate_integer(value)
            if int(value) < 0:
                raise ValidationError("The number of days cannot be negative")
        elif name in ["access_expiration_reminder_subject", "access_expiration_reminder_message"]:
            self.validate_template(value, {"remaining_days": 1})


@customization(key="welcome_email", title="Welcome email", order=3)
class WelcomeEmailCustomization(CustomizationBase):
    variables = {
        "welcome_email_enabled": "",
        "welcome_email_after_days": "7",
        "welcome_email_grace_days": "4",
        "welcome_email_subject": "Welcome!",
        "welcome_email_message": "Thank you for registering, we hope you are enjoying the site.",
    }
    long_text_variables = ["welcome_email_message"]
    boolean_variables = ["welcome_email_enabled"]

    def validate(self, name, value):
        if name == "welcome_email_enabled" and value not in ["", "enabled"]:
            raise ValidationError("This value must be either empty or 'enabled'")
        if name == "welcome_email_after_days":
            validate_integer(value)
            if int(value) < 0:
                raise ValidationError("The number of days cannot be negative")
        elif name == "welcome_email_grace_days":
            validate_integer(value)
            # Users registered in between two scans would never be selected otherwise
            minimum_grace = max_days_between_scans(getattr(settings, "ACCESS_EXPIRATION_SCAN_DAYS", None))
            if int(value) < minimum_grace:
                raise ValidationError(
                    f"The grace period must be at least the number of days between two scans ({minimum_grace})"
                )
        elif name in ["welcome_email_subject", "welcome_email_message"]:
            self.validate_template(value, {})


@customization(key="emails", title="Email addresses", order=4)
class EmailsCustomization(CustomizationBase):
    variables = {
        "access_expiration_email_from": "",
        "access_expiration_email_cc": "",
        "access_expiration_report_emails": "",
    }

    def validate(self, name, value):
        for email in split_email_list(value):
            validate_email(email)


@administrator_required
@require_GET
def customization(request, key: str = "access_expiration"):
    customization_instance: CustomizationBase = CustomizationBase.get_instance(key)
    if not customization_instance:
        return HttpResponseNotFound(f"Customizations with key: '{key}' not found")
    return render(request, customization_instance.template(), customization_instance.context())


@administrator_required
@require_POST
def customize(request, key):
    customization_instance: CustomizationBase = CustomizationBase.get_instance(key)
    if not customization_instance:
        return HttpResponseNotFound(f"Customizations with key: '{key}' not found")
    errors = customization_instance.save(request)
    if errors:
        messages.error(request, f"Please correct the errors below:")
        return render(
            request, customization_instance.template(), {"errors": errors, **customization_instance.context()}
        )
    else:
        messages.success(request, f"{customization_instance.title} settings saved successfully")
        return redirect("customization", key)
