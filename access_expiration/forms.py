from django.core.exceptions import NON_FIELD_ERRORS, ValidationError
from django.forms import BaseForm, ChoiceField, Form
from django.forms.utils import ErrorDict, ErrorList

from access_expiration.models import AccessFlag


class UserAccessForm(Form):
    access_flag = ChoiceField(choices=AccessFlag.choices, label="Access")


def nice_errors(obj, non_field_msg="General form errors") -> ErrorDict:
    result = ErrorDict()
    error_dict = (
        obj.errors if isinstance(obj, BaseForm) else obj.message_dict if isinstance(obj, ValidationError) else {}
    )
    for field_name, errors in error_dict.items():
        if field_name == NON_FIELD_ERRORS:
            key = non_field_msg
        elif hasattr(obj, "fields"):
            key = obj.fields[field_name].label
        else:
            key = field_name
        result[key] = ErrorList(errors)
    return result
