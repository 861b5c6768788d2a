from django.contrib.auth import REDIRECT_FIELD_NAME
from django.contrib.auth.decorators import user_passes_test


# Use this decorator annotation to register your own customizations which will be shown in the customization page
# The key should be unique and if possible one word, the title will be shown on the customization tab
def customization(key, title, order=999):
    from access_expiration.views.customization import CustomizationBase

    def customization_wrapper(customization_class):
        if not issubclass(customization_class, CustomizationBase):
            raise ValueError("Wrapped class must subclass CustomizationBase.")
        customization_instance = customization_class(key, title, order)
        CustomizationBase.add_instance(customization_instance)
        return customization_class

    return customization_wrapper


# Utility function that returns a permission decorator based on the django user_passes_test decorator
def permission_decorator(test_func):
    def decorator(view_func=None, redirect_field_name=REDIRECT_FIELD_NAME, login_url=None):
        actual_decorator = user_passes_test(
            test_func,
            login_url=login_url,
            redirect_field_name=redirect_field_name,
        )
        if view_func:
            return actual_decorator(view_func)
        return actual_decorator

    return decorator


def is_administrator(user) -> bool:
    return bool(user and user.is_authenticated and user.is_active and user.is_superuser)


administrator_required = permission_decorator(is_administrator)
