from django.conf import settings
from django.core.checks import Warning, register
from django.utils.module_loading import import_string

W001 = "access_expiration.W001"


@register()
def check_authentication_backends(app_configs, **kwargs):
    from access_expiration.views.authentication import AccessExpirationBackendMixin

    warnings = []
    backends = []
    for backend_path in getattr(settings, "AUTHENTICATION_BACKENDS", []):
        try:
            backends.append(import_string(backend_path))
        except ImportError:
            # Django reports backends that cannot be imported on its own
            continue
    if not any(issubclass(backend, AccessExpirationBackendMixin) for backend in backends):
        warnings.append(
            Warning(
                "None of the authentication backends checks access expiration, expired users can still log in.",
                hint="Add 'access_expiration.views.authentication.AccessExpirationModelBackend' (or a backend using AccessExpirationBackendMixin) to settings.AUTHENTICATION_BACKENDS.",
                id=W001,
            )
        )
    return warnings
