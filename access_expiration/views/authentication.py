from logging import getLogger
from typing import Optional

from django.conf import settings
from django.contrib.auth import REDIRECT_FIELD_NAME, authenticate, login, logout
from django.contrib.auth.backends import ModelBackend, RemoteUserBackend
from django.core.exceptions import PermissionDenied
from django.http import HttpResponseRedirect
from django.shortcuts import render, resolve_url
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.debug import sensitive_post_parameters
from django.views.decorators.http import require_GET, require_http_methods

from access_expiration.exceptions import UserAccessError
from access_expiration.gate import check_user_access
from access_expiration.policy import ExpirationSettings

auth_logger = getLogger(__name__)


class AccessExpirationBackendMixin:
    """
    Runs the access expiration check after the backend's own credential check succeeded.
    A denied user makes the authentication fail: the error is kept on the request for the login page
    and PermissionDenied stops Django from trying the remaining backends.
    """

    def check_access_expiration(self, request, user):
        if user is None:
            return None
        result = check_user_access(user, ExpirationSettings.load())
        if isinstance(result, UserAccessError):
            auth_logger.warning(
                f"User {user} attempted to authenticate with {type(self).__name__}, but was denied access: {result.msg}"
            )
            if request is not None:
                request.access_expiration_error = result
            raise PermissionDenied(result.user_message)
        auth_logger.debug(f"User {user} passed the access expiration check")
        return result


class AccessExpirationModelBackend(AccessExpirationBackendMixin, ModelBackend):
    """Username and password authentication against the user model, followed by the access expiration check"""

    def authenticate(self, request, username=None, password=None, **kwargs):
        user = super().authenticate(request, username=username, password=password, **kwargs)
        return self.check_access_expiration(request, user)


class RemoteUserAuthenticationBackend(AccessExpirationBackendMixin, RemoteUserBackend):
    """The web server performs authentication and passes the user name remotely (header or env)"""

    # Users have to register first, the web server is not a registration channel
    create_unknown_user = False

    def authenticate(self, request, remote_user):
        user = super().authenticate(request, remote_user)
        return self.check_access_expiration(request, user)

    def clean_username(self, username):
        """
        User names arrive in the form user@DOMAIN.NAME.
        This function chops off Kerberos realm information (i.e. the '@' and everything after).
        """
        return username.partition("@")[0]


def get_access_expiration_error(request) -> Optional[UserAccessError]:
    return getattr(request, "access_expiration_error", None)


def get_next_page(request) -> str:
    next_page = request.GET.get(REDIRECT_FIELD_NAME, "")
    if next_page and url_has_allowed_host_and_scheme(
        next_page, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return next_page
    return resolve_url(settings.LOGIN_REDIRECT_URL)


@require_http_methods(["GET", "POST"])
@sensitive_post_parameters("password")
def login_user(request):
    dictionary = {
        "user_name_or_password_incorrect": False,
        "access_denied_message": "",
        REDIRECT_FIELD_NAME: request.GET.get(REDIRECT_FIELD_NAME, ""),
    }

    # if we are dealing with anything else than POST, send to login page
    if request.method != "POST":
        return render(request, "access_expiration/login.html", dictionary)

    username = request.POST.get("username", "")
    password = request.POST.get("password", "")
    user = authenticate(request, username=username, password=password)
    if user:
        login(request, user)
        return HttpResponseRedirect(get_next_page(request))
    access_error = get_access_expiration_error(request)
    if access_error:
        dictionary["access_denied_message"] = access_error.user_message
    else:
        dictionary["user_name_or_password_incorrect"] = True
    dictionary["username"] = username
    return render(request, "access_expiration/login.html", dictionary, status=403 if access_error else 200)


@require_GET
def logout_user(request):
    logout(request)
    return HttpResponseRedirect(resolve_url(settings.LOGIN_URL))
