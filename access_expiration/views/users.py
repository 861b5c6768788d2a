from logging import getLogger

from django.contrib import messages
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from access_expiration.decorators import administrator_required
from access_expiration.forms import UserAccessForm, nice_errors
from access_expiration.models import AccessFlag
from access_expiration.policy import ExpirationSettings, compute_expiry, is_expired
from access_expiration.store import get_record, get_registered_at, set_access_flag

users_logger = getLogger(__name__)


@administrator_required
@require_http_methods(["GET", "POST"])
def user_access(request, user_id):
    """Shows a user's access expiration data and lets administrators allow or deny the user's access"""
    user = get_object_or_404(get_user_model(), id=user_id)
    record = get_record(user)
    form = UserAccessForm(request.POST or None, initial={"access_flag": record.access_flag or AccessFlag.ALLOWED})
    if request.method == "POST":
        if form.is_valid():
            set_access_flag(user, form.cleaned_data["access_flag"], request.user)
            messages.success(request, f"Access of {user} saved successfully")
            return redirect("user_access", user_id=user.id)
        messages.error(request, f"Please correct the errors below: {nice_errors(form).as_text()}")
    expiration_settings = ExpirationSettings.load()
    expire_at = compute_expiry(get_registered_at(user), expiration_settings.duration_days)
    dictionary = {
        "access_user": user,
        "record": record,
        "form": form,
        "registered_at": get_registered_at(user),
        "expire_at": expire_at,
        # an allowed user still gets denied at the next login when this is true
        "time_expired": not user.is_superuser and is_expired(expire_at, timezone.now()),
    }
    return render(request, "access_expiration/user_access.html", dictionary)
