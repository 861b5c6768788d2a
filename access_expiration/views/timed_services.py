from logging import getLogger

from django.contrib.auth.decorators import login_required, permission_required
from django.http import HttpResponse
from django.views.decorators.http import require_GET

from access_expiration.notifications import BatchRunReport, run_notifications

timed_service_logger = getLogger(__name__)


@login_required
@require_GET
@permission_required("access_expiration.trigger_timed_services", raise_exception=True)
def send_access_expiration_notifications(request):
    run_report = do_send_access_expiration_notifications()
    status = 503 if run_report.fatal else 200
    return HttpResponse(run_report.summary(), content_type="text/plain", status=status)


def do_send_access_expiration_notifications() -> BatchRunReport:
    """Sends the expiration reminders and welcome emails due at this time"""
    return run_notifications()
