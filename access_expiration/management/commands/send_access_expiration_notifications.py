from django.core.management import BaseCommand, CommandError

from access_expiration.views.timed_services import do_send_access_expiration_notifications


class Command(BaseCommand):
    help = (
        "Run on the days set in ACCESS_EXPIRATION_SCAN_DAYS (by default Monday and Thursday) to send the access "
        "expiration reminders and the welcome emails to the users who are due for them."
    )

    def handle(self, *args, **options):
        run_report = do_send_access_expiration_notifications()
        self.stdout.write(run_report.summary())
        if run_report.fatal:
            raise CommandError(run_report.fatal.msg)
