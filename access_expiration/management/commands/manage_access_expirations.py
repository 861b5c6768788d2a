from django.core.management import BaseCommand

from access_expiration.policy import ExpirationSettings
from access_expiration.store import (
    backfill_users,
    find_integrity_issues,
    refresh_expiration_dates,
    repair_integrity_issues,
)


class Command(BaseCommand):
    help = (
        "Maintenance of the users' access expiration data. Without options, adds the missing data for all users "
        "and reports the users whose stored registration date doesn't match the actual one."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--refresh", action="store_true", help="Recompute all expiration dates from the registration dates"
        )
        parser.add_argument(
            "--repair", action="store_true", help="Overwrite stored registration dates that don't match"
        )

    def handle(self, *args, **options):
        expiration_settings = ExpirationSettings.load()
        backfilled = backfill_users(expiration_settings)
        self.stdout.write(f"Access expiration data added for {backfilled} user(s)")
        if options["refresh"]:
            refreshed = refresh_expiration_dates(expiration_settings)
            self.stdout.write(f"{refreshed} expiration date(s) updated")
        issues = find_integrity_issues()
        for issue in issues:
            self.stdout.write(self.style.WARNING(str(issue)))
        if issues and options["repair"]:
            repaired = repair_integrity_issues(issues)
            self.stdout.write(self.style.SUCCESS(f"{repaired} registration date(s) repaired"))
        elif issues:
            self.stdout.write(f"{len(issues)} issue(s) found, run with --repair to fix them")
        else:
            self.stdout.write(self.style.SUCCESS("No data integrity issues found"))
