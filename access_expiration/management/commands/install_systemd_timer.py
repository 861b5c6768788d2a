import os
import sys
from textwrap import dedent

from django.conf import settings
from django.core.management import BaseCommand

from access_expiration.utilities import default_scan_days

default_unit_name = "access-expiration-notifications"


class Command(BaseCommand):
    help = "Installs a systemd timer sending the access expiration notifications on the days set in ACCESS_EXPIRATION_SCAN_DAYS"

    def add_arguments(self, parser):
        parser.add_argument("--name", default=default_unit_name, help="Name of the systemd service and timer units")
        parser.add_argument("--directory", default="/etc/systemd/system", help="Where to write the unit files")
        parser.add_argument("--user", default="www-data", help="User running the notifications")
        parser.add_argument("--group", default="www-data", help="Group running the notifications")
        parser.add_argument(
            "--source-directory", default=os.getcwd(), help="Directory of the site's manage.py file"
        )
        parser.add_argument("--time", default="08:00", help="Time of the day the notifications are sent")

    def handle(self, *args, **options):
        customizations = {
            "user": options["user"],
            "group": options["group"],
            "python": sys.executable,
            "source_directory": options["source_directory"],
            "days": ",".join(getattr(settings, "ACCESS_EXPIRATION_SCAN_DAYS", None) or default_scan_days),
            "time": options["time"],
        }

        service = """
        [Unit]
        Description=Sends the access expiration reminders and welcome emails
        After=network.target

        [Service]
        Type=oneshot
        User={user}
        Group={group}
        WorkingDirectory={source_directory}
        ExecStart={python} {source_directory}/manage.py send_access_expiration_notifications
        """.format(**customizations)

        timer = """
        [Unit]
        Description=Runs the access expiration notifications on {days}

        [Timer]
        OnCalendar={days} *-*-* {time}:00
        Persistent=true

        [Install]
        WantedBy=timers.target
        """.format(**customizations)

        name = options["name"]
        try:
            with open(os.path.join(options["directory"], f"{name}.service"), "w") as f:
                f.write(dedent(service).lstrip())
            with open(os.path.join(options["directory"], f"{name}.timer"), "w") as f:
                f.write(dedent(timer).lstrip())
            self.stdout.write(
                self.style.SUCCESS(
                    f"The systemd {name} timer was successfully installed, enable it with: systemctl enable --now {name}.timer"
                )
            )
        except OSError as e:
            self.stderr.write(self.style.ERROR("Something went wrong: " + str(e)))
