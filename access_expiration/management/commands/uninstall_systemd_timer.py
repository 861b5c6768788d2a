import os

from django.core.management import BaseCommand

from access_expiration.management.commands.install_systemd_timer import default_unit_name


class Command(BaseCommand):
    help = "Uninstalls the access expiration notifications systemd timer"

    def add_arguments(self, parser):
        parser.add_argument("--name", default=default_unit_name, help="Name of the systemd service and timer units")
        parser.add_argument("--directory", default="/etc/systemd/system", help="Where the unit files were written")

    def handle(self, *args, **options):
        name = options["name"]
        try:
            for extension in ["timer", "service"]:
                os.remove(os.path.join(options["directory"], f"{name}.{extension}"))
            self.stdout.write(
                self.style.SUCCESS(
                    f"The systemd {name} timer was successfully uninstalled, reload systemd with: systemctl daemon-reload"
                )
            )
        except OSError as e:
            self.stderr.write(self.style.ERROR("Something went wrong: " + str(e)))
