import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Customization",
            fields=[
                ("name", models.CharField(max_length=100, primary_key=True, serialize=False)),
                ("value", models.TextField()),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="EmailLog",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "category",
                    models.IntegerField(
                        choices=[
                            (0, "General"),
                            (1, "System"),
                            (2, "Access Expiration Reminders"),
                            (3, "Welcome"),
                            (4, "Timed Services"),
                        ],
                        default=0,
                    ),
                ),
                ("when", models.DateTimeField(auto_now_add=True)),
                ("sender", models.EmailField(max_length=254)),
                ("to", models.TextField()),
                ("subject", models.CharField(max_length=255)),
                ("content", models.TextField()),
                ("ok", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["-when"],
            },
        ),
        migrations.CreateModel(
            name="UserMeta",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "key",
                    models.CharField(
                        choices=[
                            ("access_flag", "Access flag"),
                            ("registered_date", "Registration date"),
                            ("expiration_date", "Access expiration date"),
                            ("expiration_notification_count", "Expiration reminder sent"),
                            ("welcome_notification_count", "Welcome email sent"),
                        ],
                        max_length=100,
                    ),
                ),
                ("value", models.CharField(blank=True, max_length=255)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="access_meta",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "User metadata",
                "verbose_name_plural": "User metadata",
                "ordering": ["user", "key"],
                "permissions": (("trigger_timed_services", "Can trigger timed services"),),
            },
        ),
        migrations.AddConstraint(
            model_name="usermeta",
            constraint=models.UniqueConstraint(fields=("user", "key"), name="access_expiration_unique_user_key"),
        ),
    ]
