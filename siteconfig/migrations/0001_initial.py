from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="GlobalConfig",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "upi_id",
                    models.CharField(
                        help_text="Admin UPI id shown for payments", max_length=100
                    ),
                ),
                ("qr_url", models.TextField(blank=True, help_text="QR image reference")),
                ("chat_disabled", models.BooleanField(default=False)),
                ("auto_payment_enabled", models.BooleanField(default=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "global configuration",
                "verbose_name_plural": "global configuration",
            },
        ),
    ]
