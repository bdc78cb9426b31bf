import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PaymentModel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("rrn", models.CharField(blank=True, max_length=64, null=True)),
                ("payment_id", models.CharField(blank=True, max_length=128, null=True)),
                ("order_id", models.BigIntegerField(blank=True, null=True)),
                ("user_id", models.BigIntegerField(default=0)),
                ("amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                (
                    "response_status",
                    models.CharField(
                        choices=[
                            ("created", "Created"),
                            ("processing", "Processing"),
                            ("hold", "Hold"),
                            ("success", "Success"),
                            ("failure", "Failure"),
                            ("reversed", "Reversed"),
                            ("expired", "Expired"),
                            ("error", "Error"),
                        ],
                        default="created",
                        max_length=32,
                    ),
                ),
                ("failure_reason", models.TextField(blank=True, null=True)),
                ("err_code", models.CharField(blank=True, max_length=64, null=True)),
                ("invoice_id", models.CharField(blank=True, db_index=True, max_length=128, null=True)),
                ("time", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "payments",
                "ordering": ["-time"],
            },
        ),
    ]
