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
            name="Case",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("case_number", models.CharField(editable=False, max_length=30, unique=True, verbose_name="Case Number")),
                ("fir_number", models.CharField(blank=True, default="", max_length=60, verbose_name="FIR Number")),
                ("title", models.CharField(max_length=150, verbose_name="Case Title")),
                ("case_type", models.CharField(max_length=80, verbose_name="Case Type")),
                ("description", models.TextField(blank=True, default="", max_length=2000, verbose_name="Description")),
                ("station_name", models.CharField(max_length=120, verbose_name="Originating Station")),
                ("status", models.CharField(choices=[("OPEN", "Open"), ("CLOSED", "Closed")], db_index=True, default="OPEN", max_length=10, verbose_name="Status")),
                ("closed_at", models.DateTimeField(blank=True, null=True, verbose_name="Closed At")),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="created_cases", to=settings.AUTH_USER_MODEL, verbose_name="Created By")),
            ],
            options={
                "verbose_name": "Case",
                "verbose_name_plural": "Cases",
                "ordering": ["-created_at", "-id"],
                "permissions": [("can_close_case", "Can close an open case")],
            },
        ),
    ]
