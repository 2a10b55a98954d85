import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("cases", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Evidence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("evidence_code", models.CharField(editable=False, max_length=30, unique=True, verbose_name="Evidence Code")),
                ("description", models.TextField(max_length=2000, verbose_name="Description")),
                ("category", models.CharField(max_length=80, verbose_name="Category")),
                ("station", models.CharField(max_length=120, verbose_name="Originating Station")),
                ("attachment", models.FileField(max_length=255, upload_to="evidence/%Y/%m/", verbose_name="Seizure Photo")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Logged At")),
                ("case", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="evidence_items", to="cases.case", verbose_name="Case")),
                ("logged_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="logged_evidence", to=settings.AUTH_USER_MODEL, verbose_name="Logged By")),
            ],
            options={
                "verbose_name": "Evidence",
                "verbose_name_plural": "Evidence",
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="EvidenceCustody",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("current_location", models.CharField(max_length=120, verbose_name="Current Location")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("current_holder", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="held_evidence", to=settings.AUTH_USER_MODEL, verbose_name="Current Holder")),
                ("evidence", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="custody", to="evidence.evidence", verbose_name="Evidence")),
            ],
            options={
                "verbose_name": "Evidence Custody",
                "verbose_name_plural": "Evidence Custody",
            },
        ),
        migrations.CreateModel(
            name="EvidenceTransfer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("transfer_type", models.CharField(choices=[("TRANSFER", "Transfer"), ("RETURN", "Return"), ("EXTERNAL", "External (lab / court)")], default="TRANSFER", max_length=10, verbose_name="Transfer Type")),
                ("from_location", models.CharField(max_length=120, verbose_name="Previous Location")),
                ("to_location", models.CharField(max_length=120, verbose_name="New Location")),
                ("reason", models.TextField(max_length=500, verbose_name="Reason")),
                ("transfer_date", models.DateTimeField(default=django.utils.timezone.now, verbose_name="Transfer Date")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Recorded At")),
                ("case", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="evidence_transfers", to="cases.case", verbose_name="Case")),
                ("evidence", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transfers", to="evidence.evidence", verbose_name="Evidence")),
                ("from_holder", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="released_transfers", to=settings.AUTH_USER_MODEL, verbose_name="Previous Holder")),
                ("initiated_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="initiated_transfers", to=settings.AUTH_USER_MODEL, verbose_name="Initiated By")),
                ("to_holder", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="received_transfers", to=settings.AUTH_USER_MODEL, verbose_name="New Holder")),
            ],
            options={
                "verbose_name": "Evidence Transfer",
                "verbose_name_plural": "Evidence Transfers",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["evidence", "created_at"], name="transfer_evidence_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("reason", ""), _negated=True),
                        name="transfer_reason_not_empty",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("from_holder", models.F("to_holder")),
                            ("from_location", models.F("to_location")),
                            _negated=True,
                        ),
                        name="transfer_changes_custody",
                    ),
                ],
            },
        ),
    ]
