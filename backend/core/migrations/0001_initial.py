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
            name="NotificationLedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_type", models.CharField(choices=[("EVIDENCE_LOGGED", "Evidence Logged"), ("CUSTODY_TRANSFERRED", "Custody Transferred"), ("USER_APPROVED", "Account Approved"), ("USER_BLOCKED", "Account Blocked"), ("STATION_ASSIGNED", "Station Assigned")], db_index=True, max_length=40, verbose_name="Event Type")),
                ("recipient_email", models.CharField(blank=True, default="", max_length=254, verbose_name="Recipient")),
                ("subject", models.CharField(blank=True, default="", max_length=255, verbose_name="Subject")),
                ("reference_id", models.CharField(blank=True, db_index=True, default="", max_length=64, verbose_name="Reference ID")),
                ("delivery_status", models.CharField(choices=[("SENT", "Sent"), ("FAILED", "Failed")], max_length=10, verbose_name="Delivery Status")),
                ("error_message", models.TextField(blank=True, null=True, verbose_name="Error Detail")),
                ("attempted_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Attempted At")),
            ],
            options={
                "verbose_name": "Notification Ledger Entry",
                "verbose_name_plural": "Notification Ledger",
                "ordering": ["-attempted_at", "-id"],
                "permissions": [("can_view_ledgers", "Can view administrative ledgers")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("delivery_status", "SENT"), ("error_message__isnull", True)),
                            models.Q(("delivery_status", "FAILED"), ("error_message__isnull", False)),
                            _connector="OR",
                        ),
                        name="notification_error_only_when_failed",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditLogEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("actor_name", models.CharField(blank=True, default="", max_length=255, verbose_name="Actor Display Name")),
                ("action_type", models.CharField(choices=[("USER_APPROVED", "User Approved"), ("USER_BLOCKED", "User Blocked"), ("ROLE_CHANGED", "Role Changed"), ("STATION_ASSIGNED", "Station Assigned"), ("CASE_CLOSED", "Case Closed")], db_index=True, max_length=40, verbose_name="Action")),
                ("target_type", models.CharField(max_length=40, verbose_name="Target Type")),
                ("target_id", models.CharField(blank=True, default="", max_length=64, verbose_name="Target ID")),
                ("details", models.JSONField(blank=True, default=dict, verbose_name="Details")),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True, verbose_name="Source Address")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Created At")),
                ("actor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="audit_entries", to=settings.AUTH_USER_MODEL, verbose_name="Actor")),
            ],
            options={
                "verbose_name": "Audit Log Entry",
                "verbose_name_plural": "Audit Log",
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="YearlySequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=40, verbose_name="Sequence Name")),
                ("year", models.PositiveSmallIntegerField(verbose_name="Year")),
                ("last_value", models.PositiveIntegerField(default=0, verbose_name="Last Issued Value")),
            ],
            options={
                "verbose_name": "Yearly Sequence",
                "verbose_name_plural": "Yearly Sequences",
                "constraints": [
                    models.UniqueConstraint(fields=("name", "year"), name="unique_sequence_per_year"),
                ],
            },
        ),
    ]
