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
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("EXAM_CREATED", "Exam Created"),
                            ("EXAM_UPDATED", "Exam Updated"),
                            ("EXAM_DELETED", "Exam Deleted"),
                            ("RESULT_GRADED", "Result Graded"),
                            ("CERTIFICATE_ISSUED", "Certificate Issued"),
                            ("CERTIFICATE_REVOKED", "Certificate Revoked"),
                        ],
                        max_length=30,
                    ),
                ),
                ("target_model", models.CharField(help_text="e.g., Exam, ExamResult, Certificate", max_length=50)),
                ("target_object_id", models.CharField(blank=True, max_length=100, null=True)),
                ("details", models.TextField(blank=True, help_text="Description of the event")),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                (
                    "actor",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "indexes": [models.Index(fields=["action", "timestamp"], name="auditlog_action_ts_idx")],
            },
        ),
    ]
