import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("exams", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ExamResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("score", models.DecimalField(decimal_places=2, default=0, max_digits=7)),
                ("total_marks", models.PositiveIntegerField()),
                ("percentage", models.DecimalField(decimal_places=2, default=0, max_digits=6)),
                ("time_taken", models.PositiveIntegerField(default=0)),
                ("submitted_at", models.DateTimeField(auto_now_add=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("passed", "Passed"), ("failed", "Failed")],
                        default="pending",
                        max_length=10,
                    ),
                ),
                (
                    "exam",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="results",
                        to="exams.exam",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="exam_results",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "exam_results",
                "ordering": ["-submitted_at"],
                "indexes": [
                    models.Index(fields=["exam", "-percentage", "time_taken"], name="result_exam_rank_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("exam", "student"), name="unique_exam_student"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StudentAnswer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("student_answer", models.TextField(blank=True)),
                ("is_correct", models.BooleanField(default=False)),
                ("marks_obtained", models.DecimalField(decimal_places=2, default=0, max_digits=7)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "exam_result",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="answers",
                        to="assessments.examresult",
                    ),
                ),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="student_answers",
                        to="exams.question",
                    ),
                ),
            ],
            options={
                "db_table": "student_answers",
                "ordering": ["question__order", "question_id"],
                "constraints": [
                    models.UniqueConstraint(fields=("exam_result", "question"), name="unique_result_question"),
                ],
            },
        ),
    ]
