# PATH: apps/domains/exams/migrations/0001_initial.py
from django.db import migrations, models
import django.db.models.deletion

import apps.domains.exams.models.exam


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("subjects", "0001_initial"),
        ("students", "0001_initial"),
        ("teachers", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Exam",
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
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("instructions", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=False)),
                (
                    "secret_key",
                    models.CharField(
                        default=apps.domains.exams.models.exam.generate_secret_key,
                        editable=False,
                        max_length=64,
                    ),
                ),
                (
                    "teacher",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="exams",
                        to="teachers.teacher",
                    ),
                ),
                (
                    "subject",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="exams",
                        to="subjects.subject",
                    ),
                ),
                (
                    "allowed_students",
                    models.ManyToManyField(
                        blank=True,
                        related_name="allowed_exams",
                        to="students.student",
                    ),
                ),
            ],
            options={
                "db_table": "exams_exam",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="ExamSettings",
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
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("time_limit", models.PositiveIntegerField(default=60)),
                ("shuffle_questions", models.BooleanField(default=False)),
                ("shuffle_options", models.BooleanField(default=False)),
                ("show_result_at_end", models.BooleanField(default=False)),
                ("allow_internal_grading", models.BooleanField(default=False)),
                ("show_correct_answers", models.BooleanField(default=False)),
                ("show_navigation", models.BooleanField(default=True)),
                ("show_progress", models.BooleanField(default=True)),
                ("show_remaining_time", models.BooleanField(default=True)),
                ("show_submit_button", models.BooleanField(default=True)),
                ("lockdown_browser", models.BooleanField(default=False)),
                ("prevent_copy_paste", models.BooleanField(default=False)),
                ("prevent_print", models.BooleanField(default=False)),
                ("prevent_screen_capture", models.BooleanField(default=False)),
                ("screen_record_session", models.BooleanField(default=False)),
                ("submit_on_page_leave", models.BooleanField(default=False)),
                ("end_note", models.TextField(blank=True)),
                (
                    "exam",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="settings",
                        to="exams.exam",
                    ),
                ),
            ],
            options={
                "db_table": "exams_exam_settings",
            },
        ),
        migrations.CreateModel(
            name="ExamAccessCode",
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
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("code", models.CharField(max_length=64)),
                ("usage_count", models.PositiveIntegerField(default=0)),
                ("max_usage_count", models.PositiveIntegerField(default=5)),
                ("allow_reuse", models.BooleanField(default=False)),
                ("valid_until", models.DateTimeField(blank=True, null=True)),
                (
                    "exam",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="access_code",
                        to="exams.exam",
                    ),
                ),
                (
                    "used_by",
                    models.ManyToManyField(
                        blank=True,
                        related_name="redeemed_access_codes",
                        to="students.student",
                    ),
                ),
            ],
            options={
                "db_table": "exams_exam_access_code",
            },
        ),
        migrations.CreateModel(
            name="Question",
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
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("boolean", "True / False"),
                            ("short-answer", "Short answer"),
                            ("long-answer", "Long answer"),
                            ("mcq", "Multiple correct"),
                            ("obj", "Single correct"),
                        ],
                        max_length=20,
                    ),
                ),
                ("text", models.TextField()),
                ("score", models.PositiveIntegerField(default=1)),
                ("hint", models.TextField(blank=True)),
                ("explanation", models.TextField(blank=True)),
                ("media_url", models.URLField(blank=True)),
                ("media_type", models.CharField(blank=True, max_length=50)),
                ("boolean_answer", models.BooleanField(blank=True, null=True)),
                (
                    "exam",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="questions",
                        to="exams.exam",
                    ),
                ),
            ],
            options={
                "db_table": "exams_question",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Option",
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
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("text", models.TextField()),
                ("is_correct", models.BooleanField(default=False)),
                ("media_url", models.URLField(blank=True)),
                ("media_type", models.CharField(blank=True, max_length=50)),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="options",
                        to="exams.question",
                    ),
                ),
            ],
            options={
                "db_table": "exams_option",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Answer",
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
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("text", models.TextField()),
                (
                    "question",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="answer",
                        to="exams.question",
                    ),
                ),
            ],
            options={
                "db_table": "exams_answer",
            },
        ),
    ]
