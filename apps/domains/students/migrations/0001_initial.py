# PATH: apps/domains/students/migrations/0001_initial.py
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

import apps.domains.students.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("subjects", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Student",
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
                    "end_date",
                    models.DateTimeField(default=apps.domains.students.models.default_end_date),
                ),
                ("contact", models.CharField(blank=True, max_length=50)),
                ("dob", models.DateField(blank=True, null=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="student_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "subjects",
                    models.ManyToManyField(
                        blank=True,
                        related_name="students",
                        to="subjects.subject",
                    ),
                ),
            ],
            options={
                "db_table": "students_student",
                "ordering": ["-created_at"],
            },
        ),
    ]
