import secrets

from django.db import models

from apps.api.common.models import BaseModel


def generate_secret_key() -> str:
    return secrets.token_urlsafe(32)


class Exam(BaseModel):
    """
    Teacher-authored exam.

    - starts inactive; activation goes through the activation service
    - secret_key is generated once and never leaves the server
    """

    teacher = models.ForeignKey(
        "teachers.Teacher",
        on_delete=models.PROTECT,
        related_name="exams",
    )
    subject = models.ForeignKey(
        "subjects.Subject",
        on_delete=models.PROTECT,
        related_name="exams",
    )

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    instructions = models.TextField(blank=True)

    # empty = every enrolled student of the subject
    allowed_students = models.ManyToManyField(
        "students.Student",
        related_name="allowed_exams",
        blank=True,
    )

    is_active = models.BooleanField(default=False)

    secret_key = models.CharField(
        max_length=64,
        default=generate_secret_key,
        editable=False,
    )

    class Meta:
        db_table = "exams_exam"
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class ExamSettings(BaseModel):
    exam = models.OneToOneField(
        Exam,
        on_delete=models.CASCADE,
        related_name="settings",
    )

    # minutes
    time_limit = models.PositiveIntegerField(default=60)

    shuffle_questions = models.BooleanField(default=False)
    shuffle_options = models.BooleanField(default=False)

    show_result_at_end = models.BooleanField(default=False)
    allow_internal_grading = models.BooleanField(default=False)
    show_correct_answers = models.BooleanField(default=False)

    show_navigation = models.BooleanField(default=True)
    show_progress = models.BooleanField(default=True)
    show_remaining_time = models.BooleanField(default=True)
    show_submit_button = models.BooleanField(default=True)

    lockdown_browser = models.BooleanField(default=False)
    prevent_copy_paste = models.BooleanField(default=False)
    prevent_print = models.BooleanField(default=False)
    prevent_screen_capture = models.BooleanField(default=False)
    screen_record_session = models.BooleanField(default=False)
    submit_on_page_leave = models.BooleanField(default=False)

    end_note = models.TextField(blank=True)

    class Meta:
        db_table = "exams_exam_settings"

    def __str__(self):
        return f"ExamSettings exam={self.exam_id}"
