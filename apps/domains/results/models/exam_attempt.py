# apps/domains/results/models/exam_attempt.py
from django.db import models
from django.db.models import Q

from apps.api.common.models import BaseModel


class ExamAttempt(BaseModel):
    """
    One student's run through one exam.

    not-started -> in-progress -> completed (terminal)

    - at most one open (not-started / in-progress) attempt per (student, exam),
      enforced by the database
    - exam is SET_NULL on delete so the attempt survives as history;
      exam_title keeps the name for that case
    - result_is_ready is only ever set by the teacher
    """

    class Status(models.TextChoices):
        NOT_STARTED = "not-started", "Not started"
        IN_PROGRESS = "in-progress", "In progress"
        COMPLETED = "completed", "Completed"

    OPEN_STATUSES = (Status.NOT_STARTED, Status.IN_PROGRESS)

    student = models.ForeignKey(
        "students.Student",
        on_delete=models.CASCADE,
        related_name="attempts",
    )
    exam = models.ForeignKey(
        "exams.Exam",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="attempts",
    )
    exam_title = models.CharField(max_length=255, blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.NOT_STARTED,
    )

    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)

    score = models.FloatField(default=0)
    teacher_feedback = models.TextField(blank=True)

    result_is_ready = models.BooleanField(default=False)
    graded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "results_exam_attempt"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["student", "exam"],
                condition=Q(status__in=["not-started", "in-progress"]),
                name="uniq_open_attempt_per_student_exam",
            ),
        ]
        indexes = [
            models.Index(fields=["exam", "status"], name="results_att_exam_status_idx"),
            models.Index(fields=["student", "status"], name="results_att_student_status_idx"),
        ]

    def __str__(self):
        return f"ExamAttempt exam={self.exam_id} student={self.student_id} {self.status}"

    @property
    def is_open(self) -> bool:
        return self.status in self.OPEN_STATUSES
