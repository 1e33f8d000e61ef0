from django.db import models

from apps.api.common.models import BaseModel


class AttemptLog(BaseModel):
    """
    Append-only audit trail of an attempt.
    """

    class Action(models.TextChoices):
        TEST_STARTED = "test_started"
        QUESTION_ATTEMPTED = "question_attempted"
        TEST_SUBMITTED = "test_submitted"
        TEST_GRADED = "test_graded"
        MARK_QUESTION = "mark_question"
        MANUAL_GRADE = "manual_grade"
        RESULT_READY = "result_ready"
        AUTO_SUBMITTED = "auto_submitted"

    class Severity(models.TextChoices):
        INFO = "info"
        WARNING = "warning"
        ERROR = "error"
        CRITICAL = "critical"

    attempt = models.ForeignKey(
        "results.ExamAttempt",
        on_delete=models.CASCADE,
        related_name="logs",
    )
    action = models.CharField(max_length=40, choices=Action.choices)
    message = models.TextField(blank=True)
    severity = models.CharField(
        max_length=10,
        choices=Severity.choices,
        default=Severity.INFO,
    )
    # "student:<id>", "teacher:<id>" or "system"
    actor = models.CharField(max_length=64, blank=True)

    class Meta:
        db_table = "results_attempt_log"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"AttemptLog attempt={self.attempt_id} {self.action}"
