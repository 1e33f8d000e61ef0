from django.db import models

from apps.api.common.models import BaseModel


class AttemptAnswer(BaseModel):
    """
    The student's answer to one question within an attempt.

    answer encoding by question type:
      boolean     -> "true" / "false"
      obj         -> option id
      mcq         -> comma-separated option ids
      short/long  -> free text
    """

    attempt = models.ForeignKey(
        "results.ExamAttempt",
        on_delete=models.CASCADE,
        related_name="answers",
    )
    question = models.ForeignKey(
        "exams.Question",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="attempt_answers",
    )

    answer = models.TextField(blank=True)
    is_correct = models.BooleanField(default=False)

    # manual credit from the teacher survives regrading
    marked_by_teacher = models.BooleanField(default=False)

    class Meta:
        db_table = "results_attempt_answer"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["attempt", "question"],
                name="uniq_attempt_answer_per_question",
            ),
        ]

    def __str__(self):
        return f"AttemptAnswer attempt={self.attempt_id} question={self.question_id}"
