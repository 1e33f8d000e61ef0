from django.db import models
from django.utils import timezone

from apps.api.common.models import BaseModel


class ExamAccessCode(BaseModel):
    """
    Usage-limited code a student must present to start the exam.

    usage_count only moves through a conditional UPDATE
    (see eligibility.redeem_access_code).
    """

    exam = models.OneToOneField(
        "exams.Exam",
        on_delete=models.CASCADE,
        related_name="access_code",
    )

    code = models.CharField(max_length=64)
    usage_count = models.PositiveIntegerField(default=0)
    max_usage_count = models.PositiveIntegerField(default=5)
    allow_reuse = models.BooleanField(default=False)
    valid_until = models.DateTimeField(null=True, blank=True)

    # students who redeemed the code
    used_by = models.ManyToManyField(
        "students.Student",
        related_name="redeemed_access_codes",
        blank=True,
    )

    class Meta:
        db_table = "exams_exam_access_code"

    def __str__(self):
        return f"ExamAccessCode exam={self.exam_id} {self.usage_count}/{self.max_usage_count}"

    def is_expired(self, now=None) -> bool:
        if self.valid_until is None:
            return False
        return self.valid_until <= (now or timezone.now())

    @property
    def is_exhausted(self) -> bool:
        return self.usage_count >= self.max_usage_count
