from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.api.common.models import BaseModel


def default_end_date():
    return timezone.now() + timedelta(days=365)


class Student(BaseModel):
    """
    Student profile attached to an auth user.
    end_date is the enrollment expiry; past it the student cannot start exams.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="student_profile",
    )

    subjects = models.ManyToManyField(
        "subjects.Subject",
        related_name="students",
        blank=True,
    )

    end_date = models.DateTimeField(default=default_end_date)

    contact = models.CharField(max_length=50, blank=True)
    dob = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "students_student"
        ordering = ["-created_at"]

    def __str__(self):
        return self.user.get_full_name() or self.user.username

    def is_enrolled_in(self, subject_id, *, now=None) -> bool:
        now = now or timezone.now()
        if self.end_date <= now:
            return False
        return self.subjects.filter(id=subject_id).exists()
