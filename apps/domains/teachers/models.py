from django.conf import settings
from django.db import models

from apps.api.common.models import BaseModel


class Teacher(BaseModel):
    """
    Teacher profile attached to an auth user.

    subjects is the single source of the teacher <-> subject link,
    so Subject.teachers and Teacher.subjects can never disagree.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="teacher_profile",
    )

    subjects = models.ManyToManyField(
        "subjects.Subject",
        related_name="teachers",
        blank=True,
    )

    # students this teacher follows (each shares at least one subject)
    students = models.ManyToManyField(
        "students.Student",
        related_name="teachers",
        blank=True,
    )

    can_create_exam = models.BooleanField(default=True)
    can_grade_exam = models.BooleanField(default=True)

    class Meta:
        db_table = "teachers_teacher"
        ordering = ["-created_at"]

    def __str__(self):
        return self.user.get_full_name() or self.user.username

    def teaches(self, subject_id) -> bool:
        return self.subjects.filter(id=subject_id).exists()
