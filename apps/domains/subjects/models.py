from django.db import models

from apps.api.common.models import BaseModel


class Subject(BaseModel):
    """
    Course subject. Teachers reach it through Teacher.subjects,
    students through Student.subjects.
    """

    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True)

    class Meta:
        db_table = "subjects_subject"
        ordering = ["name"]

    def __str__(self):
        return self.name
