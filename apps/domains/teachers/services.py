# PATH: apps/domains/teachers/services.py
from __future__ import annotations

import logging
from typing import Iterable, List

from django.db import transaction
from django.db.models import QuerySet

from apps.core.accounts import create_account_user
from apps.core.errors import InvariantViolation, NotFoundError
from apps.domains.students.models import Student
from apps.domains.subjects.services import resolve_subjects
from apps.domains.teachers.models import Teacher

logger = logging.getLogger(__name__)


@transaction.atomic
def create_teacher(
    *,
    username: str,
    password: str,
    email: str = "",
    first_name: str = "",
    last_name: str = "",
    subject_ids: Iterable[int] = (),
    can_create_exam: bool = True,
    can_grade_exam: bool = True,
) -> Teacher:
    subjects = resolve_subjects(subject_ids)

    user = create_account_user(
        username=username,
        password=password,
        email=email,
        first_name=first_name,
        last_name=last_name,
    )
    teacher = Teacher.objects.create(
        user=user,
        can_create_exam=can_create_exam,
        can_grade_exam=can_grade_exam,
    )
    if subjects:
        teacher.subjects.add(*subjects)

    logger.info(
        "[create_teacher] teacher_id=%s subjects=%s",
        teacher.id,
        [s.id for s in subjects],
    )
    return teacher


@transaction.atomic
def assign_subjects_to_teacher(*, teacher: Teacher, subject_ids: Iterable[int]) -> Teacher:
    """
    Add subjects to a teacher. Already assigned subjects are left as they are.
    """
    subjects = resolve_subjects(subject_ids)
    teacher.subjects.add(*subjects)
    logger.info(
        "[assign_subjects_to_teacher] teacher_id=%s subjects=%s",
        teacher.id,
        [s.id for s in subjects],
    )
    return teacher


@transaction.atomic
def add_students_to_teacher(*, teacher: Teacher, student_ids: Iterable[int]) -> List[Student]:
    """
    Follow students. Every student must take at least one subject this teacher teaches.
    """
    ids = sorted({int(x) for x in (student_ids or [])})
    students = list(Student.objects.filter(id__in=ids))
    missing = sorted(set(ids) - {s.id for s in students})
    if missing:
        raise NotFoundError(
            "Student not found.",
            code="STUDENT_NOT_FOUND",
            context={"student_ids": missing},
        )

    taught = set(teacher.subjects.values_list("id", flat=True))
    for student in students:
        offered = set(student.subjects.values_list("id", flat=True))
        if not (taught & offered):
            raise InvariantViolation(
                "Student does not take any subject this teacher teaches.",
                code="NO_SHARED_SUBJECT",
                context={"student_id": student.id},
            )

    teacher.students.add(*students)
    logger.info("[add_students_to_teacher] teacher_id=%s students=%s", teacher.id, ids)
    return students


def students_offering_my_subjects(teacher: Teacher) -> QuerySet:
    return (
        Student.objects.filter(subjects__in=teacher.subjects.all())
        .select_related("user")
        .distinct()
        .order_by("id")
    )
