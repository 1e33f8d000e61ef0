# PATH: apps/domains/students/services.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from django.db import transaction
from django.utils import timezone

from apps.core.accounts import create_account_user
from apps.core.errors import InvariantViolation, ValidationFailed
from apps.domains.students.models import Student, default_end_date
from apps.domains.subjects.services import resolve_subjects

logger = logging.getLogger(__name__)


@transaction.atomic
def create_student(
    *,
    username: str,
    password: str,
    subject_ids: Iterable[int],
    email: str = "",
    first_name: str = "",
    last_name: str = "",
    end_date: Optional[datetime] = None,
    contact: str = "",
    dob: Optional[date] = None,
    created_by=None,
) -> Student:
    """
    Create a student account.

    - end_date defaults to one year from now and must lie in the future
    - subjects must exist
    - created_by (Teacher): subjects must be taught by that teacher,
      and the student is added to the teacher's students
    """
    end_date = end_date or default_end_date()
    if end_date <= timezone.now():
        raise ValidationFailed(
            "end_date must be in the future.",
            code="END_DATE_IN_PAST",
        )

    subjects = resolve_subjects(subject_ids)
    if not subjects:
        raise ValidationFailed(
            "At least one subject is required.",
            code="SUBJECTS_REQUIRED",
        )

    if created_by is not None:
        taught = set(created_by.subjects.values_list("id", flat=True))
        foreign = sorted(s.id for s in subjects if s.id not in taught)
        if foreign:
            raise InvariantViolation(
                "Subject is not taught by this teacher.",
                code="SUBJECT_NOT_TAUGHT",
                context={"subject_ids": foreign},
            )

    user = create_account_user(
        username=username,
        password=password,
        email=email,
        first_name=first_name,
        last_name=last_name,
    )
    student = Student.objects.create(
        user=user,
        end_date=end_date,
        contact=contact or "",
        dob=dob,
    )
    student.subjects.add(*subjects)

    if created_by is not None:
        created_by.students.add(student)

    logger.info(
        "[create_student] student_id=%s subjects=%s created_by=%s",
        student.id,
        [s.id for s in subjects],
        getattr(created_by, "id", None),
    )
    return student


@transaction.atomic
def update_student_profile(*, student: Student, **fields) -> Student:
    """
    Student-editable profile fields only.
    """
    user_fields = []
    for key in ("first_name", "last_name", "email"):
        if key in fields:
            setattr(student.user, key, fields[key] or "")
            user_fields.append(key)
    if user_fields:
        student.user.save(update_fields=user_fields)

    profile_fields = []
    for key in ("contact", "dob"):
        if key in fields:
            setattr(student, key, fields[key])
            profile_fields.append(key)
    if profile_fields:
        student.save(update_fields=profile_fields + ["updated_at"])

    return student
