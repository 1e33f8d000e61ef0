# PATH: apps/domains/subjects/services.py
from __future__ import annotations

import logging
from typing import Iterable, List

from django.db import transaction

from apps.core.errors import InvariantViolation, ValidationFailed
from apps.domains.subjects.models import Subject

logger = logging.getLogger(__name__)


def resolve_subjects(subject_ids: Iterable[int]) -> List[Subject]:
    """
    Load subjects by id, failing on the first id that does not exist.
    """
    ids = sorted({int(x) for x in (subject_ids or [])})
    subjects = list(Subject.objects.filter(id__in=ids))
    found = {s.id for s in subjects}
    missing = [i for i in ids if i not in found]
    if missing:
        raise InvariantViolation(
            "Unknown subject.",
            code="UNKNOWN_SUBJECT",
            context={"subject_ids": missing},
        )
    return subjects


@transaction.atomic
def create_subject(*, name: str, description: str = "", teacher_ids: Iterable[int] = ()) -> Subject:
    from apps.domains.teachers.models import Teacher

    name = (name or "").strip()
    if not name:
        raise ValidationFailed("name is required.", code="NAME_REQUIRED")
    if Subject.objects.filter(name__iexact=name).exists():
        raise ValidationFailed(
            "A subject with this name already exists.",
            code="SUBJECT_EXISTS",
            context={"name": name},
        )

    ids = sorted({int(x) for x in (teacher_ids or [])})
    teachers = list(Teacher.objects.filter(id__in=ids))
    missing = sorted(set(ids) - {t.id for t in teachers})
    if missing:
        raise InvariantViolation(
            "Unknown teacher.",
            code="UNKNOWN_TEACHER",
            context={"teacher_ids": missing},
        )

    subject = Subject.objects.create(name=name, description=description or "")
    if teachers:
        subject.teachers.add(*teachers)

    logger.info("[create_subject] subject_id=%s teachers=%s", subject.id, ids)
    return subject
