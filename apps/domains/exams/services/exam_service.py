# PATH: apps/domains/exams/services/exam_service.py
from __future__ import annotations

import logging
import secrets
from typing import Any, Dict, Iterable, Optional

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.core.errors import ForbiddenError, InvariantViolation, NotFoundError, ValidationFailed
from apps.domains.exams.models import (
    Answer,
    Exam,
    ExamAccessCode,
    ExamSettings,
    Option,
    Question,
)
from apps.domains.exams.services.activation import validate_for_activation
from apps.domains.students.models import Student

logger = logging.getLogger(__name__)


SETTINGS_FIELDS = (
    "time_limit",
    "shuffle_questions",
    "shuffle_options",
    "show_result_at_end",
    "allow_internal_grading",
    "show_correct_answers",
    "show_navigation",
    "show_progress",
    "show_remaining_time",
    "show_submit_button",
    "lockdown_browser",
    "prevent_copy_paste",
    "prevent_print",
    "prevent_screen_capture",
    "screen_record_session",
    "submit_on_page_leave",
    "end_note",
)

EXAM_FIELDS = ("title", "description", "instructions")


# ---------------------------------------------------------------------
# lookups
# ---------------------------------------------------------------------

def get_exam_for_teacher(teacher, exam_id: int, *, for_update: bool = False) -> Exam:
    """
    Another teacher's exam is reported as missing.
    """
    qs = Exam.objects.all()
    if for_update:
        qs = qs.select_for_update()
    exam = qs.filter(id=exam_id, teacher=teacher).first()
    if exam is None:
        raise NotFoundError("Exam not found.", context={"exam_id": exam_id})
    return exam


def exams_for_teacher(teacher) -> QuerySet:
    return (
        Exam.objects.filter(teacher=teacher)
        .select_related("subject", "settings")
        .order_by("-created_at")
    )


def available_exams_for_student(student, *, now=None) -> QuerySet:
    """
    Active exams the student could start right now, ignoring access codes.
    Exams the student already completed are left out.
    """
    from apps.domains.results.models import ExamAttempt

    now = now or timezone.now()
    if student.end_date <= now:
        return Exam.objects.none()

    # non-empty allow-list that does not name this student
    restricted = (
        Exam.objects.filter(allowed_students__isnull=False)
        .exclude(allowed_students=student)
        .values("id")
    )
    completed = ExamAttempt.objects.filter(
        student=student,
        status=ExamAttempt.Status.COMPLETED,
        exam__isnull=False,
    ).values("exam_id")

    return (
        Exam.objects.filter(
            is_active=True,
            subject__in=student.subjects.all(),
        )
        .exclude(id__in=restricted)
        .exclude(id__in=completed)
        .select_related("subject", "settings")
        .distinct()
        .order_by("-created_at")
    )


# ---------------------------------------------------------------------
# validation helpers
# ---------------------------------------------------------------------

def _ensure_teaches(teacher, subject_id: int) -> None:
    if not teacher.teaches(subject_id):
        raise InvariantViolation(
            "Subject is not taught by this teacher.",
            code="SUBJECT_NOT_TAUGHT",
            context={"subject_id": subject_id},
        )


def _resolve_allowed_students(subject_id: int, student_ids: Iterable[int]):
    ids = sorted({int(x) for x in (student_ids or [])})
    students = list(Student.objects.filter(id__in=ids))
    missing = sorted(set(ids) - {s.id for s in students})
    if missing:
        raise InvariantViolation(
            "Unknown student.",
            code="UNKNOWN_STUDENT",
            context={"student_ids": missing},
        )

    enrolled = set(
        Student.objects.filter(id__in=ids, subjects__id=subject_id).values_list("id", flat=True)
    )
    outside = sorted(set(ids) - enrolled)
    if outside:
        raise InvariantViolation(
            "Student is not enrolled in the exam subject.",
            code="STUDENT_NOT_ENROLLED",
            context={"student_ids": outside},
        )
    return students


def _apply_settings(exam_settings: ExamSettings, values: Dict[str, Any]) -> None:
    unknown = sorted(set(values) - set(SETTINGS_FIELDS))
    if unknown:
        raise ValidationFailed(
            "Unknown settings field.",
            code="UNKNOWN_SETTING",
            context={"fields": unknown},
        )
    for key, value in values.items():
        setattr(exam_settings, key, value)
    if exam_settings.time_limit < 1:
        raise ValidationFailed("time_limit must be at least 1 minute.", code="INVALID_TIME_LIMIT")
    exam_settings.save()


# ---------------------------------------------------------------------
# access code
# ---------------------------------------------------------------------

def generate_access_code() -> str:
    return secrets.token_hex(4).upper()


@transaction.atomic
def configure_access_code(
    *,
    exam: Exam,
    code: Optional[str] = None,
    max_usage_count: Optional[int] = None,
    allow_reuse: Optional[bool] = None,
    valid_until=None,
) -> ExamAccessCode:
    """
    Create or merge the exam access code.
    Only the given fields change; usage_count and used_by are kept.
    """
    access_code = ExamAccessCode.objects.select_for_update().filter(exam=exam).first()
    if access_code is None:
        access_code = ExamAccessCode(exam=exam, code=(code or "").strip() or generate_access_code())
    elif code is not None:
        access_code.code = code.strip() or access_code.code

    if max_usage_count is not None:
        if int(max_usage_count) < 1:
            raise ValidationFailed("max_usage_count must be positive.", code="INVALID_MAX_USAGE")
        access_code.max_usage_count = int(max_usage_count)
    if allow_reuse is not None:
        access_code.allow_reuse = bool(allow_reuse)
    if valid_until is not None:
        access_code.valid_until = valid_until

    access_code.save()
    logger.info(
        "[configure_access_code] exam_id=%s max_usage=%s allow_reuse=%s",
        exam.id,
        access_code.max_usage_count,
        access_code.allow_reuse,
    )
    return access_code


@transaction.atomic
def clear_access_code(*, exam: Exam) -> bool:
    deleted, _ = ExamAccessCode.objects.filter(exam=exam).delete()
    return bool(deleted)


# ---------------------------------------------------------------------
# create / update / delete
# ---------------------------------------------------------------------

@transaction.atomic
def create_exam(
    *,
    teacher,
    subject_id: int,
    title: str,
    description: str = "",
    instructions: str = "",
    allowed_student_ids: Iterable[int] = (),
    settings: Optional[Dict[str, Any]] = None,
    access_code: Optional[Dict[str, Any]] = None,
) -> Exam:
    """
    New exams are always inactive; secret_key is generated by the model default.
    """
    if not teacher.can_create_exam:
        raise ForbiddenError("Teacher may not create exams.", code="CREATE_NOT_PERMITTED")

    title = (title or "").strip()
    if not title:
        raise ValidationFailed("title is required.", code="TITLE_REQUIRED")

    _ensure_teaches(teacher, subject_id)
    students = _resolve_allowed_students(subject_id, allowed_student_ids)

    exam = Exam.objects.create(
        teacher=teacher,
        subject_id=subject_id,
        title=title,
        description=description or "",
        instructions=instructions or "",
        is_active=False,
    )
    if students:
        exam.allowed_students.set(students)

    _apply_settings(ExamSettings(exam=exam), dict(settings or {}))

    if access_code:
        configure_access_code(exam=exam, **access_code)

    logger.info(
        "[create_exam] exam_id=%s teacher_id=%s subject_id=%s",
        exam.id,
        teacher.id,
        subject_id,
    )
    return exam


@transaction.atomic
def update_exam(
    *,
    teacher,
    exam_id: int,
    fields: Optional[Dict[str, Any]] = None,
    subject_id: Optional[int] = None,
    allowed_student_ids: Optional[Iterable[int]] = None,
    settings: Optional[Dict[str, Any]] = None,
    access_code: Optional[Dict[str, Any]] = None,
) -> Exam:
    """
    Partial update. is_active is not touched here (see activation).
    """
    exam = get_exam_for_teacher(teacher, exam_id, for_update=True)

    changed = []
    for key, value in (fields or {}).items():
        if key not in EXAM_FIELDS:
            raise ValidationFailed("Unknown exam field.", code="UNKNOWN_FIELD", context={"field": key})
        setattr(exam, key, value)
        changed.append(key)

    if subject_id is not None and int(subject_id) != exam.subject_id:
        _ensure_teaches(teacher, int(subject_id))
        exam.subject_id = int(subject_id)
        changed.append("subject")

    if changed:
        if not (exam.title or "").strip():
            raise ValidationFailed("title is required.", code="TITLE_REQUIRED")
        exam.save(update_fields=changed + ["updated_at"])

    if allowed_student_ids is not None:
        exam.allowed_students.set(_resolve_allowed_students(exam.subject_id, allowed_student_ids))
    elif "subject" in changed:
        # the existing allow-list must still be enrolled in the new subject
        _resolve_allowed_students(
            exam.subject_id, exam.allowed_students.values_list("id", flat=True)
        )

    if settings:
        exam_settings, _ = ExamSettings.objects.get_or_create(exam=exam)
        _apply_settings(exam_settings, dict(settings))
        # a live exam switched to instant results must already be gradable
        if exam.is_active and exam_settings.show_result_at_end:
            validate_for_activation(exam)

    if access_code:
        configure_access_code(exam=exam, **access_code)

    logger.info("[update_exam] exam_id=%s fields=%s", exam.id, changed)
    return exam


@transaction.atomic
def delete_exam(*, teacher, exam_id: int) -> None:
    """
    Explicit cascade: access code, settings, options, answers, questions, exam.
    Attempts stay as history with exam set to NULL.
    """
    from apps.domains.results.models import AttemptAnswer

    exam = get_exam_for_teacher(teacher, exam_id, for_update=True)

    question_ids = list(Question.objects.filter(exam=exam).values_list("id", flat=True))

    ExamAccessCode.objects.filter(exam=exam).delete()
    ExamSettings.objects.filter(exam=exam).delete()
    Option.objects.filter(question_id__in=question_ids).delete()
    Answer.objects.filter(question_id__in=question_ids).delete()
    AttemptAnswer.objects.filter(question_id__in=question_ids).update(question=None)
    Question.objects.filter(id__in=question_ids).delete()
    exam.allowed_students.clear()
    exam.delete()

    logger.info(
        "[delete_exam] exam_id=%s teacher_id=%s questions=%s",
        exam_id,
        teacher.id,
        len(question_ids),
    )
